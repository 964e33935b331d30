"""JSON export snapshot extractor."""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from .base import BaseExtractor, IDENTITY_COLLECTION
from ..models.record import SourceDocument

logger = logging.getLogger(__name__)


class JSONExportExtractor(BaseExtractor):
    """
    Extractor for collection snapshots exported to disk.

    Each collection lives in ``<export_dir>/<collection>.json`` and holds
    either a list of objects carrying an ``id`` field, or an object keyed by
    document id. Auth users live in ``auth_users.json`` in the same layout.
    """

    def __init__(
        self,
        export_dir: Union[str, Path],
        id_field: str = "id",
        encoding: str = "utf-8"
    ):
        """
        Initialize the JSON export extractor.

        Args:
            export_dir: Directory containing one JSON file per collection
            id_field: Field holding the document id in list-shaped exports
            encoding: File encoding
        """
        super().__init__()
        self.export_dir = Path(export_dir)
        self.id_field = id_field
        self.encoding = encoding

    def fetch(self, collection: str) -> List[SourceDocument]:
        """Read one exported collection."""
        file_path = self.export_dir / f"{collection}.json"

        if not file_path.exists():
            self.add_warning(f"No export file for {collection}: {file_path}")
            return []

        with open(file_path, "r", encoding=self.encoding) as f:
            payload = json.load(f)

        documents = self._parse(payload, collection)
        logger.info(f"Read {len(documents)} {collection} documents from {file_path}")
        return documents

    def fetch_identities(self) -> List[SourceDocument]:
        """Read exported auth users."""
        return self.fetch(IDENTITY_COLLECTION)

    def _parse(self, payload: Any, collection: str) -> List[SourceDocument]:
        """Convert an export payload into documents."""
        documents = []

        if isinstance(payload, dict):
            for doc_id, data in payload.items():
                documents.append(self.create_document(doc_id, collection, self._fields(data)))
            return documents

        if not isinstance(payload, list):
            raise ValueError(f"Unsupported export layout for {collection}: {type(payload).__name__}")

        for position, item in enumerate(payload):
            data = self._fields(item)
            doc_id = data.get(self.id_field)
            if doc_id is None or doc_id == "":
                self.add_warning(f"{collection} entry {position} has no {self.id_field}, ignored")
                continue
            documents.append(self.create_document(doc_id, collection, data))

        return documents

    @staticmethod
    def _fields(item: Any) -> Dict[str, Any]:
        if not isinstance(item, dict):
            raise ValueError(f"Export entries must be objects, got {type(item).__name__}")
        return item
