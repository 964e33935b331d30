"""Base extractor interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..models.record import SourceDocument

logger = logging.getLogger(__name__)

IDENTITY_COLLECTION = "auth_users"


class BaseExtractor(ABC):
    """
    Base class for source store readers.

    Extractors enumerate and read whole collections from the source
    document store and convert them to SourceDocument objects. They never
    write to the source.
    """

    def __init__(self):
        """Initialize the extractor."""
        self._warnings: List[str] = []

    @abstractmethod
    def fetch(self, collection: str) -> List[SourceDocument]:
        """
        Read every document of a collection.

        Args:
            collection: Source collection name

        Returns:
            Documents in the order the source returns them
        """
        pass

    @abstractmethod
    def fetch_identities(self) -> List[SourceDocument]:
        """
        Read every user of the source authentication service.

        Returns:
            One document per user; ``id`` is the source uid and ``data``
            carries at least ``email`` and ``displayName``
        """
        pass

    def create_document(
        self,
        id: Any,
        collection: str,
        data: Optional[Dict[str, Any]] = None
    ) -> SourceDocument:
        """Create a SourceDocument from raw source data."""
        return SourceDocument(id=str(id), collection=collection, data=dict(data or {}))

    def add_warning(self, message: str) -> None:
        """Add a warning to the extraction."""
        self._warnings.append(message)
        logger.warning(f"Extraction warning: {message}")

    @property
    def warnings(self) -> List[str]:
        return list(self._warnings)
