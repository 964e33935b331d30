"""Base loader interface for the target store."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
import logging

from ..models.record import UpsertResult

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Base class for target store writers.

    The only write the engine needs is an upsert keyed by primary key: it
    inserts a new row or overwrites the row sharing the same key. Loaders
    also serve the whole-table reads used to build the reference index.
    """

    def __init__(self, dry_run: bool = False):
        """
        Initialize the loader.

        Args:
            dry_run: If True, report writes as successful without sending them
        """
        self.dry_run = dry_run

    def upsert(
        self,
        table: str,
        record: Dict[str, Any],
        primary_key: str = "id"
    ) -> UpsertResult:
        """
        Insert or overwrite a row.

        Args:
            table: Target table name
            record: Column values, JSON-compatible
            primary_key: Name of the primary key column

        Returns:
            UpsertResult describing the outcome; write failures are reported
            here rather than raised
        """
        key = record.get(primary_key)
        if self.dry_run:
            logger.debug(f"[dry run] upsert {table} {key}")
            return UpsertResult(table=table, primary_key=key, success=True)
        return self._upsert(table, record, primary_key)

    @abstractmethod
    def _upsert(self, table: str, record: Dict[str, Any], primary_key: str) -> UpsertResult:
        pass

    @abstractmethod
    def fetch_all(self, table: str, columns: str) -> List[Dict[str, Any]]:
        """
        Read every row of a table.

        Args:
            table: Target table name
            columns: Comma-separated column list

        Returns:
            Rows as dictionaries

        Raises:
            Exception: When the table cannot be read
        """
        pass

    def create_identity(self, payload: Dict[str, Any]) -> UpsertResult:
        """
        Create an auth identity in the target.

        Args:
            payload: Identity attributes (id, email, password, metadata)

        Returns:
            UpsertResult describing the outcome
        """
        if self.dry_run:
            logger.debug(f"[dry run] create identity {payload.get('email')}")
            return UpsertResult(table="auth.users", primary_key=payload.get("id"), success=True)
        return self._create_identity(payload)

    def _create_identity(self, payload: Dict[str, Any]) -> UpsertResult:
        raise NotImplementedError(f"{type(self).__name__} cannot create identities")

    def validate_connection(self) -> bool:
        """Validate the connection to the target store."""
        return True
