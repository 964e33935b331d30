"""Record models for migration data."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from enum import Enum

from ..services.fields import first_defined


FOREIGN_KEY_VIOLATION_CODE = "23503"


class RecordOutcome(str, Enum):
    """Outcome of migrating a single source document."""
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass(frozen=True)
class SourceDocument:
    """A document read from the source store. Never mutated by the engine."""
    id: str
    collection: str
    data: Dict[str, Any] = field(default_factory=dict)

    def first(self, *names: str, default: Any = None) -> Any:
        """Resolve a field through an ordered chain of names, then a default."""
        return first_defined(self.data, *names, default=default)

    @property
    def scope_ref(self) -> Optional[str]:
        """Source scope (store) id the document declares, if any."""
        if self.collection == "stores":
            return self.id
        value = self.first("storeId", "store_id")
        return str(value) if value is not None else None


@dataclass(frozen=True)
class Skip:
    """Explicit "unresolvable, do not write" result of a mapper."""
    reason: str


@dataclass
class UpsertResult:
    """Result of a single write against the target store."""
    table: str
    primary_key: Optional[str] = None
    success: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def is_foreign_key_violation(self) -> bool:
        """Check if the target rejected the row for a missing parent."""
        if self.error_code == FOREIGN_KEY_VIOLATION_CODE:
            return True
        return bool(self.error) and "violates foreign key constraint" in self.error
