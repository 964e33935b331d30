"""Migration execution models."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from enum import Enum
from datetime import datetime
import uuid

from .record import RecordOutcome


class MigrationStatus(str, Enum):
    """Status of a migration run."""
    PENDING = "pending"
    INDEXING = "indexing"
    MIGRATING = "migrating"
    COMPLETED = "completed"
    FAILED = "failed"


class SourceType(str, Enum):
    """Supported source stores."""
    FIRESTORE = "firestore"
    JSON = "json"  # Collection export files on disk


@dataclass
class ProblemRecord:
    """A skipped or errored source document, kept for manual follow-up."""
    source_id: str
    outcome: RecordOutcome
    reason: str

    def __str__(self) -> str:
        return f"[{self.outcome.value}] {self.source_id}: {self.reason}"


@dataclass
class EntityTally:
    """Counts for one entity type in a migration run."""
    entity: str
    table: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    fetched: int = 0
    attempted: int = 0
    succeeded: int = 0
    skipped: int = 0
    errored: int = 0
    failed: bool = False  # Collection could not be read
    failure: Optional[str] = None
    problems: List[ProblemRecord] = field(default_factory=list)

    def record(self, outcome: RecordOutcome, source_id: str = "", reason: str = "") -> None:
        """Count one processed document."""
        if outcome == RecordOutcome.SUCCEEDED:
            self.succeeded += 1
            return

        if outcome == RecordOutcome.SKIPPED:
            self.skipped += 1
        else:
            self.errored += 1
        self.problems.append(ProblemRecord(source_id=source_id, outcome=outcome, reason=reason))

    def mark_failed(self, message: str) -> None:
        """Mark the whole entity type as unreadable."""
        self.failed = True
        self.failure = message

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def summary_line(self) -> str:
        """One-line human-readable tally."""
        if self.failed:
            return f"{self.entity}: FAILED ({self.failure})"
        return (
            f"{self.entity}: {self.succeeded} succeeded, {self.errored} errored, "
            f"{self.skipped} skipped ({self.attempted} attempted)"
        )


@dataclass
class MigrationReport:
    """A complete migration run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: MigrationStatus = MigrationStatus.PENDING
    dry_run: bool = False
    scope_filter: Optional[str] = None

    # Timing
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    # Progress
    tallies: List[EntityTally] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get duration in seconds."""
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def add_entity(self, entity: str, table: str) -> EntityTally:
        """Add a tally for the next entity type."""
        tally = EntityTally(entity=entity, table=table)
        self.tallies.append(tally)
        return tally

    def get_tally(self, entity: str) -> Optional[EntityTally]:
        """Get the tally of an entity type."""
        for tally in self.tallies:
            if tally.entity == entity:
                return tally
        return None

    @property
    def total_attempted(self) -> int:
        return sum(t.attempted for t in self.tallies)

    @property
    def total_succeeded(self) -> int:
        return sum(t.succeeded for t in self.tallies)

    @property
    def total_skipped(self) -> int:
        return sum(t.skipped for t in self.tallies)

    @property
    def total_errored(self) -> int:
        return sum(t.errored for t in self.tallies)

    @property
    def failed_entities(self) -> List[str]:
        """Entity types whose collection could not be read."""
        return [t.entity for t in self.tallies if t.failed]


ENV_VARS = {
    "firebase_credentials": ("FIREBASE_CREDENTIALS", "GOOGLE_APPLICATION_CREDENTIALS"),
    "firebase_project_id": ("FIREBASE_PROJECT_ID",),
    "export_dir": ("SOURCE_EXPORT_DIR",),
    "target_url": ("SUPABASE_URL",),
    "target_service_key": ("SUPABASE_SERVICE_KEY",),
    "temporary_password": ("MIGRATION_TEMP_PASSWORD",),
}


@dataclass
class MigrationConfig:
    """Configuration for a migration."""

    # Source
    source_type: SourceType = SourceType.FIRESTORE
    firebase_credentials: Optional[str] = None  # Service account JSON file
    firebase_project_id: Optional[str] = None
    export_dir: Optional[str] = None  # For JSON sources

    # Target (service key bypasses row-level security)
    target_url: str = ""
    target_service_key: Optional[str] = None

    # Execution options
    entity_types: List[str] = field(default_factory=lambda: ["all"])
    scope_filter: Optional[str] = None  # Source store id
    dry_run: bool = False
    page_size: int = 1000
    request_timeout: float = 30.0

    # Mapping options
    placeholder_email_domain: str = "pos.placeholder"
    excluded_profile_emails: List[str] = field(default_factory=list)

    # Identity provisioning
    temporary_password: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation (secrets omitted)."""
        return {
            "source_type": self.source_type.value,
            "firebase_credentials": self.firebase_credentials,
            "firebase_project_id": self.firebase_project_id,
            "export_dir": self.export_dir,
            "target_url": self.target_url,
            "entity_types": self.entity_types,
            "scope_filter": self.scope_filter,
            "dry_run": self.dry_run,
            "page_size": self.page_size,
            "request_timeout": self.request_timeout,
            "placeholder_email_domain": self.placeholder_email_domain,
            "excluded_profile_emails": self.excluded_profile_emails,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MigrationConfig":
        """Create from dictionary representation."""
        entity_types = data.get("entity_types", ["all"])
        if isinstance(entity_types, str):
            entity_types = [e.strip() for e in entity_types.split(",") if e.strip()]

        return cls(
            source_type=SourceType(data.get("source_type", "firestore")),
            firebase_credentials=data.get("firebase_credentials"),
            firebase_project_id=data.get("firebase_project_id"),
            export_dir=data.get("export_dir"),
            target_url=data.get("target_url", ""),
            target_service_key=data.get("target_service_key"),
            entity_types=entity_types or ["all"],
            scope_filter=data.get("scope_filter"),
            dry_run=data.get("dry_run", False),
            page_size=data.get("page_size", 1000),
            request_timeout=data.get("request_timeout", 30.0),
            placeholder_email_domain=data.get("placeholder_email_domain", "pos.placeholder"),
            excluded_profile_emails=data.get("excluded_profile_emails", []),
            temporary_password=data.get("temporary_password"),
        )

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> "MigrationConfig":
        """Fill settings not given in the config file from the environment."""
        environ = os.environ if environ is None else environ

        for attr, names in ENV_VARS.items():
            if getattr(self, attr):
                continue
            for name in names:
                if environ.get(name):
                    setattr(self, attr, environ[name])
                    break

        return self

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MigrationConfig":
        """Create from environment variables only."""
        return cls().apply_env(environ)

    def validate(self) -> List[str]:
        """
        Validate the configuration.

        Returns:
            List of validation error messages
        """
        errors = []

        if self.source_type == SourceType.JSON and not self.export_dir:
            errors.append("export_dir (SOURCE_EXPORT_DIR) is required for JSON sources")

        # Dry runs still read the target to build the reference index
        if not self.target_url:
            errors.append("target_url (SUPABASE_URL) is required")
        if not self.target_service_key:
            errors.append("target_service_key (SUPABASE_SERVICE_KEY) is required")

        if self.page_size <= 0:
            errors.append("page_size must be positive")

        return errors
