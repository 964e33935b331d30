"""Data models for the migration engine."""

from .record import (
    RecordOutcome,
    SourceDocument,
    Skip,
    UpsertResult,
)
from .migration import (
    MigrationConfig,
    MigrationReport,
    MigrationStatus,
    EntityTally,
    ProblemRecord,
    SourceType,
)
from .schema import (
    TargetRow,
    ScopedRow,
)

__all__ = [
    "RecordOutcome",
    "SourceDocument",
    "Skip",
    "UpsertResult",
    "MigrationConfig",
    "MigrationReport",
    "MigrationStatus",
    "EntityTally",
    "ProblemRecord",
    "SourceType",
    "TargetRow",
    "ScopedRow",
]
