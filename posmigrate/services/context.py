"""Per-run migration context."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .identifiers import IdentifierTranslator
from .reference_index import ReferenceIndex
from ..models.migration import MigrationConfig


@dataclass
class MigrationContext:
    """
    State shared by the orchestrator and every mapper for one run.

    Constructed once by the orchestrator and passed by reference; nothing
    here outlives the run.
    """
    config: MigrationConfig
    index: ReferenceIndex
    translator: IdentifierTranslator = field(default_factory=IdentifierTranslator)

    def translate(self, source_id: Any) -> Optional[str]:
        """Translate a source id to its canonical identifier."""
        return self.translator.translate(source_id)
