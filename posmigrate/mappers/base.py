"""Entity mapper interface and registry."""

import logging
from abc import ABC, abstractmethod
from enum import Enum, IntEnum
from typing import ClassVar, Dict, Iterable, Iterator, List, Optional, Sequence, Type, Union

from ..models.record import SourceDocument, Skip
from ..models.schema import TargetRow
from ..services.context import MigrationContext
from ..services.timestamps import normalize_timestamp

logger = logging.getLogger(__name__)

MapResult = Union[TargetRow, Skip]


class ScopePolicy(str, Enum):
    """What a mapper does with a document whose store does not resolve."""
    NONE = "none"  # The entity is itself a scope
    STRICT = "strict"  # Skip the document
    REHOME = "rehome"  # Reassign it to the fallback store


class Tier(IntEnum):
    """Dependency tier; lower tiers are migrated first."""
    SCOPES = 1
    INDEPENDENT = 2
    REFERENCING = 3
    TRANSACTIONAL = 4
    DETAIL = 5


class EntityMapper(ABC):
    """
    Maps one source collection onto one target table.

    ``map`` is pure apart from reading the context: it returns a populated
    row or an explicit Skip, and never raises for a missing optional field.
    ``on_loaded`` runs after the row was written and may append to the
    reference index so that later entity types can link to it.
    """

    collection: ClassVar[str]
    table: ClassVar[str]
    row_model: ClassVar[Type[TargetRow]]
    tier: ClassVar[Tier]
    scope_policy: ClassVar[ScopePolicy] = ScopePolicy.STRICT

    @abstractmethod
    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        """
        Map a source document to a target row.

        Args:
            doc: Source document
            ctx: Migration context (translator, reference index, config)

        Returns:
            Target row, or Skip when a required reference is unresolvable
        """
        pass

    def on_loaded(self, row: TargetRow, doc: SourceDocument, ctx: MigrationContext) -> None:
        """Hook called after ``row`` was written to the target."""

    def resolve_scope(self, doc: SourceDocument, ctx: MigrationContext) -> Union[Optional[str], Skip]:
        """
        Resolve the store a document belongs to.

        Returns the canonical store id when it exists in the target. Otherwise
        strict mappers return a Skip and rehoming mappers return the fallback
        store (None when no store exists yet).
        """
        scope_id = ctx.translate(doc.first("storeId", "store_id"))
        if ctx.index.is_valid_scope(scope_id):
            return scope_id

        if self.scope_policy == ScopePolicy.REHOME:
            fallback = ctx.index.fallback_scope
            logger.info(f"Rehoming {self.collection} {doc.id} from store {scope_id} to {fallback}")
            return fallback

        if scope_id is None:
            return Skip("no store reference")
        return Skip(f"store {scope_id} not found in target")

    @staticmethod
    def timestamp(doc: SourceDocument, *names: str) -> Optional[str]:
        """Resolve and normalize a timestamp field."""
        return normalize_timestamp(doc.first(*names))

    @staticmethod
    def reference(doc: SourceDocument, ctx: MigrationContext, *names: str) -> Optional[str]:
        """Resolve a foreign key field and translate it to a canonical id."""
        return ctx.translate(doc.first(*names))

    def created_at(self, doc: SourceDocument) -> Optional[str]:
        return self.timestamp(doc, "createdAt", "created_at")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.collection} -> {self.table}>"


class MapperRegistry:
    """
    Ordered registry of entity mappers, keyed by source collection.

    Iteration follows dependency order: by tier, then by registration order
    within a tier.
    """

    def __init__(self, mappers: Iterable[EntityMapper] = ()):
        self._mappers: Dict[str, EntityMapper] = {}
        for mapper in mappers:
            self.register(mapper)

    def register(self, mapper: EntityMapper) -> None:
        """Register a mapper for its collection."""
        if mapper.collection in self._mappers:
            raise ValueError(f"Mapper already registered for {mapper.collection}")
        self._mappers[mapper.collection] = mapper

    def get(self, collection: str) -> Optional[EntityMapper]:
        return self._mappers.get(collection)

    def ordered(self) -> List[EntityMapper]:
        """All mappers in dependency order."""
        # sorted() is stable, so registration order holds within a tier
        return sorted(self._mappers.values(), key=lambda m: m.tier)

    def names(self) -> List[str]:
        return [m.collection for m in self.ordered()]

    def select(self, entity_types: Optional[Sequence[str]] = None) -> List[EntityMapper]:
        """
        Select mappers for a run, in dependency order.

        Args:
            entity_types: Collection names; None, empty or "all" selects all

        Raises:
            ValueError: If a name is not registered
        """
        if not entity_types or "all" in entity_types:
            return self.ordered()

        unknown = [name for name in entity_types if name not in self._mappers]
        if unknown:
            raise ValueError(
                f"Unknown entity types: {', '.join(unknown)} "
                f"(available: {', '.join(self.names())})"
            )

        wanted = set(entity_types)
        return [m for m in self.ordered() if m.collection in wanted]

    def __iter__(self) -> Iterator[EntityMapper]:
        return iter(self.ordered())

    def __len__(self) -> int:
        return len(self._mappers)

    def __contains__(self, collection: object) -> bool:
        return collection in self._mappers
