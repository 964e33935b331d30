"""Migration orchestrator - coordinates a complete migration run."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .models.migration import (
    EntityTally,
    MigrationConfig,
    MigrationReport,
    MigrationStatus,
    SourceType,
)
from .models.record import RecordOutcome, SourceDocument, Skip
from .services.context import MigrationContext
from .services.reference_index import ReferenceIndexBuilder, ReferenceIndexError
from .mappers import EntityMapper, MapperRegistry, default_registry
from .extractors.base import BaseExtractor
from .extractors.firestore_extractor import FirestoreExtractor
from .extractors.json_extractor import JSONExportExtractor
from .loaders.base import BaseLoader
from .loaders.postgrest_loader import PostgRESTLoader

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MigrationOrchestrator:
    """
    Orchestrates a migration run.

    Handles:
    - Building the reference index from the target's current state
    - Selecting entity types and running them in dependency order
    - Mapping each source document and upserting the resulting row
    - Classifying every document as succeeded, skipped or errored
    - Per entity type tallies and the final report

    The run is strictly sequential and never stops on a per-record
    problem. Only a failure to build the reference index aborts it.
    """

    def __init__(
        self,
        config: MigrationConfig,
        extractor: BaseExtractor,
        loader: BaseLoader,
        registry: Optional[MapperRegistry] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Migration configuration
            extractor: Source store reader
            loader: Target store writer
            registry: Mapper registry (all built-in mappers by default)
        """
        self.config = config
        self.extractor = extractor
        self.loader = loader
        self.registry = registry or default_registry()

        # Runtime state
        self.report: Optional[MigrationReport] = None
        self.context: Optional[MigrationContext] = None

    def run(self, entity_types: Optional[Sequence[str]] = None) -> MigrationReport:
        """
        Run the migration.

        Args:
            entity_types: Source collections to migrate; defaults to the
                configured ones, and None or "all" selects every type

        Returns:
            MigrationReport with per entity type tallies

        Raises:
            ValueError: If an entity type is not registered
            ConnectionError: If the target store is unreachable
            ReferenceIndexError: If the reference index cannot be built
        """
        if entity_types is None:
            entity_types = self.config.entity_types
        mappers = self.registry.select(entity_types)

        self.report = MigrationReport(
            dry_run=self.loader.dry_run,
            scope_filter=self.config.scope_filter,
        )
        self.report.started_at = _now()
        self.report.status = MigrationStatus.INDEXING

        if self.loader.dry_run:
            logger.info("DRY RUN: no writes will be sent to the target")

        try:
            if not self.loader.validate_connection():
                raise ConnectionError("Failed to connect to target store")

            logger.info("=== PHASE 1: REFERENCE INDEX ===")
            index = ReferenceIndexBuilder(
                self.loader,
                self.extractor,
                self.config.placeholder_email_domain,
            ).build()
        except (ConnectionError, ReferenceIndexError) as e:
            self.report.status = MigrationStatus.FAILED
            self.report.errors.append(str(e))
            self.report.completed_at = _now()
            logger.error(f"Migration aborted: {e}")
            raise

        self.context = MigrationContext(config=self.config, index=index)

        logger.info("=== PHASE 2: ENTITY MIGRATION ===")
        self.report.status = MigrationStatus.MIGRATING
        for mapper in mappers:
            tally = self.report.add_entity(mapper.collection, mapper.table)
            self._migrate_entity(mapper, tally)

        self.report.status = MigrationStatus.COMPLETED
        self.report.completed_at = _now()
        logger.info(
            f"=== MIGRATION COMPLETED: {self.report.total_succeeded} succeeded, "
            f"{self.report.total_errored} errored, {self.report.total_skipped} skipped ==="
        )
        return self.report

    def _migrate_entity(self, mapper: EntityMapper, tally: EntityTally) -> None:
        """Migrate every document of one entity type."""
        logger.info(f"Migrating {mapper.collection} -> {mapper.table}...")
        tally.started_at = _now()

        try:
            documents = self.extractor.fetch(mapper.collection)
        except Exception as e:
            tally.mark_failed(str(e))
            tally.completed_at = _now()
            logger.error(f"Failed to read {mapper.collection}: {e}")
            return

        tally.fetched = len(documents)
        documents = self._filter_scope(documents)

        for doc in documents:
            self._migrate_document(mapper, doc, tally)

        tally.completed_at = _now()
        logger.info(tally.summary_line())

    def _filter_scope(self, documents: List[SourceDocument]) -> List[SourceDocument]:
        """Keep only the documents of the configured source store, if any."""
        scope = self.config.scope_filter
        if not scope:
            return documents
        return [doc for doc in documents if doc.scope_ref == scope]

    def _migrate_document(self, mapper: EntityMapper, doc: SourceDocument, tally: EntityTally) -> None:
        """Map, write and classify a single document."""
        tally.attempted += 1

        try:
            row = mapper.map(doc, self.context)
        except Exception as e:
            tally.record(RecordOutcome.ERRORED, doc.id, f"mapping failed: {e}")
            logger.error(f"Error mapping {mapper.collection} {doc.id}: {e}")
            return

        if isinstance(row, Skip):
            tally.record(RecordOutcome.SKIPPED, doc.id, row.reason)
            logger.info(f"Skipping {mapper.collection} {doc.id}: {row.reason}")
            return

        result = self.loader.upsert(mapper.table, row.to_record(), row.primary_key_field)

        if result.success:
            tally.record(RecordOutcome.SUCCEEDED, doc.id)
            mapper.on_loaded(row, doc, self.context)
        elif result.is_foreign_key_violation:
            tally.record(RecordOutcome.SKIPPED, doc.id, "parent record not found (orphan)")
            logger.warning(f"Skipping {mapper.collection} {doc.id}: parent record not found (orphan)")
        else:
            tally.record(RecordOutcome.ERRORED, doc.id, result.error or "unknown error")
            logger.error(f"Error migrating {mapper.collection} {doc.id}: {result.error}")


def create_extractor(config: MigrationConfig) -> BaseExtractor:
    """Create an appropriate extractor for the configured source."""
    if config.source_type == SourceType.FIRESTORE:
        return FirestoreExtractor(
            credentials_path=config.firebase_credentials,
            project_id=config.firebase_project_id,
        )
    elif config.source_type == SourceType.JSON:
        return JSONExportExtractor(config.export_dir)
    else:
        raise ValueError(f"Unsupported source type: {config.source_type}")


def create_loader(config: MigrationConfig) -> BaseLoader:
    """Create the loader for the configured target."""
    return PostgRESTLoader(
        base_url=config.target_url,
        service_key=config.target_service_key or "",
        dry_run=config.dry_run,
        page_size=config.page_size,
        timeout=config.request_timeout,
    )
