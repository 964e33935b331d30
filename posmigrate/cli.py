"""Command line interface for the POS data migration."""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .models.migration import MigrationConfig, MigrationReport, EntityTally, SourceType
from .mappers import default_registry
from .orchestrator import MigrationOrchestrator, create_extractor, create_loader
from .services.identifiers import IdentifierTranslator
from .services.identity_migration import IdentityMigrator
from .services.reference_index import ReferenceIndexError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        prog="posmigrate",
        description="POS Data Migration - Move Firestore data into a Supabase/PostgREST database"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run migration
    run_parser = subparsers.add_parser("run", help="Migrate entity data")
    run_parser.add_argument("entities", nargs="*", metavar="ENTITY", help="Entity types to migrate (default: all)")
    _add_common_arguments(run_parser)
    run_parser.add_argument("--scope", help="Only migrate documents of this source store id")

    # Provision identities
    identities_parser = subparsers.add_parser("identities", help="Create target auth users for source auth users")
    _add_common_arguments(identities_parser)

    # List entity types
    subparsers.add_parser("entities", help="List entity types in migration order")

    # Translate ids
    translate_parser = subparsers.add_parser("translate", help="Print the canonical id of source ids")
    translate_parser.add_argument("ids", nargs="+", metavar="ID", help="Source ids")

    args = parser.parse_args(argv)

    # Set up logging
    log_level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    if args.command == "run":
        return run_migration(args)
    elif args.command == "identities":
        return run_identities(args)
    elif args.command == "entities":
        return list_entities(args)
    elif args.command == "translate":
        return translate_ids(args)
    else:
        parser.print_help()
        return EXIT_USAGE


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to migration config file (JSON)")
    parser.add_argument("--source", choices=[t.value for t in SourceType], help="Source store type")
    parser.add_argument("--export-dir", help="Directory of exported collections (json source)")
    parser.add_argument("--dry-run", action="store_true", help="Simulate without writing to the target")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")


def load_config(args) -> MigrationConfig:
    """
    Build the configuration from the config file, environment and flags.

    Raises:
        OSError: If the config file cannot be read
        ValueError: If the config file is not valid JSON or has bad values
    """
    config_data = {}
    if getattr(args, "config", None):
        with open(args.config) as f:
            config_data = json.load(f)

    config = MigrationConfig.from_dict(config_data).apply_env()

    if getattr(args, "source", None):
        config.source_type = SourceType(args.source)
    if getattr(args, "export_dir", None):
        config.export_dir = args.export_dir
    if getattr(args, "scope", None):
        config.scope_filter = args.scope
    if getattr(args, "entities", None):
        config.entity_types = args.entities
    if args.dry_run:
        config.dry_run = True

    return config


def _load_valid_config(args) -> Optional[MigrationConfig]:
    """Load the configuration, printing problems; None when unusable."""
    try:
        config = load_config(args)
    except (OSError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return None

    errors = config.validate()
    if errors:
        print("Invalid configuration:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        return None

    return config


def run_migration(args) -> int:
    """Run the entity migration."""
    config = _load_valid_config(args)
    if config is None:
        return EXIT_USAGE

    registry = default_registry()
    try:
        registry.select(config.entity_types)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return EXIT_USAGE

    orchestrator = MigrationOrchestrator(
        config,
        create_extractor(config),
        create_loader(config),
        registry=registry,
    )

    try:
        report = orchestrator.run()
    except (ReferenceIndexError, ConnectionError) as e:
        print(f"Migration aborted: {e}", file=sys.stderr)
        return EXIT_FATAL

    print_report(report)
    return EXIT_OK


def run_identities(args) -> int:
    """Provision target identities for source auth users."""
    config = _load_valid_config(args)
    if config is None:
        return EXIT_USAGE

    loader = create_loader(config)
    if not loader.validate_connection():
        print("Failed to connect to target store", file=sys.stderr)
        return EXIT_FATAL

    migrator = IdentityMigrator(config, create_extractor(config), loader)
    try:
        tally = migrator.run()
    except Exception as e:
        logger.error(f"Identity provisioning failed: {e}")
        return EXIT_FATAL

    print("\n" + "=" * 60)
    print("IDENTITY PROVISIONING COMPLETE" + (" (DRY RUN)" if config.dry_run else ""))
    print("=" * 60)
    _print_tally(tally)
    return EXIT_OK


def list_entities(args) -> int:
    """Print the registered entity types in migration order."""
    for mapper in default_registry():
        columns = len(mapper.row_model.model_fields)
        print(
            f"{mapper.collection:<20} -> {mapper.table:<20} {columns:>3} columns  "
            f"tier {int(mapper.tier)}  ({mapper.scope_policy.value})"
        )
    return EXIT_OK


def translate_ids(args) -> int:
    """Print source id / canonical id pairs."""
    translator = IdentifierTranslator()
    for source_id in args.ids:
        print(f"{source_id}\t{translator.translate(source_id)}")
    return EXIT_OK


def print_report(report: MigrationReport) -> None:
    """Print the final per entity type summary and the records needing follow-up."""
    print("\n" + "=" * 60)
    print("MIGRATION COMPLETE" + (" (DRY RUN)" if report.dry_run else ""))
    print("=" * 60)
    print(f"Status: {report.status.value}")
    if report.scope_filter:
        print(f"Store: {report.scope_filter}")
    print(f"{'Entity':<20}{'Attempted':>10}{'Succeeded':>10}{'Errored':>10}{'Skipped':>10}")
    print("-" * 60)
    for tally in report.tallies:
        _print_tally(tally)
    print("-" * 60)
    print(
        f"{'Total':<20}{report.total_attempted:>10}{report.total_succeeded:>10}"
        f"{report.total_errored:>10}{report.total_skipped:>10}"
    )
    if report.failed_entities:
        print(f"Unreadable collections: {', '.join(report.failed_entities)}")
    if report.duration_seconds:
        print(f"Duration: {report.duration_seconds:.2f} seconds")

    problems = [(t.entity, p) for t in report.tallies for p in t.problems]
    if problems:
        print(f"\nRecords needing follow-up ({len(problems)}):")
        for entity, problem in problems:
            print(f"  {entity} {problem}")


def _print_tally(tally: EntityTally) -> None:
    if tally.failed:
        print(f"{tally.entity:<20} FAILED: {tally.failure}")
        return
    print(f"{tally.entity:<20}{tally.attempted:>10}{tally.succeeded:>10}{tally.errored:>10}{tally.skipped:>10}")


if __name__ == "__main__":
    sys.exit(main())
