"""
Unified CLI entry point for archive-ingest.

Usage:
    python -m archive_ingest.cli <command> [options]

Available commands:
    run             - Resolve, download, extract and upload resources
    resolve         - Show which archives a run would process
    list-resources  - List the resources in the catalogue

Examples:
    # All resources
    python -m archive_ingest.cli run

    # One resource, staging only (no upload)
    python -m archive_ingest.cli run --resource prices_weekly --no-upload

    # Dry resolution against the feed
    python -m archive_ingest.cli resolve --resource prices_daily
"""

import argparse
import json
import sys
from typing import List, Optional

from pydantic import ValidationError

from archive_ingest.config.resource_schema import (
    ResourcesValidationError,
    load_resources_config,
)
from archive_ingest.config.settings import get_settings
from archive_ingest.io.connectors.exceptions import ArchiveIngestError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="archive_ingest.cli",
        description="archive-ingest CLI - versioned vendor archive ingestion",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(
        title="commands",
        dest="command",
        required=True,
        help="Command to execute",
    )

    run_parser = subparsers.add_parser(
        "run", help="Resolve, download, extract and upload resources"
    )
    run_parser.add_argument(
        "--resource",
        action="append",
        dest="resources",
        default=None,
        help="Resource name to run (repeatable, default: all resources)",
    )
    run_parser.add_argument(
        "--no-upload",
        dest="upload",
        action="store_false",
        default=True,
        help="Stage extracted files without uploading them",
    )

    resolve_parser = subparsers.add_parser(
        "resolve", help="Show which archives a run would process"
    )
    resolve_parser.add_argument("--resource", required=True, help="Resource name")

    subparsers.add_parser("list-resources", help="List configured resources")

    for sub in subparsers.choices.values():
        sub.add_argument(
            "--config",
            default=None,
            help="Path to resources.yml (default: ARCHIVE_INGEST_RESOURCES_CONFIG)",
        )
    return parser


def _cmd_run(args: argparse.Namespace, config_path: str) -> int:
    from archive_ingest.orchestration.ingest_service import IngestService

    service = IngestService(resources=load_resources_config(config_path))
    try:
        results = service.ingest_all(args.resources, upload=args.upload)
    finally:
        service.close()

    for result in results:
        print(json.dumps(result.to_dict(), ensure_ascii=False))
    return 0 if all(r.ok for r in results) else 1


def _cmd_resolve(args: argparse.Namespace, config_path: str) -> int:
    from archive_ingest.orchestration.ingest_service import IngestService

    service = IngestService(resources=load_resources_config(config_path))
    try:
        archives = service.resolve(args.resource)
    finally:
        service.close()

    for archive in archives:
        print(archive)
    return 0


def _cmd_list_resources(config_path: str) -> int:
    config = load_resources_config(config_path)
    for name, spec in config.resources.items():
        cadence = "weekly" if spec.is_weekly else "daily"
        print(f"{name}\t{cadence}\t{spec.archive}\t{spec.file_names}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point with subcommand routing.

    Returns:
        Exit code (0 for success, 1 for any failed resource, 2 for config errors)
    """
    args = _build_parser().parse_args(argv)

    try:
        config_path = args.config or get_settings().resources_config
        if args.command == "run":
            return _cmd_run(args, config_path)
        if args.command == "resolve":
            return _cmd_resolve(args, config_path)
        return _cmd_list_resources(config_path)
    except (ResourcesValidationError, ValidationError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except ArchiveIngestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
