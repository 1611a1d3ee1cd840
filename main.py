#!/usr/bin/env python3
"""
notion-page-db - Notion workspace to Notion database sync

Main entry point. Reads content pages from the configured source page,
enriches them, archives their images and writes them to the destination
database.
"""

import logging
import sys
import argparse

from notion_page_db.config import config
from notion_page_db.models import MigrationResult
from notion_page_db.notion import MockDocumentSource
from notion_page_db.workflow import MigrationManager


def setup_logging(verbose: bool = False):
    """Configure logging for the application."""
    level_name = "DEBUG" if verbose else config.get("logging.level", "INFO")
    level = getattr(logging, level_name.upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file = config.log_filename

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ],
        force=True
    )


def print_summary(result: MigrationResult):
    """Print a human readable summary of a sync run."""
    print("\n" + "=" * 60)
    if result.success:
        print("SYNC COMPLETED")
    else:
        print("SYNC FAILED")
    print("=" * 60)
    print(f"Categories:    {result.categories}")
    print(f"Content pages: {result.total_pages}")
    print(f"Updated:       {result.updated_pages}")
    print(f"Failed:        {result.failed_pages}")
    for error in result.errors:
        print(f"  - {error}")


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="notion-page-db - Sync Notion pages into a Notion database",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                  # Full sync
  python main.py --no-enhance --no-images         # Sync text only
  python main.py --parent-page-id <id>            # Create the database if missing
  python main.py --dry-run --mock-source          # Offline run against sample data
        """
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Extra YAML or JSON configuration merged on top of config.yaml"
    )

    parser.add_argument(
        "--no-enhance",
        action="store_true",
        help="Skip AI enrichment of titles, summaries and tags"
    )

    parser.add_argument(
        "--no-images",
        action="store_true",
        help="Skip image archiving"
    )

    parser.add_argument(
        "--no-generate-images",
        action="store_true",
        help="Archive existing images but do not generate missing ones"
    )

    parser.add_argument(
        "--parent-page-id",
        type=str,
        help="Create the destination database under this page if it does not exist"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read and enrich content without writing to the database or bucket"
    )

    parser.add_argument(
        "--mock-source",
        action="store_true",
        help="Read from the built-in sample workspace instead of the Notion API"
    )

    parser.add_argument(
        "--verify-only",
        action="store_true",
        help="Only check that the destination database is reachable"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="notion-page-db 0.1.0"
    )

    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_arguments(argv)

    if args.config:
        try:
            config.merge_file(args.config)
        except (OSError, ValueError) as e:
            print(f"Error loading configuration: {e}", file=sys.stderr)
            return 1

    setup_logging(args.verbose)
    logging.info("notion-page-db - Notion workspace sync")

    source = None
    if args.mock_source:
        source = MockDocumentSource()
        config.set("notion.source_page_id", "root")

    if not (args.dry_run and args.mock_source):
        validation = config.validate()
        for warning in validation.warnings:
            logging.warning(warning)
        if not validation.valid:
            for error in validation.errors:
                logging.error(error)
            return 1

    try:
        manager = MigrationManager(config, source=source)
    except ValueError as e:
        logging.error(f"Failed to initialize: {e}")
        return 1

    if args.verify_only:
        verification = manager.verify(args.parent_page_id)
        if verification.success:
            logging.info(f"{verification.message}: {verification.database_id}")
            return 0
        for error in verification.errors:
            logging.error(error)
        return 1

    try:
        result = manager.migrate(
            enhance_content=not args.no_enhance and config.get("migration.enhance_content", True),
            process_images=not args.no_images and config.get("migration.process_images", True),
            generate_images=not args.no_generate_images and config.get("migration.generate_images", True),
            parent_page_id=args.parent_page_id,
            dry_run=args.dry_run
        )
    except KeyboardInterrupt:
        logging.info("Sync interrupted by user")
        return 1

    print_summary(result)
    return 0 if result.success and result.failed_pages == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
