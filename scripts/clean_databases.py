#!/usr/bin/env python3
"""
Development script to wipe the pipeline's MongoDB collections.

WARNING: This script deletes ALL videos, transcripts, chunks and jobs.
Only use in development environments!

Usage:
    python scripts/clean_databases.py [--dry-run] [-y]

Options:
    --dry-run   Show what would be deleted without actually deleting
    -y, --yes   Skip confirmation prompt
"""

import argparse
import asyncio
import sys
from dataclasses import dataclass

from videochat.commons.infrastructure.documentdb import DocumentDBBase
from videochat.commons.settings import Settings, get_settings
from videochat.infrastructure.factory import InfrastructureFactory


@dataclass
class CleanupArgs:
    """Parsed command line arguments."""

    dry_run: bool
    skip_confirm: bool


def target_collections(settings: Settings) -> list[str]:
    collections = settings.document_db.collections
    return [
        collections.videos,
        collections.transcripts,
        collections.chunks,
        collections.jobs,
    ]


async def _clean_collection(
    db: DocumentDBBase, collection_name: str, dry_run: bool
) -> int:
    """Clean a single collection and return the number of documents removed."""
    doc_count = await db.count(collection_name)

    if doc_count == 0:
        print(f"  Collection '{collection_name}' is already empty")
        return 0

    if dry_run:
        msg = f"  [DRY-RUN] Would delete {doc_count} documents"
        print(f"{msg} from '{collection_name}'")
        return 0

    deleted = await db.delete_many(collection_name, {})
    print(f"  Deleted {deleted} documents from '{collection_name}'")
    return deleted


async def clean_mongodb(settings: Settings, dry_run: bool = False) -> int:
    """Clean all pipeline collections."""
    print("\n=== Cleaning MongoDB ===")

    factory = InfrastructureFactory(settings)
    db = factory.get_document_db()
    total = 0
    try:
        for collection_name in target_collections(settings):
            total += await _clean_collection(db, collection_name, dry_run)
    finally:
        await factory.close_all()
    return total


def parse_args() -> CleanupArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Clean the development MongoDB collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    parser.add_argument(
        "-y", "--yes", action="store_true", help="Skip confirmation prompt"
    )

    args = parser.parse_args()
    return CleanupArgs(dry_run=args.dry_run, skip_confirm=args.yes)


def main() -> None:
    """Main entry point."""
    args = parse_args()
    settings = get_settings()

    print("=" * 50)
    print("  DATABASE CLEANUP SCRIPT - DEVELOPMENT ONLY")
    print("=" * 50)
    print(f"\nDatabase: {settings.document_db.database}")
    print(f"Collections: {', '.join(target_collections(settings))}")
    print(f"Mode: {'DRY-RUN' if args.dry_run else 'DESTRUCTIVE'}")

    if not args.skip_confirm and not args.dry_run:
        response = input("\nAre you sure you want to continue? [y/N]: ")
        if response.lower() not in ("y", "yes"):
            print("Aborted.")
            sys.exit(0)

    try:
        asyncio.run(clean_mongodb(settings, args.dry_run))
    except Exception as e:
        print(f"\nCleanup failed: {e}")
        sys.exit(1)

    print("\n" + "=" * 50)
    print("Cleanup completed successfully!")
    print("=" * 50)


if __name__ == "__main__":
    main()
