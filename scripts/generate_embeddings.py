#!/usr/bin/env python3
"""
Backfill embeddings for stored chunks that have none.

Usage:
    python scripts/generate_embeddings.py [video_id]

Without a video id every chunk missing an embedding is processed.
"""

import argparse
import asyncio
import sys

from videochat.commons.settings import get_settings
from videochat.commons.telemetry import configure_logging
from videochat.domain.exceptions import DomainException
from videochat.infrastructure.factory import InfrastructureFactory


async def generate_embeddings(video_id: str | None) -> int:
    """Run the backfill and return the number of failed chunks."""
    settings = get_settings()
    factory = InfrastructureFactory(settings)
    try:
        service = factory.get_chunk_embedding_service()
        stats = await service.backfill(video_id)
    finally:
        await factory.close_all()

    print(f"Chunks without embeddings: {stats.total_items}")
    print(f"Embedded: {stats.embedded}")
    print(f"Failed: {stats.failed_items}")
    return stats.failed_items


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate missing chunk embeddings")
    parser.add_argument("video_id", nargs="?", default=None, help="Limit to one video")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(
        level=settings.telemetry.log_level,
        format_type=settings.telemetry.log_format,
    )

    try:
        failed = asyncio.run(generate_embeddings(args.video_id))
    except DomainException as e:
        print(f"Embedding backfill failed: {e}")
        sys.exit(1)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
