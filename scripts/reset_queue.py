#!/usr/bin/env python3
"""
Reset the video processing queue.

Prints queue counts, removes waiting and active jobs (and, unless told
otherwise, completed and failed ones), then prints the counts again.

Usage:
    python scripts/reset_queue.py [--keep-failed] [--keep-completed]
"""

import argparse
import asyncio
import sys

from videochat.commons.settings import get_settings
from videochat.domain.exceptions import QueueError
from videochat.domain.models.job import QueueStats
from videochat.infrastructure.factory import InfrastructureFactory


def format_stats(stats: QueueStats) -> str:
    return "  ".join(f"{state}={count}" for state, count in stats.as_dict().items())


async def reset_queue(keep_failed: bool, keep_completed: bool) -> int:
    """Purge the queue and return the number of removed jobs."""
    settings = get_settings()
    factory = InfrastructureFactory(settings)
    queue = factory.get_job_queue()

    try:
        print(f"Queue '{settings.queue.name}'")
        print(f"  Before: {format_stats(await queue.stats())}")

        removed = await queue.purge(
            include_failed=not keep_failed,
            include_completed=not keep_completed,
        )
        print(f"  Removed {removed} job(s)")
        print(f"  After:  {format_stats(await queue.stats())}")
        return removed
    finally:
        await factory.close_all()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Purge the video processing queue")
    parser.add_argument(
        "--keep-failed", action="store_true", help="Keep failed jobs for inspection"
    )
    parser.add_argument(
        "--keep-completed", action="store_true", help="Keep completed jobs"
    )
    args = parser.parse_args()

    try:
        asyncio.run(reset_queue(args.keep_failed, args.keep_completed))
    except QueueError as e:
        print(f"Queue reset failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
