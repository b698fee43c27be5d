"""Abstract base class for the durable job queue."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import QueueError
from videochat.domain.models.job import Job, JobHandle, QueueStats

logger = get_logger(__name__)


class JobQueueBase(ABC):
    """Durable work queue with at-least-once delivery.

    Jobs move ``waiting -> active -> completed | failed``. An active job
    holds a lease; if its consumer stops heartbeating before the lease
    expires, the job becomes deliverable again. Consumers must therefore
    be safe to run the same job twice.
    """

    @abstractmethod
    async def enqueue(self, job_type: str, payload: dict[str, Any]) -> JobHandle:
        """Store a new job and return its handle.

        Raises:
            ValidationError: Unknown job type or malformed payload.
            QueueError: The job could not be stored.
        """

    @abstractmethod
    async def dequeue(self, job_type: str, worker_id: str) -> Job | None:
        """Claim the oldest deliverable job of ``job_type``, if any.

        Returns:
            The claimed job (now active and leased to ``worker_id``), or None.
        """

    @abstractmethod
    async def heartbeat(self, job: Job) -> Job:
        """Extend the lease of an active job owned by ``job.locked_by``.

        Raises:
            QueueError: The job is no longer leased to this consumer.
        """

    @abstractmethod
    async def ack(self, job: Job) -> Job:
        """Mark a job completed."""

    @abstractmethod
    async def fail(self, job: Job, error: BaseException) -> Job:
        """Record a failure; the job is retried only if attempts remain."""

    @abstractmethod
    async def get(self, job_id: str) -> Job | None:
        """Fetch a job for inspection."""

    @abstractmethod
    async def stats(self) -> QueueStats:
        """Point-in-time job counts per state."""

    @abstractmethod
    async def purge(
        self,
        include_failed: bool = True,
        include_completed: bool = True,
    ) -> int:
        """Remove waiting and active jobs, plus terminal ones when flagged.

        Returns:
            Number of removed jobs.
        """

    @property
    @abstractmethod
    def poll_interval_seconds(self) -> float:
        """Sleep between empty ``dequeue`` polls."""

    async def consume(
        self,
        job_type: str,
        worker_id: str,
        stop_event: asyncio.Event,
    ) -> AsyncIterator[Job]:
        """Yield claimed jobs until ``stop_event`` is set.

        Blocks (by polling) while the queue is empty. A failed claim is
        logged and retried after the poll interval.
        """
        while not stop_event.is_set():
            try:
                job = await self.dequeue(job_type, worker_id)
            except QueueError as e:
                logger.warning(
                    "Dequeue failed, retrying",
                    extra={"worker_id": worker_id, "error": str(e)},
                )
                job = None
            if job is not None:
                yield job
                continue
            try:
                await asyncio.wait_for(
                    stop_event.wait(), timeout=self.poll_interval_seconds
                )
            except TimeoutError:
                pass

    async def ensure_indexes(self) -> None:  # noqa: B027
        """Create backing-store indexes, if the implementation needs any."""
