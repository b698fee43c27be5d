"""Job queue persisted in a document database collection."""

from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from videochat.commons.infrastructure.documentdb.base import DocumentDBBase
from videochat.commons.settings.models import QueueSettings
from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import DomainException, QueueError, ValidationError
from videochat.domain.models.job import (
    PROCESS_VIDEO,
    Job,
    JobError,
    JobHandle,
    JobState,
    ProcessVideoPayload,
    QueueStats,
)
from videochat.infrastructure.queue.base import JobQueueBase

# Payload schema per accepted job type
JOB_PAYLOADS: dict[str, type[BaseModel]] = {
    PROCESS_VIDEO: ProcessVideoPayload,
}


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _to_document(job: Job) -> dict[str, Any]:
    # Native datetimes (not ISO strings) so lease comparisons are chronological
    doc = job.model_dump()
    doc["state"] = job.state.value
    return doc


class DocumentJobQueue(JobQueueBase):
    """Lease-based job queue stored in one document collection.

    Claiming uses the store's atomic ``find_one_and_update`` so several
    worker processes can consume the same queue. A job is deliverable when
    it is waiting, or active with an expired lease (stalled consumer).
    Delivery order is approximately FIFO by ``created_at``.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        collection: str,
        settings: QueueSettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the queue.

        Args:
            document_db: Backing document store.
            collection: Collection holding the jobs.
            settings: Queue name, lease and retry configuration.
            clock: Source of the current UTC time.
        """
        self._doc_db = document_db
        self._collection = collection
        self._settings = settings or QueueSettings()
        self._clock = clock
        self._logger = get_logger(__name__)

    @property
    def name(self) -> str:
        return self._settings.name

    @property
    def poll_interval_seconds(self) -> float:
        return self._settings.poll_interval_seconds

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except DomainException:
            raise
        except Exception as e:
            self._logger.error(
                "Queue backing store failure",
                extra={"operation": operation, "queue": self.name, "error": str(e)},
            )
            raise QueueError(operation, str(e) or type(e).__name__) from e

    def _lease_expiry(self) -> datetime:
        return self._clock() + timedelta(seconds=self._settings.lease_seconds)

    async def ensure_indexes(self) -> None:
        async with self._guard("ensure_indexes"):
            await self._doc_db.create_index(
                self._collection,
                [("queue", 1), ("job_type", 1), ("state", 1), ("created_at", 1)],
            )

    def validate_payload(self, job_type: str, payload: dict[str, Any]) -> dict[str, Any]:
        """Validate and normalize a payload for ``job_type``.

        Raises:
            ValidationError: Unknown job type or malformed payload.
        """
        schema = JOB_PAYLOADS.get(job_type)
        if schema is None:
            raise ValidationError(f"Unknown job type: {job_type!r}", field="job_type")
        if not isinstance(payload, dict):
            raise ValidationError("Job payload must be a mapping", field="payload")
        try:
            return schema(**payload).model_dump()
        except PydanticValidationError as e:
            raise ValidationError(
                f"Malformed payload for {job_type!r}: {e.errors()[0]['msg']}",
                field="payload",
            ) from e

    async def enqueue(self, job_type: str, payload: dict[str, Any]) -> JobHandle:
        normalized = self.validate_payload(job_type, payload)
        job = Job(
            queue=self.name,
            job_type=job_type,
            payload=normalized,
            max_attempts=self._settings.max_attempts,
            created_at=self._clock(),
        )

        async with self._guard("enqueue"):
            await self._doc_db.insert(self._collection, _to_document(job))

        self._logger.info(
            "Job enqueued",
            extra={"job_id": job.id, "job_type": job_type, "queue": self.name},
        )
        return JobHandle(job_id=job.id, queue=self.name, job_type=job_type)

    async def dequeue(self, job_type: str, worker_id: str) -> Job | None:
        now = self._clock()
        async with self._guard("dequeue"):
            doc = await self._doc_db.find_one_and_update(
                self._collection,
                {
                    "queue": self.name,
                    "job_type": job_type,
                    "$or": [
                        {"state": JobState.WAITING.value},
                        {"state": JobState.ACTIVE.value, "locked_until": {"$lt": now}},
                    ],
                },
                {
                    "state": JobState.ACTIVE.value,
                    "locked_by": worker_id,
                    "locked_until": self._lease_expiry(),
                    "started_at": now,
                },
                sort=[("created_at", 1)],
                increments={"attempts": 1},
            )
        if doc is None:
            return None

        job = Job(**doc)
        if job.attempts > 1:
            self._logger.warning(
                "Job redelivered",
                extra={"job_id": job.id, "attempts": job.attempts, "worker_id": worker_id},
            )
        else:
            self._logger.debug(
                "Job claimed",
                extra={"job_id": job.id, "worker_id": worker_id},
            )
        return job

    async def _update_owned(
        self,
        job: Job,
        updates: dict[str, Any],
        operation: str,
    ) -> Job:
        """Update ``job`` only while it is still active and leased to its owner."""
        async with self._guard(operation):
            doc = await self._doc_db.find_one_and_update(
                self._collection,
                {
                    "id": job.id,
                    "state": JobState.ACTIVE.value,
                    "locked_by": job.locked_by,
                },
                updates,
            )
        if doc is None:
            raise QueueError(
                operation,
                f"job {job.id} is no longer leased to {job.locked_by}",
            )
        return Job(**doc)

    async def heartbeat(self, job: Job) -> Job:
        return await self._update_owned(
            job, {"locked_until": self._lease_expiry()}, "heartbeat"
        )

    async def ack(self, job: Job) -> Job:
        completed = await self._update_owned(
            job,
            {
                "state": JobState.COMPLETED.value,
                "finished_at": self._clock(),
                "locked_by": None,
                "locked_until": None,
                "error": None,
            },
            "ack",
        )
        self._logger.info(
            "Job completed",
            extra={"job_id": job.id, "attempts": completed.attempts},
        )
        return completed

    async def fail(self, job: Job, error: BaseException) -> Job:
        detail = JobError.from_exception(error)
        detail.occurred_at = self._clock()
        retry = job.has_attempts_left
        updates: dict[str, Any] = {
            "state": JobState.WAITING.value if retry else JobState.FAILED.value,
            "error": detail.model_dump(),
            "locked_by": None,
            "locked_until": None,
        }
        if not retry:
            updates["finished_at"] = self._clock()

        failed = await self._update_owned(job, updates, "fail")
        self._logger.warning(
            "Job failed",
            extra={
                "job_id": job.id,
                "attempts": job.attempts,
                "max_attempts": job.max_attempts,
                "will_retry": retry,
                "error_type": detail.type,
                "error": detail.message,
            },
        )
        return failed

    async def get(self, job_id: str) -> Job | None:
        async with self._guard("get"):
            doc = await self._doc_db.find_by_id(self._collection, job_id)
        return Job(**doc) if doc else None

    async def stats(self) -> QueueStats:
        counts: dict[str, int] = {}
        async with self._guard("stats"):
            for state in JobState:
                counts[state.value] = await self._doc_db.count(
                    self._collection,
                    {"queue": self.name, "state": state.value},
                )
        return QueueStats(**counts)

    async def purge(
        self,
        include_failed: bool = True,
        include_completed: bool = True,
    ) -> int:
        states = [JobState.WAITING.value, JobState.ACTIVE.value]
        if include_completed:
            states.append(JobState.COMPLETED.value)
        if include_failed:
            states.append(JobState.FAILED.value)

        async with self._guard("purge"):
            removed = await self._doc_db.delete_many(
                self._collection,
                {"queue": self.name, "state": {"$in": states}},
            )

        self._logger.info(
            "Queue purged",
            extra={"queue": self.name, "removed": removed, "states": states},
        )
        return removed
