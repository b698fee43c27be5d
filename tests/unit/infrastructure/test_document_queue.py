"""Unit tests for the document-backed job queue."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from videochat.commons.settings.models import QueueSettings
from videochat.domain.exceptions import QueueError, ValidationError
from videochat.domain.models.job import PROCESS_VIDEO, JobState
from videochat.infrastructure.queue.document_queue import DocumentJobQueue


def payload(video_id: str = "vid-1") -> dict:
    return {"video_id": video_id}


async def assert_stats_consistent(queue: DocumentJobQueue) -> None:
    stats = await queue.stats()
    assert stats.total == stats.waiting + stats.active + stats.completed + stats.failed


class TestEnqueue:
    """Tests for enqueue validation and persistence."""

    async def test_enqueue_returns_handle_and_persists(self, job_queue):
        handle = await job_queue.enqueue(PROCESS_VIDEO, payload())

        assert handle.job_type == PROCESS_VIDEO
        assert handle.queue == "video-processing"
        assert handle.state == JobState.WAITING

        job = await job_queue.get(handle.job_id)
        assert job is not None
        assert job.state == JobState.WAITING
        assert job.payload == {"kind": "process-video", "version": 1, "video_id": "vid-1"}

    async def test_unknown_job_type_rejected(self, job_queue):
        with pytest.raises(ValidationError) as exc_info:
            await job_queue.enqueue("transcode", payload())

        assert exc_info.value.field == "job_type"
        assert (await job_queue.stats()).total == 0

    @pytest.mark.parametrize(
        "bad_payload",
        [{}, {"video_id": ""}, {"video_id": "   "}, {"video_id": "v", "kind": "other"}],
    )
    async def test_malformed_payload_rejected(self, job_queue, bad_payload):
        with pytest.raises(ValidationError) as exc_info:
            await job_queue.enqueue(PROCESS_VIDEO, bad_payload)

        assert exc_info.value.field == "payload"

    async def test_non_mapping_payload_rejected(self, job_queue):
        with pytest.raises(ValidationError):
            await job_queue.enqueue(PROCESS_VIDEO, ["vid-1"])  # type: ignore[arg-type]

    async def test_store_failure_becomes_queue_error(self, document_db, job_queue):
        document_db.insert = AsyncMock(side_effect=ConnectionError("mongo down"))

        with pytest.raises(QueueError) as exc_info:
            await job_queue.enqueue(PROCESS_VIDEO, payload())

        assert exc_info.value.operation == "enqueue"
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestDequeue:
    """Tests for claiming jobs."""

    async def test_empty_queue_returns_none(self, job_queue):
        assert await job_queue.dequeue(PROCESS_VIDEO, "w1") is None

    async def test_claim_sets_lease(self, job_queue, clock):
        await job_queue.enqueue(PROCESS_VIDEO, payload())

        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")

        assert job is not None
        assert job.state == JobState.ACTIVE
        assert job.attempts == 1
        assert job.locked_by == "w1"
        assert (job.locked_until - clock()).total_seconds() == 60
        assert job.started_at == clock()

    async def test_fifo_order(self, job_queue, clock):
        for video_id in ("a", "b", "c"):
            await job_queue.enqueue(PROCESS_VIDEO, payload(video_id))
            clock.advance(1)

        claimed = [
            (await job_queue.dequeue(PROCESS_VIDEO, "w1")).video_id for _ in range(3)
        ]

        assert claimed == ["a", "b", "c"]

    async def test_job_is_claimed_once(self, job_queue):
        await job_queue.enqueue(PROCESS_VIDEO, payload())

        first, second = await asyncio.gather(
            job_queue.dequeue(PROCESS_VIDEO, "w1"),
            job_queue.dequeue(PROCESS_VIDEO, "w2"),
        )

        assert [first is None, second is None].count(True) == 1

    async def test_other_queue_is_ignored(self, document_db, doc_settings, job_queue, clock):
        other = DocumentJobQueue(
            document_db,
            doc_settings.collections.jobs,
            settings=QueueSettings(name="other"),
            clock=clock,
        )
        await other.enqueue(PROCESS_VIDEO, payload())

        assert await job_queue.dequeue(PROCESS_VIDEO, "w1") is None
        assert (await job_queue.stats()).total == 0

    async def test_active_job_with_live_lease_not_redelivered(self, job_queue, clock):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        await job_queue.dequeue(PROCESS_VIDEO, "w1")

        clock.advance(59)

        assert await job_queue.dequeue(PROCESS_VIDEO, "w2") is None

    async def test_stalled_job_is_redelivered(self, job_queue, clock):
        """A consumer that stops heartbeating loses the job after the lease."""
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        crashed = await job_queue.dequeue(PROCESS_VIDEO, "w1")

        clock.advance(61)
        redelivered = await job_queue.dequeue(PROCESS_VIDEO, "w2")

        assert redelivered is not None
        assert redelivered.id == crashed.id
        assert redelivered.attempts == 2
        assert redelivered.locked_by == "w2"

        # The crashed consumer can no longer settle the job
        with pytest.raises(QueueError):
            await job_queue.ack(crashed)


class TestLeaseAndSettle:
    """Tests for heartbeat, ack and fail."""

    async def test_heartbeat_extends_lease(self, job_queue, clock):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")

        clock.advance(50)
        extended = await job_queue.heartbeat(job)
        clock.advance(50)

        assert extended.locked_until > job.locked_until
        assert await job_queue.dequeue(PROCESS_VIDEO, "w2") is None

    async def test_ack_completes_job(self, job_queue, clock):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")

        completed = await job_queue.ack(job)

        assert completed.state == JobState.COMPLETED
        assert completed.finished_at == clock()
        assert completed.locked_by is None
        stats = await job_queue.stats()
        assert stats.completed == 1
        assert stats.active == 0

    async def test_fail_records_error_without_retry(self, job_queue):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")

        failed = await job_queue.fail(job, RuntimeError("ffmpeg exploded"))

        assert failed.state == JobState.FAILED
        assert failed.error.type == "RuntimeError"
        assert failed.error.message == "ffmpeg exploded"
        assert failed.finished_at is not None
        assert await job_queue.dequeue(PROCESS_VIDEO, "w1") is None

    async def test_fail_with_attempts_left_returns_to_waiting(
        self, document_db, doc_settings, clock
    ):
        queue = DocumentJobQueue(
            document_db,
            doc_settings.collections.jobs,
            settings=QueueSettings(max_attempts=2),
            clock=clock,
        )
        await queue.enqueue(PROCESS_VIDEO, payload())

        first = await queue.dequeue(PROCESS_VIDEO, "w1")
        retried = await queue.fail(first, RuntimeError("transient"))
        assert retried.state == JobState.WAITING
        assert retried.error.message == "transient"

        second = await queue.dequeue(PROCESS_VIDEO, "w1")
        assert second.attempts == 2
        final = await queue.fail(second, RuntimeError("still broken"))
        assert final.state == JobState.FAILED

    async def test_settle_unowned_job_raises(self, job_queue):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")
        await job_queue.ack(job)

        with pytest.raises(QueueError) as exc_info:
            await job_queue.fail(job, RuntimeError("late"))

        assert exc_info.value.operation == "fail"

    async def test_heartbeat_after_ack_raises(self, job_queue):
        await job_queue.enqueue(PROCESS_VIDEO, payload())
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")
        await job_queue.ack(job)

        with pytest.raises(QueueError):
            await job_queue.heartbeat(job)


class TestStatsAndPurge:
    """Tests for administrative operations."""

    async def populate(self, queue: DocumentJobQueue) -> None:
        """Leave one job in each state."""
        for video_id in ("done", "broken", "running", "waiting"):
            await queue.enqueue(PROCESS_VIDEO, payload(video_id))
        await queue.ack(await queue.dequeue(PROCESS_VIDEO, "w1"))
        await queue.fail(await queue.dequeue(PROCESS_VIDEO, "w1"), RuntimeError("x"))
        await queue.dequeue(PROCESS_VIDEO, "w1")

    async def test_stats_per_state(self, job_queue):
        await self.populate(job_queue)

        stats = await job_queue.stats()

        assert stats.as_dict() == {
            "waiting": 1,
            "active": 1,
            "completed": 1,
            "failed": 1,
            "total": 4,
        }

    async def test_stats_consistent_through_lifecycle(self, job_queue):
        await assert_stats_consistent(job_queue)
        handle = await job_queue.enqueue(PROCESS_VIDEO, payload())
        await assert_stats_consistent(job_queue)
        job = await job_queue.dequeue(PROCESS_VIDEO, "w1")
        await assert_stats_consistent(job_queue)
        await job_queue.ack(job)
        await assert_stats_consistent(job_queue)
        assert (await job_queue.get(handle.job_id)).is_terminal

    async def test_purge_everything(self, job_queue):
        await self.populate(job_queue)

        removed = await job_queue.purge()

        assert removed == 4
        assert (await job_queue.stats()).total == 0

    async def test_purge_keeps_terminal_jobs_when_asked(self, job_queue):
        await self.populate(job_queue)

        removed = await job_queue.purge(include_failed=False, include_completed=False)

        assert removed == 2
        stats = await job_queue.stats()
        assert stats.completed == 1
        assert stats.failed == 1
        assert stats.waiting == stats.active == 0

    async def test_purge_is_idempotent(self, job_queue):
        await self.populate(job_queue)

        await job_queue.purge()

        assert await job_queue.purge() == 0

    async def test_ensure_indexes(self, document_db, job_queue):
        await job_queue.ensure_indexes()

        assert document_db.indexes["jobs"]


class TestConsume:
    """Tests for the polling consumer iterator."""

    async def test_yields_jobs_then_stops(self, job_queue):
        await job_queue.enqueue(PROCESS_VIDEO, payload("a"))
        await job_queue.enqueue(PROCESS_VIDEO, payload("b"))
        stop = asyncio.Event()
        seen = []

        async for job in job_queue.consume(PROCESS_VIDEO, "w1", stop):
            seen.append(job.video_id)
            if len(seen) == 2:
                stop.set()

        assert seen == ["a", "b"]

    async def test_waits_for_new_jobs(self, job_queue):
        stop = asyncio.Event()

        async def produce_later():
            await asyncio.sleep(0.05)
            await job_queue.enqueue(PROCESS_VIDEO, payload("late"))

        producer = asyncio.create_task(produce_later())
        async for job in job_queue.consume(PROCESS_VIDEO, "w1", stop):
            assert job.video_id == "late"
            stop.set()
        await producer

    async def test_stop_event_ends_idle_consumer(self, job_queue):
        stop = asyncio.Event()
        stop.set()

        jobs = [job async for job in job_queue.consume(PROCESS_VIDEO, "w1", stop)]

        assert jobs == []
