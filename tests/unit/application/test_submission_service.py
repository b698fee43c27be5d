"""Unit tests for VideoSubmissionService."""

import logging
from unittest.mock import AsyncMock

import pytest

from videochat.application.services.submission import VideoSubmissionService
from videochat.domain.exceptions import (
    PersistenceError,
    QueueError,
    ValidationError,
    VideoNotFoundException,
)
from videochat.domain.models.job import PROCESS_VIDEO, JobState
from videochat.domain.models.video import VideoStatus


@pytest.fixture
def submission(storage, job_queue) -> VideoSubmissionService:
    return VideoSubmissionService(storage, job_queue)


class TestSubmit:
    """Tests for accepting a new video."""

    async def test_submit_creates_processing_video_and_job(
        self, submission, storage, job_queue
    ):
        receipt = await submission.submit(
            title="Intro to Queues",
            source_url=" https://media.example.com/videos/intro.mp4 ",
            duration_seconds=600,
        )

        video = await storage.get_video(receipt.video.id)
        assert video.status == VideoStatus.PROCESSING
        assert video.source_url == "https://media.example.com/videos/intro.mp4"

        job = await job_queue.get(receipt.job.job_id)
        assert job.state == JobState.WAITING
        assert job.job_type == PROCESS_VIDEO
        assert job.payload == {
            "kind": PROCESS_VIDEO,
            "version": 1,
            "video_id": receipt.video.id,
        }

    async def test_receipt_message(self, submission):
        receipt = await submission.submit(
            title="Intro", source_url="https://x.example/v.mp4", duration_seconds=5
        )

        assert receipt.message == (
            f"Video {receipt.video.id} accepted, processing asynchronously"
        )

    @pytest.mark.parametrize("source_url", ["", "   "])
    async def test_blank_source_url_rejected(self, submission, job_queue, source_url):
        with pytest.raises(ValidationError) as exc_info:
            await submission.submit(
                title="Intro", source_url=source_url, duration_seconds=5
            )

        assert exc_info.value.field == "source_url"
        assert (await job_queue.stats()).total == 0

    async def test_invalid_fields_rejected(self, submission, storage):
        with pytest.raises(ValidationError) as exc_info:
            await submission.submit(
                title="Intro", source_url="https://x.example/v.mp4", duration_seconds=0
            )

        assert exc_info.value.field == "duration_seconds"
        assert await storage.list_videos() == []

    async def test_enqueue_failure_marks_video_failed(
        self, submission, storage, job_queue
    ):
        job_queue.enqueue = AsyncMock(side_effect=QueueError("enqueue", "mongo down"))

        with pytest.raises(QueueError):
            await submission.submit(
                title="Intro", source_url="https://x.example/v.mp4", duration_seconds=5
            )

        (video,) = await storage.list_videos()
        assert video.status == VideoStatus.FAILED
        assert video.error_message.startswith("Enqueue failed:")

    async def test_status_failure_does_not_mask_enqueue_error(
        self, submission, storage, job_queue, caplog
    ):
        job_queue.enqueue = AsyncMock(side_effect=QueueError("enqueue", "mongo down"))
        storage.update_video_status = AsyncMock(
            side_effect=PersistenceError("update_video_status", "mongo down")
        )

        with caplog.at_level(logging.ERROR), pytest.raises(QueueError):
            await submission.submit(
                title="Intro", source_url="https://x.example/v.mp4", duration_seconds=5
            )

        storage.update_video_status.assert_awaited_once()
        (record,) = [
            r for r in caplog.records if r.getMessage() == "Could not mark video as failed"
        ]
        assert record.status_update_failed is True
        assert record.primary_error == "QueueError"


class TestRetrigger:
    """Tests for manually re-triggering failed videos."""

    async def test_retrigger_failed_video(self, submission, storage, job_queue, make_video):
        video = make_video(status=VideoStatus.FAILED, error_message="HTTP 404")
        await storage.save_video(video)

        receipt = await submission.retrigger(video.id)

        stored = await storage.get_video(video.id)
        assert stored.status == VideoStatus.PROCESSING
        assert stored.error_message is None
        assert receipt.video.status == VideoStatus.PROCESSING
        assert (await job_queue.get(receipt.job.job_id)).video_id == video.id

    async def test_retrigger_unknown_video(self, submission):
        with pytest.raises(VideoNotFoundException):
            await submission.retrigger("missing")

    @pytest.mark.parametrize("status", [VideoStatus.PROCESSING, VideoStatus.READY])
    async def test_retrigger_requires_failed_status(
        self, submission, storage, job_queue, make_video, status
    ):
        video = make_video(status=status)
        await storage.save_video(video)

        with pytest.raises(ValidationError) as exc_info:
            await submission.retrigger(video.id)

        assert exc_info.value.field == "status"
        assert (await job_queue.stats()).total == 0
