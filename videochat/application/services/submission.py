"""Producer side: accept videos and enqueue their processing."""

from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError

from videochat.application.services.storage import VideoStorageService
from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import (
    DomainException,
    ValidationError,
    VideoNotFoundException,
)
from videochat.domain.models.job import PROCESS_VIDEO, JobHandle, ProcessVideoPayload
from videochat.domain.models.video import VideoMetadata, VideoStatus
from videochat.infrastructure.queue.base import JobQueueBase


@dataclass
class SubmissionReceipt:
    """Returned to the uploader: accepted, processing asynchronously."""

    video: VideoMetadata
    job: JobHandle

    @property
    def message(self) -> str:
        return f"Video {self.video.id} accepted, processing asynchronously"


class VideoSubmissionService:
    """Creates video records and enqueues ``process-video`` jobs."""

    def __init__(self, storage: VideoStorageService, queue: JobQueueBase) -> None:
        self._storage = storage
        self._queue = queue
        self._logger = get_logger(__name__)

    async def submit(
        self,
        title: str,
        source_url: str,
        duration_seconds: int,
        description: str = "",
        language: str = "en",
    ) -> SubmissionReceipt:
        """Create a ``processing`` video and enqueue its job.

        Raises:
            ValidationError: Invalid video fields.
            PersistenceError: The video record couldn't be written.
            QueueError: The job couldn't be enqueued (the video is then
                marked failed so it can be re-triggered).
        """
        if not source_url or not source_url.strip():
            raise ValidationError("source_url is required", field="source_url")
        try:
            video = VideoMetadata(
                title=title,
                description=description,
                source_url=source_url.strip(),
                duration_seconds=duration_seconds,
                language=language,
            )
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or None
            raise ValidationError(f"Invalid video: {first['msg']}", field=field) from e

        await self._storage.save_video(video)
        handle = await self._enqueue(video)

        self._logger.info(
            "Video submitted",
            extra={"video_id": video.id, "job_id": handle.job_id},
        )
        return SubmissionReceipt(video=video, job=handle)

    async def retrigger(self, video_id: str) -> SubmissionReceipt:
        """Reset a failed video to ``processing`` and enqueue it again.

        Raises:
            VideoNotFoundException: Unknown video.
            ValidationError: The video is not in ``failed`` status.
        """
        video = await self._storage.get_video(video_id)
        if video is None:
            raise VideoNotFoundException(video_id)
        if not video.is_failed:
            raise ValidationError(
                f"Only failed videos can be re-triggered (status: {video.status.value})",
                field="status",
            )

        await self._storage.update_video_status(video_id, VideoStatus.PROCESSING)
        video = video.transition_to(VideoStatus.PROCESSING)
        handle = await self._enqueue(video)

        self._logger.info(
            "Video re-triggered",
            extra={"video_id": video_id, "job_id": handle.job_id},
        )
        return SubmissionReceipt(video=video, job=handle)

    async def _enqueue(self, video: VideoMetadata) -> JobHandle:
        payload = ProcessVideoPayload(video_id=video.id).model_dump()
        try:
            return await self._queue.enqueue(PROCESS_VIDEO, payload)
        except DomainException as e:
            self._logger.error(
                "Enqueue failed, marking video failed",
                extra={"video_id": video.id, "error": str(e)},
            )
            try:
                await self._storage.update_video_status(
                    video.id, VideoStatus.FAILED, error_message=f"Enqueue failed: {e}"
                )
            except Exception:
                self._logger.error(
                    "Could not mark video as failed",
                    exc_info=True,
                    extra={
                        "video_id": video.id,
                        "status_update_failed": True,
                        "primary_error": type(e).__name__,
                    },
                )
            raise
