"""Video metadata domain model."""

from datetime import UTC, datetime
from enum import Enum
from typing import Self
from uuid import uuid4

from pydantic import BaseModel, Field


class VideoStatus(str, Enum):
    """Lifecycle status of a video in the system."""

    PROCESSING = "processing"  # Uploaded, pipeline pending or running
    READY = "ready"  # Transcript and chunks stored
    FAILED = "failed"  # Pipeline failed, needs a manual re-trigger


class VideoMetadata(BaseModel):
    """Core entity representing an uploaded video.

    Created when an upload is accepted; only the processing pipeline
    changes its status afterwards. Segments and chunks reference it
    through ``video_id``.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Internal UUID for this video record",
    )
    title: str = Field(min_length=1, description="Video title")
    description: str = Field(default="", description="Free-form description")
    source_url: str = Field(description="Where the uploaded video is hosted")
    duration_seconds: int = Field(
        ge=1,
        description="Total video duration in seconds",
    )
    language: str = Field(default="en", description="Spoken language (ISO 639-1)")
    status: VideoStatus = Field(
        default=VideoStatus.PROCESSING,
        description="Current processing status",
    )
    error_message: str | None = Field(
        default=None,
        description="Error details if status is FAILED",
    )
    segment_count: int = Field(default=0, ge=0)
    chunk_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When this record was created",
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="Last update timestamp",
    )

    @property
    def is_ready(self) -> bool:
        """Check if video is ready for summaries and chat."""
        return self.status == VideoStatus.READY

    @property
    def is_failed(self) -> bool:
        """Check if video processing has failed."""
        return self.status == VideoStatus.FAILED

    @property
    def is_processing(self) -> bool:
        return self.status == VideoStatus.PROCESSING

    def transition_to(self, new_status: VideoStatus) -> Self:
        """Create a new instance with updated status.

        Leaving FAILED clears the stored error message.
        """
        error_msg = self.error_message if new_status == VideoStatus.FAILED else None
        return self.model_copy(
            update={
                "status": new_status,
                "updated_at": datetime.now(UTC),
                "error_message": error_msg,
            }
        )
