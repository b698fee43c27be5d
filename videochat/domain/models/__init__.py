"""Domain models."""

from videochat.domain.models.job import (
    PAYLOAD_VERSION,
    PROCESS_VIDEO,
    Job,
    JobError,
    JobHandle,
    JobState,
    ProcessVideoPayload,
    QueueStats,
)
from videochat.domain.models.transcript import (
    TimedText,
    TranscriptChunk,
    TranscriptSegment,
    count_words,
)
from videochat.domain.models.video import VideoMetadata, VideoStatus

__all__ = [
    # Video
    "VideoMetadata",
    "VideoStatus",
    # Transcript
    "TimedText",
    "TranscriptSegment",
    "TranscriptChunk",
    "count_words",
    # Jobs
    "Job",
    "JobError",
    "JobHandle",
    "JobState",
    "QueueStats",
    "ProcessVideoPayload",
    "PROCESS_VIDEO",
    "PAYLOAD_VERSION",
]
