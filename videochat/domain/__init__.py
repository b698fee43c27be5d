"""Domain layer - business models and errors."""

from videochat.domain.exceptions import (
    ChunkingError,
    ChunkNotFoundException,
    DomainException,
    EmbeddingException,
    NotFoundError,
    PersistenceError,
    QueueError,
    TranscriptionError,
    ValidationError,
    VideoNotFoundException,
)
from videochat.domain.models import (
    Job,
    JobHandle,
    JobState,
    ProcessVideoPayload,
    QueueStats,
    TranscriptChunk,
    TranscriptSegment,
    VideoMetadata,
    VideoStatus,
)
from videochat.domain.value_objects import ChunkingConfig

__all__ = [
    # Exceptions
    "DomainException",
    "ValidationError",
    "NotFoundError",
    "VideoNotFoundException",
    "ChunkNotFoundException",
    "TranscriptionError",
    "ChunkingError",
    "PersistenceError",
    "QueueError",
    "EmbeddingException",
    # Video
    "VideoMetadata",
    "VideoStatus",
    # Transcript
    "TranscriptSegment",
    "TranscriptChunk",
    # Jobs
    "Job",
    "JobHandle",
    "JobState",
    "QueueStats",
    "ProcessVideoPayload",
    # Value Objects
    "ChunkingConfig",
]
