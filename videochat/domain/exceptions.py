"""Domain exceptions for the video processing pipeline."""


class DomainException(Exception):
    """Base exception for domain errors."""


class ValidationError(DomainException):
    """Raised when an operation receives malformed input.

    Examples are an unknown job type or a job payload without a video id.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class NotFoundError(DomainException):
    """Raised when a referenced entity does not exist."""


class VideoNotFoundException(NotFoundError):
    """Raised when a requested video is not found."""

    def __init__(self, video_id: str) -> None:
        self.video_id = video_id
        super().__init__(f"Video not found: {video_id}")


class ChunkNotFoundException(NotFoundError):
    """Raised when no chunk covers the requested position of a video."""

    def __init__(self, video_id: str, timestamp: float | None = None) -> None:
        self.video_id = video_id
        self.timestamp = timestamp
        where = f" at {timestamp:.2f}s" if timestamp is not None else ""
        super().__init__(f"Chunk not found for video {video_id}{where}")


class TranscriptionError(DomainException):
    """Raised for any failure in the download, extract, transcribe chain."""

    def __init__(self, stage: str, reason: str) -> None:
        self.stage = stage
        self.reason = reason
        super().__init__(f"Transcription failed at {stage}: {reason}")


class ChunkingError(DomainException):
    """Raised when chunking cannot produce chunks for a video."""

    def __init__(self, video_id: str, reason: str) -> None:
        self.video_id = video_id
        self.reason = reason
        super().__init__(f"Chunking failed for video {video_id}: {reason}")


class PersistenceError(DomainException):
    """Raised when a document store read or write fails."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Persistence failure during {operation}: {reason}")


class QueueError(DomainException):
    """Raised when an enqueue, dequeue or administrative queue call fails."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Queue {operation} failed: {reason}")


class EmbeddingException(DomainException):
    """Raised when embedding generation for chunks fails."""

    def __init__(self, video_id: str | None, reason: str) -> None:
        self.video_id = video_id
        self.reason = reason
        target = f"video {video_id}" if video_id else "chunks"
        super().__init__(f"Embedding failed for {target}: {reason}")
