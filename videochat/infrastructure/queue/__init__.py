"""Job queue abstractions and implementations."""

from videochat.infrastructure.queue.base import JobQueueBase
from videochat.infrastructure.queue.document_queue import JOB_PAYLOADS, DocumentJobQueue

__all__ = [
    # Base classes
    "JobQueueBase",
    # Implementations
    "DocumentJobQueue",
    "JOB_PAYLOADS",
]
