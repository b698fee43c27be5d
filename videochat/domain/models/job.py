"""Queued job domain models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

PROCESS_VIDEO = "process-video"
PAYLOAD_VERSION = 1


class JobState(str, Enum):
    """Queue-managed state of a job. The four states are mutually exclusive."""

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


class ProcessVideoPayload(BaseModel):
    """Tagged, versioned payload of a ``process-video`` job."""

    kind: Literal["process-video"] = PROCESS_VIDEO
    version: int = PAYLOAD_VERSION
    video_id: str = Field(min_length=1)

    @field_validator("video_id")
    @classmethod
    def _strip_video_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("video_id must not be blank")
        return stripped


class JobError(BaseModel):
    """Failure detail kept on a failed job for operator inspection."""

    type: str
    message: str
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_exception(cls, exc: BaseException) -> "JobError":
        return cls(type=type(exc).__name__, message=str(exc) or repr(exc))


class Job(BaseModel):
    """One unit of queued work.

    Only the queue changes ``state``, ``attempts`` and the lease fields.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    queue: str = Field(description="Queue name the job belongs to")
    job_type: str = Field(description="Job type, e.g. 'process-video'")
    payload: dict[str, Any] = Field(default_factory=dict)
    state: JobState = JobState.WAITING
    attempts: int = Field(default=0, ge=0)
    max_attempts: int = Field(default=1, ge=1)
    error: JobError | None = None
    locked_by: str | None = None
    locked_until: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def video_id(self) -> str | None:
        value = self.payload.get("video_id")
        return str(value) if value else None

    @property
    def is_terminal(self) -> bool:
        return self.state in {JobState.COMPLETED, JobState.FAILED}

    @property
    def has_attempts_left(self) -> bool:
        return self.attempts < self.max_attempts


class JobHandle(BaseModel):
    """What a producer gets back from ``enqueue``."""

    job_id: str
    queue: str
    job_type: str
    state: JobState = JobState.WAITING


class QueueStats(BaseModel):
    """Point-in-time job counts per state."""

    waiting: int = Field(default=0, ge=0)
    active: int = Field(default=0, ge=0)
    completed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.waiting + self.active + self.completed + self.failed

    def as_dict(self) -> dict[str, int]:
        return {**self.model_dump(), "total": self.total}
