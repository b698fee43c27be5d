"""Transcript segment and chunk domain models."""

from datetime import UTC, datetime
from typing import Self
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def count_words(text: str) -> int:
    """Count whitespace-delimited tokens of the trimmed text."""
    return len(text.split())


class TimedText(BaseModel):
    """Common shape of segments and chunks: a text span on the video timeline."""

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier",
    )
    video_id: str = Field(description="Reference to parent VideoMetadata")
    start: float = Field(ge=0, description="Start time in seconds")
    end: float = Field(ge=0, description="End time in seconds")
    text: str = Field(description="Trimmed text content")
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        description="When this record was created",
    )

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("text must not be empty")
        return stripped

    @property
    def duration_seconds(self) -> float:
        return self.end - self.start

    @property
    def word_total(self) -> int:
        return count_words(self.text)

    def contains_timestamp(self, timestamp: float) -> bool:
        """Check if a timestamp falls within this span (both ends inclusive)."""
        return self.start <= timestamp <= self.end

    def format_time_range(self) -> str:
        """Format time range as MM:SS - MM:SS for display."""

        def fmt(seconds: float) -> str:
            minutes = int(seconds // 60)
            secs = int(seconds % 60)
            return f"{minutes:02d}:{secs:02d}"

        return f"{fmt(self.start)} - {fmt(self.end)}"


class TranscriptSegment(TimedText):
    """A single timestamped line of transcribed speech.

    Segments are immutable once stored; re-running transcription for a
    video deletes and reinserts the whole set.
    """

    @model_validator(mode="after")
    def _check_order(self) -> Self:
        if self.end <= self.start:
            raise ValueError(
                f"segment end ({self.end}) must be greater than start ({self.start})"
            )
        return self


class TranscriptChunk(TimedText):
    """A merged run of consecutive segments used for summaries and retrieval.

    ``start``/``end`` come from the first and last constituent segment.
    The embedding is attached by the enrichment step and may be absent.
    """

    word_count: int = Field(ge=0, description="Whitespace-delimited word count")
    segment_count: int = Field(
        ge=1,
        description="Number of transcript segments merged into this chunk",
    )
    embedding: list[float] | None = Field(
        default=None,
        description="Text embedding vector, absent until enrichment",
    )

    @model_validator(mode="after")
    def _check_order(self) -> Self:
        if self.end < self.start:
            raise ValueError(
                f"chunk end ({self.end}) must not precede start ({self.start})"
            )
        return self

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def with_embedding(self, vector: list[float]) -> Self:
        """Create a copy carrying the given embedding vector."""
        return self.model_copy(update={"embedding": list(vector)})
