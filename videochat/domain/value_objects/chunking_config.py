"""Chunking configuration value object."""

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from videochat.commons.settings.models import DEFAULT_TOPIC_PHRASES, ChunkingSettings


class ChunkingConfig(BaseModel):
    """Thresholds and lexical cues used by the segment chunker.

    A chunk is flushed once it holds ``max_words`` words, or once it holds
    ``min_words`` words and the current segment ends a sentence, contains a
    topic-transition phrase, or is followed by a pause longer than
    ``pause_threshold_seconds``.
    """

    model_config = ConfigDict(frozen=True)

    min_words: int = Field(
        default=80,
        ge=1,
        description="Soft minimum before a heuristic split is allowed",
    )
    max_words: int = Field(
        default=140,
        ge=1,
        description="Hard maximum that forces a split",
    )
    pause_threshold_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Silence between segments that counts as a long pause",
    )
    topic_phrases: tuple[str, ...] = Field(
        default=tuple(DEFAULT_TOPIC_PHRASES),
        description="Lower-case phrases signalling a subject change",
    )

    @field_validator("topic_phrases")
    @classmethod
    def _normalize_phrases(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(p.strip().lower() for p in value if p.strip())

    @model_validator(mode="after")
    def _check_bounds(self) -> Self:
        if self.min_words > self.max_words:
            raise ValueError("min_words must not exceed max_words")
        return self

    @classmethod
    def from_settings(cls, settings: ChunkingSettings) -> "ChunkingConfig":
        return cls(
            min_words=settings.min_words,
            max_words=settings.max_words,
            pause_threshold_seconds=settings.pause_threshold_seconds,
            topic_phrases=tuple(settings.topic_phrases),
        )

    def contains_topic_shift(self, text: str) -> bool:
        """Check the text, case-insensitively, for any topic-transition phrase."""
        lowered = text.lower()
        return any(phrase in lowered for phrase in self.topic_phrases)
