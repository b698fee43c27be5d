"""Semantic chunking of timestamped transcript segments."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from videochat.commons.settings.models import ChunkingSettings
from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import ChunkingError
from videochat.domain.models.transcript import TranscriptChunk, count_words
from videochat.domain.value_objects.chunking_config import ChunkingConfig

_SENTENCE_ENDINGS = (".", "!", "?")


class SegmentLike(Protocol):
    """Anything with a start, an end and a text."""

    @property
    def start(self) -> float: ...

    @property
    def end(self) -> float: ...

    @property
    def text(self) -> str: ...


class SplitReason(str, Enum):
    """Why a chunk was closed."""

    MAX_WORDS = "max_words"
    LONG_PAUSE = "long_pause"
    TOPIC_SHIFT = "topic_shift"
    SENTENCE_END = "sentence_end"
    END_OF_INPUT = "end_of_input"


@dataclass
class ChunkDraft:
    """A chunk before it is bound to a video and persisted."""

    start: float
    end: float
    text: str
    word_count: int
    segment_count: int
    split_reason: SplitReason


@dataclass
class _Buffer:
    start: float | None = None
    end: float | None = None
    texts: list[str] = field(default_factory=list)
    word_count: int = 0

    def add(self, segment: SegmentLike) -> None:
        text = segment.text.strip()
        if self.start is None:
            self.start = segment.start
        self.texts.append(text)
        self.end = segment.end
        self.word_count += count_words(text)

    def flush(self, reason: SplitReason) -> ChunkDraft:
        assert self.start is not None and self.end is not None
        return ChunkDraft(
            start=self.start,
            end=self.end,
            text=" ".join(self.texts).strip(),
            word_count=self.word_count,
            segment_count=len(self.texts),
            split_reason=reason,
        )

    @property
    def is_empty(self) -> bool:
        return not self.texts


class SegmentChunker:
    """Greedy single-pass chunker.

    Segments are appended to a buffer in order and never split internally.
    After each append the buffer is flushed when it reaches ``max_words``,
    or when it reaches ``min_words`` and the segment ends a sentence,
    contains a topic-transition phrase, or is followed by a long pause.
    Whatever remains at the end of the input becomes the last chunk, so
    every segment lands in exactly one chunk.
    """

    def __init__(self, config: ChunkingConfig | None = None) -> None:
        self._config = config or ChunkingConfig()
        self._logger = get_logger(__name__)

    @classmethod
    def from_settings(cls, settings: ChunkingSettings) -> "SegmentChunker":
        return cls(ChunkingConfig.from_settings(settings))

    @property
    def config(self) -> ChunkingConfig:
        return self._config

    def chunk(self, segments: Sequence[SegmentLike]) -> list[ChunkDraft]:
        """Merge ordered segments into ordered chunk drafts.

        Args:
            segments: Transcript segments ordered by start time.

        Returns:
            Chunk drafts in source order; empty when ``segments`` is empty.
        """
        drafts: list[ChunkDraft] = []
        buffer = _Buffer()

        for index, segment in enumerate(segments):
            buffer.add(segment)

            next_segment = segments[index + 1] if index + 1 < len(segments) else None
            reason = self._split_reason(buffer.word_count, segment, next_segment)
            if reason is not None:
                drafts.append(buffer.flush(reason))
                buffer = _Buffer()

        if not buffer.is_empty:
            drafts.append(buffer.flush(SplitReason.END_OF_INPUT))

        return drafts

    def build_chunks(
        self,
        video_id: str,
        segments: Sequence[SegmentLike],
    ) -> list[TranscriptChunk]:
        """Chunk a video's segments into persistable chunk models.

        Raises:
            ChunkingError: If there are no segments or no chunk was produced.
        """
        if not segments:
            raise ChunkingError(video_id, "no transcript segments to chunk")

        drafts = self.chunk(segments)
        if not drafts:
            raise ChunkingError(video_id, "chunking produced no chunks")

        chunks = [
            TranscriptChunk(
                video_id=video_id,
                start=draft.start,
                end=draft.end,
                text=draft.text,
                word_count=draft.word_count,
                segment_count=draft.segment_count,
            )
            for draft in drafts
        ]

        reasons = Counter(draft.split_reason.value for draft in drafts)

        self._logger.info(
            "Transcript chunking completed",
            extra={
                "video_id": video_id,
                "segment_count": len(segments),
                "chunks_created": len(chunks),
                "split_reasons": dict(reasons),
                "total_words": sum(c.word_count for c in chunks),
            },
        )
        return chunks

    def _split_reason(
        self,
        word_count: int,
        current: SegmentLike,
        next_segment: SegmentLike | None,
    ) -> SplitReason | None:
        config = self._config
        if word_count >= config.max_words:
            return SplitReason.MAX_WORDS
        if word_count < config.min_words:
            return None

        if (
            next_segment is not None
            and next_segment.start - current.end > config.pause_threshold_seconds
        ):
            return SplitReason.LONG_PAUSE
        if config.contains_topic_shift(current.text):
            return SplitReason.TOPIC_SHIFT
        if current.text.strip().endswith(_SENTENCE_ENDINGS):
            return SplitReason.SENTENCE_END
        return None


def chunk_segments(
    segments: Sequence[SegmentLike],
    config: ChunkingConfig | None = None,
) -> list[ChunkDraft]:
    """Chunk segments with the given (or default) configuration."""
    return SegmentChunker(config).chunk(segments)
