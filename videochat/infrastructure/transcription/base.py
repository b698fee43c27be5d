"""Abstract base class for speech-to-text services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class TranscriptionSegment:
    """A provider segment as returned, before validation."""

    start: float
    end: float
    text: str


@dataclass
class TranscriptionResult:
    """Complete provider response."""

    segments: list[TranscriptionSegment] = field(default_factory=list)
    full_text: str = ""
    language: str | None = None
    duration_seconds: float | None = None


class TranscriptionServiceBase(ABC):
    """Abstract base class for speech-to-text providers.

    Providers return segment-level timestamps. Validation of the returned
    segments is the caller's job; providers pass through what they got.
    """

    @abstractmethod
    async def transcribe(
        self,
        audio_path: str,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe an audio file with segment-level timestamps.

        Args:
            audio_path: Path to the audio file.
            language_hint: Optional ISO language code hint (e.g., 'en', 'es').

        Returns:
            Transcription with ordered segments.
        """

    @property
    @abstractmethod
    def max_file_size_mb(self) -> float | None:
        """Largest accepted upload, or None if unlimited."""
