"""Transcription services."""

from videochat.infrastructure.transcription.adapter import (
    ScratchFiles,
    TranscriptionAdapter,
    validate_segments,
)
from videochat.infrastructure.transcription.base import (
    TranscriptionResult,
    TranscriptionSegment,
    TranscriptionServiceBase,
)
from videochat.infrastructure.transcription.openai_whisper import (
    OpenAIWhisperTranscription,
)

__all__ = [
    # Base classes
    "TranscriptionServiceBase",
    "TranscriptionResult",
    "TranscriptionSegment",
    # Implementations
    "OpenAIWhisperTranscription",
    # Adapter
    "TranscriptionAdapter",
    "ScratchFiles",
    "validate_segments",
]
