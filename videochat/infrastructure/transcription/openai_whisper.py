"""OpenAI Whisper implementation of transcription service."""

from pathlib import Path
from typing import Any, cast

from openai import AsyncOpenAI

from videochat.infrastructure.transcription.base import (
    TranscriptionResult,
    TranscriptionSegment,
    TranscriptionServiceBase,
)


def _field(item: Any, name: str) -> Any:
    # The SDK returns typed objects; older versions and mocks return dicts
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


class OpenAIWhisperTranscription(TranscriptionServiceBase):
    """OpenAI Whisper API implementation of transcription service.

    Requests ``verbose_json`` with segment granularity. Timeouts are
    configured on the client, not by the caller.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        timeout_seconds: float = 300.0,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize OpenAI Whisper client.

        Args:
            api_key: OpenAI API key.
            model: Whisper model to use.
            base_url: Optional custom API endpoint (for Azure, etc.).
            timeout_seconds: Request timeout.
            client: Optional preconfigured client.
        """
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
            max_retries=0,
        )
        self._model = model

    async def transcribe(
        self,
        audio_path: str,
        language_hint: str | None = None,
    ) -> TranscriptionResult:
        """Transcribe audio file to segments with timestamps."""
        path = Path(audio_path)

        kwargs: dict[str, Any] = {
            "model": self._model,
            "response_format": "verbose_json",
            "timestamp_granularities": ["segment"],
        }
        if language_hint:
            kwargs["language"] = language_hint

        with path.open("rb") as audio_file:
            # Cast to Any to work around strict overload typing in OpenAI SDK
            create_fn = cast("Any", self._client.audio.transcriptions.create)
            response = await create_fn(file=audio_file, **kwargs)

        segments = [
            TranscriptionSegment(
                start=_field(seg, "start"),
                end=_field(seg, "end"),
                text=_field(seg, "text"),
            )
            for seg in (_field(response, "segments") or [])
        ]

        return TranscriptionResult(
            segments=segments,
            full_text=_field(response, "text") or "",
            language=_field(response, "language") or language_hint,
            duration_seconds=_field(response, "duration"),
        )

    @property
    def max_file_size_mb(self) -> float | None:
        """Whisper API upload limit."""
        return 25.0
