"""Turns a hosted video into validated transcript segments."""

import math
import shutil
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from videochat.commons.telemetry import get_logger, timed
from videochat.domain.exceptions import TranscriptionError
from videochat.infrastructure.transcription.base import (
    TranscriptionSegment,
    TranscriptionServiceBase,
)
from videochat.infrastructure.video.base import (
    AudioExtractionError,
    AudioExtractorBase,
    DownloadError,
    VideoDownloaderBase,
)

logger = get_logger(__name__)


@dataclass
class ScratchFiles:
    """Temporary artifacts owned by a single transcription run."""

    directory: Path
    video_path: Path
    audio_path: Path


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, int | float)
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


def validate_segments(
    raw_segments: list[TranscriptionSegment],
) -> tuple[list[TranscriptionSegment], int]:
    """Keep segments with numeric times, ``0 <= start < end`` and non-empty text.

    Returns:
        The valid segments ordered by start, and the number dropped.
    """
    valid: list[TranscriptionSegment] = []
    for seg in raw_segments:
        if not (_is_number(seg.start) and _is_number(seg.end)):
            continue
        if seg.start < 0 or seg.end <= seg.start:
            continue
        if not isinstance(seg.text, str) or not seg.text.strip():
            continue
        valid.append(
            TranscriptionSegment(
                start=float(seg.start),
                end=float(seg.end),
                text=seg.text.strip(),
            )
        )

    valid.sort(key=lambda s: s.start)
    return valid, len(raw_segments) - len(valid)


class TranscriptionAdapter:
    """Download, extract audio, transcribe, validate, clean up.

    Both temporary files live in a private directory that is removed on
    every exit path. A cleanup failure is logged and never hides the
    result or the original error. Nothing is retried here; redelivery is
    the job queue's business.
    """

    def __init__(
        self,
        downloader: VideoDownloaderBase,
        audio_extractor: AudioExtractorBase,
        transcription_service: TranscriptionServiceBase,
        temp_dir: str | None = None,
        language_hint: str | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            downloader: Fetches the hosted video.
            audio_extractor: Produces the audio file.
            transcription_service: Speech-to-text provider.
            temp_dir: Parent directory for scratch files (system default if None).
            language_hint: Default language passed to the provider.
        """
        self._downloader = downloader
        self._extractor = audio_extractor
        self._transcriber = transcription_service
        self._temp_dir = temp_dir
        self._language_hint = language_hint

    @asynccontextmanager
    async def scratch_files(self) -> AsyncIterator[ScratchFiles]:
        """Acquire a private scratch directory and release it on exit."""
        try:
            directory = Path(tempfile.mkdtemp(prefix="videochat-", dir=self._temp_dir))
        except OSError as e:
            raise TranscriptionError("prepare", f"cannot create temp dir: {e}") from e

        files = ScratchFiles(
            directory=directory,
            video_path=directory / "source.mp4",
            audio_path=directory / "audio.mp3",
        )
        try:
            yield files
        finally:
            self._release(files)

    def _release(self, files: ScratchFiles) -> None:
        for path in (files.video_path, files.audio_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(
                    "Failed to delete temporary file",
                    extra={"path": str(path), "error": str(e)},
                )
        try:
            shutil.rmtree(files.directory)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(
                "Failed to remove temporary directory",
                extra={"path": str(files.directory), "error": str(e)},
            )
        else:
            logger.debug("Temporary files released", extra={"path": str(files.directory)})

    @timed(logger=logger)
    async def transcribe(
        self,
        source_url: str,
        language_hint: str | None = None,
    ) -> list[TranscriptionSegment]:
        """Transcribe the video at ``source_url``.

        Returns:
            Valid segments ordered by start time (never empty).

        Raises:
            TranscriptionError: Any download, extraction, provider or
                validation failure, chained to its cause.
        """
        if not source_url:
            raise TranscriptionError("prepare", "source URL is required")

        language = language_hint or self._language_hint

        async with self.scratch_files() as files:
            try:
                logger.info("Downloading video", extra={"source_url": source_url})
                await self._downloader.download(source_url, files.video_path)
            except DownloadError as e:
                raise TranscriptionError("download", e.reason) from e
            except Exception as e:
                raise TranscriptionError(
                    "download", f"{type(e).__name__}: {e}"
                ) from e

            try:
                logger.info("Extracting audio")
                await self._extractor.extract_audio(files.video_path, files.audio_path)
            except AudioExtractionError as e:
                raise TranscriptionError("extract_audio", e.reason) from e
            except Exception as e:
                raise TranscriptionError(
                    "extract_audio", f"{type(e).__name__}: {e}"
                ) from e

            try:
                logger.info("Calling speech-to-text provider")
                result = await self._transcriber.transcribe(
                    str(files.audio_path), language_hint=language
                )
            except Exception as e:
                raise TranscriptionError(
                    "transcribe", f"{type(e).__name__}: {e}"
                ) from e

        segments, dropped = validate_segments(result.segments)
        logger.info(
            "Transcription complete",
            extra={
                "raw_segments": len(result.segments),
                "valid_segments": len(segments),
                "dropped_segments": dropped,
                "language": result.language,
            },
        )
        if not segments:
            raise TranscriptionError("validate", "provider returned no usable segments")
        return segments
