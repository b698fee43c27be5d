"""FFmpeg implementation of audio extraction."""

import asyncio
import subprocess
from pathlib import Path

from videochat.infrastructure.video.base import AudioExtractionError, AudioExtractorBase


class FFmpegAudioExtractor(AudioExtractorBase):
    """Extracts an mp3 audio track with ffmpeg.

    Requires ffmpeg to be installed and available in PATH (or configured).
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg") -> None:
        self._ffmpeg = ffmpeg_path

    def build_command(self, video_path: Path, output_path: Path) -> list[str]:
        return [
            self._ffmpeg,
            "-y",  # Overwrite output
            "-i",
            str(video_path),
            "-vn",  # No video
            "-acodec",
            "libmp3lame",
            str(output_path),
        ]

    async def extract_audio(self, video_path: Path, output_path: Path) -> Path:
        """Extract audio track from video."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(video_path, output_path)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: subprocess.run(cmd, capture_output=True, check=True),
            )
        except FileNotFoundError as e:
            raise AudioExtractionError(
                video_path, f"ffmpeg executable not found: {self._ffmpeg}"
            ) from e
        except OSError as e:
            raise AudioExtractionError(
                video_path, f"cannot run ffmpeg ({self._ffmpeg}): {e}"
            ) from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or b"").decode("utf-8", errors="replace").strip()
            tail = stderr.splitlines()[-1] if stderr else f"exit code {e.returncode}"
            raise AudioExtractionError(video_path, tail) from e

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise AudioExtractionError(video_path, "ffmpeg produced no audio output")

        return output_path
