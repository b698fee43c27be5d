"""Abstract base classes for fetching videos and extracting audio."""

from abc import ABC, abstractmethod
from pathlib import Path


class DownloadError(Exception):
    """Raised when a remote video cannot be fetched."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Download failed for {url}: {reason}")


class AudioExtractionError(Exception):
    """Raised when the audio track cannot be extracted."""

    def __init__(self, video_path: Path, reason: str) -> None:
        self.video_path = video_path
        self.reason = reason
        super().__init__(f"Audio extraction failed for {video_path.name}: {reason}")


class VideoDownloaderBase(ABC):
    """Copies a hosted video to a local file."""

    @abstractmethod
    async def download(self, url: str, destination: Path) -> Path:
        """Download ``url`` into ``destination``.

        Args:
            url: Remote video URL.
            destination: Local file path to write.

        Returns:
            The written path.

        Raises:
            DownloadError: Network failure or non-success response.
        """


class AudioExtractorBase(ABC):
    """Derives an audio file from a local video."""

    @abstractmethod
    async def extract_audio(self, video_path: Path, output_path: Path) -> Path:
        """Extract the audio track of ``video_path`` into ``output_path``.

        Raises:
            AudioExtractionError: Missing tool or extraction failure.
        """
