"""Video download and audio extraction services."""

from videochat.infrastructure.video.base import (
    AudioExtractionError,
    AudioExtractorBase,
    DownloadError,
    VideoDownloaderBase,
)
from videochat.infrastructure.video.ffmpeg_audio import FFmpegAudioExtractor
from videochat.infrastructure.video.http_downloader import HttpVideoDownloader

__all__ = [
    # Base classes
    "VideoDownloaderBase",
    "AudioExtractorBase",
    # Errors
    "DownloadError",
    "AudioExtractionError",
    # Implementations
    "HttpVideoDownloader",
    "FFmpegAudioExtractor",
]
