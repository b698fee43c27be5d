"""HTTP implementation of the video downloader."""

from pathlib import Path

import httpx

from videochat.commons.telemetry import get_logger
from videochat.infrastructure.video.base import DownloadError, VideoDownloaderBase


class HttpVideoDownloader(VideoDownloaderBase):
    """Streams a hosted video to disk with httpx."""

    def __init__(
        self,
        timeout_seconds: float = 300.0,
        chunk_size: int = 1024 * 1024,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the downloader.

        Args:
            timeout_seconds: Total request timeout.
            chunk_size: Bytes per streamed read.
            client: Optional preconfigured client (tests inject a mock transport).
        """
        self._timeout = httpx.Timeout(timeout_seconds)
        self._chunk_size = chunk_size
        self._client = client
        self._logger = get_logger(__name__)

    async def download(self, url: str, destination: Path) -> Path:
        """Stream ``url`` into ``destination``."""
        destination.parent.mkdir(parents=True, exist_ok=True)
        written = 0

        client = self._client or httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=True
        )
        try:
            async with client.stream("GET", url) as response:
                response.raise_for_status()
                with destination.open("wb") as fh:
                    async for chunk in response.aiter_bytes(self._chunk_size):
                        fh.write(chunk)
                        written += len(chunk)
        except httpx.HTTPStatusError as e:
            raise DownloadError(url, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise DownloadError(url, str(e) or type(e).__name__) from e
        finally:
            if self._client is None:
                await client.aclose()

        if written == 0:
            raise DownloadError(url, "empty response body")

        self._logger.debug(
            "Video downloaded",
            extra={"path": str(destination), "size_bytes": written},
        )
        return destination
