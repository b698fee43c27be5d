"""Video, transcript and chunk storage on top of the document database."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from videochat.commons.infrastructure.documentdb.base import DocumentDBBase
from videochat.commons.settings.models import DocumentDBSettings
from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import (
    ChunkNotFoundException,
    DomainException,
    PersistenceError,
)
from videochat.domain.models.transcript import TranscriptChunk, TranscriptSegment
from videochat.domain.models.video import VideoMetadata, VideoStatus


class VideoStorageService:
    """Manages persistence of videos, transcript segments and chunks.

    Handles:
    - Video metadata reads and status transitions
    - Transcript segment replace (delete-then-insert) per video
    - Chunk replace per video, timestamp lookup and embedding updates

    Every store failure surfaces as ``PersistenceError`` with the original
    exception chained.
    """

    def __init__(
        self,
        document_db: DocumentDBBase,
        doc_settings: DocumentDBSettings,
    ) -> None:
        """Initialize storage service.

        Args:
            document_db: Document database provider.
            doc_settings: Document database configuration.
        """
        self._doc_db = document_db
        self._logger = get_logger(__name__)

        self._videos_collection = doc_settings.collections.videos
        self._segments_collection = doc_settings.collections.transcripts
        self._chunks_collection = doc_settings.collections.chunks

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except DomainException:
            raise
        except Exception as e:
            self._logger.error(
                "Document store operation failed",
                extra={"operation": operation, "error": str(e)},
            )
            raise PersistenceError(operation, str(e) or type(e).__name__) from e

    async def ensure_indexes(self) -> None:
        """Create the per-video lookup indexes."""
        async with self._guard("ensure_indexes"):
            await self._doc_db.create_index(
                self._segments_collection, [("video_id", 1), ("start", 1)]
            )
            await self._doc_db.create_index(
                self._chunks_collection, [("video_id", 1), ("start", 1)]
            )
            await self._doc_db.create_index(self._videos_collection, [("status", 1)])

    # =========================================================================
    # Video metadata operations
    # =========================================================================

    async def save_video(self, video: VideoMetadata) -> str:
        """Insert a new video record."""
        async with self._guard("save_video"):
            doc_id = await self._doc_db.insert(
                self._videos_collection,
                video.model_dump(mode="json"),
            )
        self._logger.info(
            "Video metadata saved",
            extra={"video_id": video.id, "title": video.title},
        )
        return doc_id

    async def get_video(self, video_id: str) -> VideoMetadata | None:
        """Fetch a video by ID, or None when it doesn't exist."""
        async with self._guard("get_video"):
            doc = await self._doc_db.find_by_id(self._videos_collection, video_id)
        if doc is None:
            return None
        return VideoMetadata(**doc)

    async def update_video_status(
        self,
        video_id: str,
        status: VideoStatus,
        error_message: str | None = None,
        **counts: int,
    ) -> bool:
        """Set a video's status.

        Args:
            video_id: Video to update.
            status: New status.
            error_message: Failure reason, stored only for FAILED.
            **counts: Optional ``segment_count`` / ``chunk_count`` values.

        Returns:
            True if the video exists.
        """
        updates: dict[str, Any] = {
            "status": status.value,
            "updated_at": datetime.now(UTC).isoformat(),
            "error_message": error_message if status == VideoStatus.FAILED else None,
        }
        updates.update(counts)

        async with self._guard("update_video_status"):
            updated = await self._doc_db.update(
                self._videos_collection, video_id, updates
            )

        self._logger.debug(
            "Video status updated",
            extra={"video_id": video_id, "status": status.value, "found": updated},
        )
        return updated

    async def list_videos(
        self,
        status: VideoStatus | None = None,
    ) -> list[VideoMetadata]:
        """List videos, newest first, optionally filtered by status."""
        filters: dict[str, Any] = {}
        if status is not None:
            filters["status"] = status.value
        async with self._guard("list_videos"):
            docs = await self._doc_db.find(
                self._videos_collection, filters, sort=[("created_at", -1)]
            )
        return [VideoMetadata(**doc) for doc in docs]

    # =========================================================================
    # Transcript segment operations
    # =========================================================================

    async def delete_segments_for_video(self, video_id: str) -> int:
        async with self._guard("delete_segments"):
            return await self._doc_db.delete_many(
                self._segments_collection, {"video_id": video_id}
            )

    async def save_segments(self, segments: list[TranscriptSegment]) -> list[str]:
        async with self._guard("save_segments"):
            return await self._doc_db.insert_many(
                self._segments_collection,
                [s.model_dump(mode="json") for s in segments],
            )

    async def replace_segments(
        self,
        video_id: str,
        segments: list[TranscriptSegment],
    ) -> list[str]:
        """Delete the video's stored segments, then insert ``segments``.

        Running this twice leaves exactly one set of segments.
        """
        deleted = await self.delete_segments_for_video(video_id)
        ids = await self.save_segments(segments)
        self._logger.info(
            "Transcript segments replaced",
            extra={"video_id": video_id, "deleted": deleted, "inserted": len(ids)},
        )
        return ids

    async def get_segments_for_video(self, video_id: str) -> list[TranscriptSegment]:
        """Get a video's segments ordered by start time."""
        async with self._guard("get_segments"):
            docs = await self._doc_db.find(
                self._segments_collection,
                {"video_id": video_id},
                sort=[("start", 1)],
            )
        return [TranscriptSegment(**doc) for doc in docs]

    # =========================================================================
    # Chunk operations
    # =========================================================================

    async def delete_chunks_for_video(self, video_id: str) -> int:
        async with self._guard("delete_chunks"):
            return await self._doc_db.delete_many(
                self._chunks_collection, {"video_id": video_id}
            )

    async def save_chunks(self, chunks: list[TranscriptChunk]) -> list[str]:
        async with self._guard("save_chunks"):
            return await self._doc_db.insert_many(
                self._chunks_collection,
                [c.model_dump(mode="json") for c in chunks],
            )

    async def replace_chunks(
        self,
        video_id: str,
        chunks: list[TranscriptChunk],
    ) -> list[str]:
        """Delete the video's stored chunks, then insert ``chunks``."""
        deleted = await self.delete_chunks_for_video(video_id)
        ids = await self.save_chunks(chunks)
        self._logger.info(
            "Chunks replaced",
            extra={"video_id": video_id, "deleted": deleted, "inserted": len(ids)},
        )
        return ids

    async def get_chunks_for_video(self, video_id: str) -> list[TranscriptChunk]:
        """Get a video's chunks ordered by start time."""
        async with self._guard("get_chunks"):
            docs = await self._doc_db.find(
                self._chunks_collection,
                {"video_id": video_id},
                sort=[("start", 1)],
            )
        return [TranscriptChunk(**doc) for doc in docs]

    async def find_chunk_at_timestamp(
        self,
        video_id: str,
        timestamp: float,
    ) -> TranscriptChunk:
        """Find the chunk whose range covers ``timestamp`` (start <= t <= end).

        Raises:
            ChunkNotFoundException: If no chunk covers the timestamp.
        """
        async with self._guard("find_chunk_at_timestamp"):
            doc = await self._doc_db.find_one(
                self._chunks_collection,
                {
                    "video_id": video_id,
                    "start": {"$lte": timestamp},
                    "end": {"$gte": timestamp},
                },
            )
        if doc is None:
            raise ChunkNotFoundException(video_id, timestamp)
        return TranscriptChunk(**doc)

    async def get_chunks_without_embeddings(
        self,
        video_id: str | None = None,
    ) -> list[TranscriptChunk]:
        """Chunks whose embedding is missing, optionally for one video."""
        filters: dict[str, Any] = {
            "$or": [
                {"embedding": {"$exists": False}},
                {"embedding": None},
                {"embedding": []},
            ]
        }
        if video_id:
            filters["video_id"] = video_id
        async with self._guard("get_chunks_without_embeddings"):
            docs = await self._doc_db.find(
                self._chunks_collection, filters, sort=[("start", 1)]
            )
        return [TranscriptChunk(**doc) for doc in docs]

    async def set_chunk_embedding(self, chunk_id: str, vector: list[float]) -> bool:
        async with self._guard("set_chunk_embedding"):
            return await self._doc_db.update(
                self._chunks_collection, chunk_id, {"embedding": list(vector)}
            )
