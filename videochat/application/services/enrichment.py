"""Embedding generation for transcript chunks."""

from dataclasses import dataclass

from videochat.application.services.storage import VideoStorageService
from videochat.commons.telemetry import get_logger
from videochat.domain.exceptions import DomainException, EmbeddingException
from videochat.domain.models.transcript import TranscriptChunk
from videochat.infrastructure.embeddings.base import EmbeddingServiceBase


@dataclass
class EmbeddingStats:
    """Statistics from an embedding backfill."""

    total_items: int
    embedded: int
    failed_items: int


class ChunkEmbeddingService:
    """Attaches text embeddings to transcript chunks.

    Used inline by the pipeline (before chunks are inserted) and by the
    backfill script for chunks stored without a vector.
    """

    def __init__(
        self,
        embedder: EmbeddingServiceBase,
        storage: VideoStorageService | None = None,
        batch_size: int | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            embedder: Text embedding provider.
            storage: Chunk store, required only for ``backfill``.
            batch_size: Texts per provider call (provider maximum if None).
        """
        self._embedder = embedder
        self._storage = storage
        self._batch_size = batch_size or embedder.max_batch_size
        self._logger = get_logger(__name__)

    @property
    def batch_size(self) -> int:
        return self._batch_size

    async def embed_chunks(
        self,
        video_id: str,
        chunks: list[TranscriptChunk],
    ) -> list[TranscriptChunk]:
        """Return copies of ``chunks`` carrying their embedding.

        Raises:
            EmbeddingException: If the provider fails or returns a vector
                count that doesn't match the batch.
        """
        if not chunks:
            return []

        embedded: list[TranscriptChunk] = []
        for i in range(0, len(chunks), self._batch_size):
            batch = chunks[i : i + self._batch_size]
            vectors = await self._embed_batch(video_id, [c.text for c in batch])
            embedded.extend(
                chunk.with_embedding(vector)
                for chunk, vector in zip(batch, vectors, strict=True)
            )

        self._logger.info(
            "Chunk embeddings generated",
            extra={
                "video_id": video_id,
                "chunk_count": len(embedded),
                "dimensions": self._embedder.dimensions,
            },
        )
        return embedded

    async def _embed_batch(self, video_id: str | None, texts: list[str]) -> list[list[float]]:
        try:
            results = await self._embedder.embed_texts(texts)
        except Exception as e:
            raise EmbeddingException(video_id, f"{type(e).__name__}: {e}") from e
        if len(results) != len(texts):
            raise EmbeddingException(
                video_id,
                f"provider returned {len(results)} vectors for {len(texts)} texts",
            )
        return [r.vector for r in results]

    async def backfill(self, video_id: str | None = None) -> EmbeddingStats:
        """Embed stored chunks that have no vector yet.

        A failing batch is logged and counted; the remaining batches still run.

        Args:
            video_id: Restrict to one video (all videos if None).
        """
        if self._storage is None:
            raise EmbeddingException(video_id, "backfill requires a chunk store")

        chunks = await self._storage.get_chunks_without_embeddings(video_id)
        if not chunks:
            self._logger.info("No chunks without embeddings", extra={"video_id": video_id})
            return EmbeddingStats(total_items=0, embedded=0, failed_items=0)

        total_batches = (len(chunks) + self._batch_size - 1) // self._batch_size
        embedded = 0
        failed = 0

        for i in range(0, len(chunks), self._batch_size):
            batch_num = i // self._batch_size + 1
            batch = chunks[i : i + self._batch_size]
            try:
                vectors = await self._embed_batch(video_id, [c.text for c in batch])
                for chunk, vector in zip(batch, vectors, strict=True):
                    await self._storage.set_chunk_embedding(chunk.id, vector)
                embedded += len(batch)
            except DomainException as e:
                failed += len(batch)
                self._logger.error(
                    f"Batch {batch_num}/{total_batches} embedding failed",
                    extra={"batch_size": len(batch), "error": str(e)},
                )
            else:
                self._logger.info(
                    f"Batch {batch_num}/{total_batches} embedded",
                    extra={"batch_size": len(batch)},
                )

        self._logger.info(
            "Embedding backfill completed",
            extra={
                "video_id": video_id,
                "total_chunks": len(chunks),
                "embedded": embedded,
                "failed": failed,
            },
        )
        return EmbeddingStats(total_items=len(chunks), embedded=embedded, failed_items=failed)
