"""Unit tests for ChunkEmbeddingService."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from videochat.application.services.enrichment import (
    ChunkEmbeddingService,
    EmbeddingStats,
)
from videochat.domain.exceptions import EmbeddingException
from videochat.domain.models.transcript import TranscriptChunk
from videochat.infrastructure.embeddings.base import EmbeddingResult


def make_chunk(video_id: str, start: float, text: str = "some words") -> TranscriptChunk:
    return TranscriptChunk(
        video_id=video_id,
        start=start,
        end=start + 10,
        text=text,
        word_count=len(text.split()),
        segment_count=1,
    )


def vector_for(text: str) -> list[float]:
    return [float(len(text)), 1.0]


@pytest.fixture
def embedder():
    mock = MagicMock()
    mock.max_batch_size = 100
    mock.dimensions = 2

    async def embed_texts(texts, model=None):
        return [
            EmbeddingResult(vector=vector_for(t), dimensions=2, model="test")
            for t in texts
        ]

    mock.embed_texts = AsyncMock(side_effect=embed_texts)
    return mock


class TestEmbedChunks:
    """Tests for inline chunk embedding."""

    async def test_embeds_every_chunk_in_order(self, embedder):
        service = ChunkEmbeddingService(embedder)
        chunks = [make_chunk("v1", 0, "a"), make_chunk("v1", 10, "bbb")]

        embedded = await service.embed_chunks("v1", chunks)

        assert [c.embedding for c in embedded] == [[1.0, 1.0], [3.0, 1.0]]
        assert [c.id for c in embedded] == [c.id for c in chunks]
        assert chunks[0].embedding is None

    async def test_batches_by_batch_size(self, embedder):
        service = ChunkEmbeddingService(embedder, batch_size=2)
        chunks = [make_chunk("v1", i * 10) for i in range(5)]

        embedded = await service.embed_chunks("v1", chunks)

        assert len(embedded) == 5
        assert [len(call.args[0]) for call in embedder.embed_texts.await_args_list] == [
            2,
            2,
            1,
        ]

    async def test_default_batch_size_from_provider(self, embedder):
        embedder.max_batch_size = 7

        assert ChunkEmbeddingService(embedder).batch_size == 7

    async def test_empty_input(self, embedder):
        assert await ChunkEmbeddingService(embedder).embed_chunks("v1", []) == []
        embedder.embed_texts.assert_not_awaited()

    async def test_provider_error_wrapped(self, embedder):
        embedder.embed_texts.side_effect = RuntimeError("rate limited")

        with pytest.raises(EmbeddingException) as exc_info:
            await ChunkEmbeddingService(embedder).embed_chunks("v1", [make_chunk("v1", 0)])

        assert "RuntimeError: rate limited" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    async def test_vector_count_mismatch(self, embedder):
        embedder.embed_texts.side_effect = None
        embedder.embed_texts.return_value = []

        with pytest.raises(EmbeddingException):
            await ChunkEmbeddingService(embedder).embed_chunks("v1", [make_chunk("v1", 0)])


class TestBackfill:
    """Tests for embedding stored chunks."""

    async def test_requires_storage(self, embedder):
        with pytest.raises(EmbeddingException):
            await ChunkEmbeddingService(embedder).backfill()

    async def test_nothing_to_do(self, embedder, storage):
        stats = await ChunkEmbeddingService(embedder, storage).backfill()

        assert stats == EmbeddingStats(total_items=0, embedded=0, failed_items=0)

    async def test_backfills_missing_vectors(self, embedder, storage):
        await storage.save_chunks(
            [make_chunk("v1", 0), make_chunk("v1", 10), make_chunk("v2", 0)]
        )

        stats = await ChunkEmbeddingService(embedder, storage).backfill("v1")

        assert stats == EmbeddingStats(total_items=2, embedded=2, failed_items=0)
        assert await storage.get_chunks_without_embeddings("v1") == []
        assert len(await storage.get_chunks_without_embeddings("v2")) == 1

    async def test_failed_batch_does_not_stop_the_rest(self, embedder, storage):
        await storage.save_chunks([make_chunk("v1", i * 10) for i in range(4)])
        ok = embedder.embed_texts.side_effect
        calls = {"n": 0}

        async def fail_first(texts, model=None):
            calls["n"] += 1
            if calls["n"] == 1:
                raise ConnectionError("reset")
            return await ok(texts)

        embedder.embed_texts.side_effect = fail_first

        stats = await ChunkEmbeddingService(embedder, storage, batch_size=2).backfill()

        assert stats == EmbeddingStats(total_items=4, embedded=2, failed_items=2)
        assert len(await storage.get_chunks_without_embeddings()) == 2
