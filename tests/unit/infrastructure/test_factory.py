"""Unit tests for infrastructure factory."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from videochat.application.services.pipeline import VideoProcessingPipeline
from videochat.application.services.submission import VideoSubmissionService
from videochat.commons.infrastructure.documentdb import MongoDBDocumentDB
from videochat.commons.settings.models import (
    ChunkingSettings,
    DocumentDBSettings,
    EmbeddingsSettings,
    ProcessingSettings,
    Settings,
    TextEmbeddingSettings,
    TranscriptionSettings,
)
from videochat.infrastructure.embeddings import OpenAIEmbeddingService
from videochat.infrastructure.factory import InfrastructureFactory
from videochat.infrastructure.queue import DocumentJobQueue
from videochat.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionAdapter,
)
from videochat.infrastructure.video import FFmpegAudioExtractor, HttpVideoDownloader


@pytest.fixture(autouse=True)
def mock_motor():
    """Keep the factory from creating a real Motor client."""
    with patch(
        "videochat.commons.infrastructure.documentdb.mongodb_provider.AsyncIOMotorClient"
    ) as client_class:
        yield client_class


def make_settings(**overrides) -> Settings:
    fields = {
        "document_db": DocumentDBSettings(database="test_db"),
        "transcription": TranscriptionSettings(api_key="sk-test", language="en"),
        "embeddings": EmbeddingsSettings(
            text=TextEmbeddingSettings(api_key="sk-test", batch_size=32)
        ),
        "chunking": ChunkingSettings(min_words=10, max_words=20),
        "processing": ProcessingSettings(temp_dir="/tmp/videochat", ffmpeg_path="/opt/ffmpeg"),
    }
    fields.update(overrides)
    return Settings(**fields)


@pytest.fixture
def factory() -> InfrastructureFactory:
    return InfrastructureFactory(make_settings())


class TestInfrastructureFactory:
    """Tests for service construction and caching."""

    def test_document_db(self, factory, mock_motor):
        db = factory.get_document_db()

        assert isinstance(db, MongoDBDocumentDB)
        mock_motor.assert_called_once_with("mongodb://localhost:27017", tz_aware=True)

    def test_instances_are_cached(self, factory):
        assert factory.get_document_db() is factory.get_document_db()
        assert factory.get_job_queue() is factory.get_job_queue()
        assert factory.get_pipeline() is factory.get_pipeline()

    def test_job_queue_shares_document_db(self, factory):
        queue = factory.get_job_queue()

        assert isinstance(queue, DocumentJobQueue)
        assert queue.name == "video-processing"

    def test_providers(self, factory):
        assert isinstance(factory.get_transcription_service(), OpenAIWhisperTranscription)
        assert isinstance(factory.get_text_embedding_service(), OpenAIEmbeddingService)
        assert isinstance(factory.get_video_downloader(), HttpVideoDownloader)
        assert isinstance(factory.get_audio_extractor(), FFmpegAudioExtractor)

    def test_audio_extractor_uses_configured_binary(self, factory):
        extractor = factory.get_audio_extractor()

        assert extractor.build_command(MagicMock(), MagicMock())[0] == "/opt/ffmpeg"

    def test_transcription_adapter_wiring(self, factory):
        adapter = factory.get_transcription_adapter()

        assert isinstance(adapter, TranscriptionAdapter)
        assert adapter._temp_dir == "/tmp/videochat"
        assert adapter._language_hint == "en"
        assert adapter._transcriber is factory.get_transcription_service()

    def test_chunk_embedding_batch_size(self, factory):
        assert factory.get_chunk_embedding_service().batch_size == 32

    def test_pipeline_with_embeddings(self, factory):
        pipeline = factory.get_pipeline()

        assert isinstance(pipeline, VideoProcessingPipeline)
        assert pipeline._embedder is factory.get_chunk_embedding_service()
        assert pipeline._chunker.config.min_words == 10

    def test_pipeline_without_embeddings(self):
        factory = InfrastructureFactory(
            make_settings(processing=ProcessingSettings(generate_embeddings=False))
        )

        assert factory.get_pipeline()._embedder is None

    def test_submission_service(self, factory):
        assert isinstance(factory.get_submission_service(), VideoSubmissionService)

    async def test_ensure_indexes(self, factory):
        storage = factory.get_storage_service()
        queue = factory.get_job_queue()

        with (
            patch.object(storage, "ensure_indexes", AsyncMock()) as storage_indexes,
            patch.object(queue, "ensure_indexes", AsyncMock()) as queue_indexes,
        ):
            await factory.ensure_indexes()

        storage_indexes.assert_awaited_once()
        queue_indexes.assert_awaited_once()

    async def test_close_all(self, factory, mock_motor):
        factory.get_document_db()

        await factory.close_all()

        mock_motor.return_value.close.assert_called_once()
        assert factory._instances == {}

    async def test_close_all_logs_failures(self, factory, mock_motor):
        factory.get_document_db()
        mock_motor.return_value.close.side_effect = RuntimeError("already closed")

        await factory.close_all()

        assert factory._instances == {}
