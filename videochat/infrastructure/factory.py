"""Infrastructure factory for creating service instances from configuration."""

from typing import Any, cast

from videochat.application.services.chunking import SegmentChunker
from videochat.application.services.enrichment import ChunkEmbeddingService
from videochat.application.services.pipeline import VideoProcessingPipeline
from videochat.application.services.storage import VideoStorageService
from videochat.application.services.submission import VideoSubmissionService
from videochat.commons.infrastructure.documentdb import DocumentDBBase, MongoDBDocumentDB
from videochat.commons.settings.models import Settings
from videochat.commons.telemetry import get_logger
from videochat.infrastructure.embeddings import (
    EmbeddingServiceBase,
    OpenAIEmbeddingService,
)
from videochat.infrastructure.queue import DocumentJobQueue, JobQueueBase
from videochat.infrastructure.transcription import (
    OpenAIWhisperTranscription,
    TranscriptionAdapter,
    TranscriptionServiceBase,
)
from videochat.infrastructure.video import (
    AudioExtractorBase,
    FFmpegAudioExtractor,
    HttpVideoDownloader,
    VideoDownloaderBase,
)

logger = get_logger(__name__)


class InfrastructureFactory:
    """Factory for creating infrastructure service instances.

    Creates concrete implementations based on configuration settings and
    caches one instance of each per factory.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize factory with settings.

        Args:
            settings: Application settings.
        """
        self._settings = settings
        self._instances: dict[str, Any] = {}

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_document_db(self) -> DocumentDBBase:
        """Get document database instance.

        Returns:
            Configured document database provider.
        """
        if "document_db" not in self._instances:
            doc_settings = self._settings.document_db
            self._instances["document_db"] = MongoDBDocumentDB(
                connection_string=doc_settings.connection_string,
                database_name=doc_settings.database,
            )
        return cast("DocumentDBBase", self._instances["document_db"])

    def get_job_queue(self) -> JobQueueBase:
        """Get the job queue backed by the jobs collection."""
        if "job_queue" not in self._instances:
            self._instances["job_queue"] = DocumentJobQueue(
                document_db=self.get_document_db(),
                collection=self._settings.document_db.collections.jobs,
                settings=self._settings.queue,
            )
        return cast("JobQueueBase", self._instances["job_queue"])

    def get_transcription_service(self) -> TranscriptionServiceBase:
        """Get transcription service instance.

        Returns:
            Configured transcription service.
        """
        if "transcription" not in self._instances:
            trans_settings = self._settings.transcription
            self._instances["transcription"] = OpenAIWhisperTranscription(
                api_key=trans_settings.api_key,
                model=trans_settings.model,
                base_url=trans_settings.base_url,
                timeout_seconds=trans_settings.timeout_seconds,
            )
        return cast("TranscriptionServiceBase", self._instances["transcription"])

    def get_text_embedding_service(self) -> EmbeddingServiceBase:
        """Get text embedding service instance.

        Returns:
            Configured text embedding service.
        """
        if "text_embedding" not in self._instances:
            embed_settings = self._settings.embeddings.text
            self._instances["text_embedding"] = OpenAIEmbeddingService(
                api_key=embed_settings.api_key,
                model=embed_settings.model,
                base_url=embed_settings.base_url,
                batch_size=embed_settings.batch_size,
            )
        return cast("EmbeddingServiceBase", self._instances["text_embedding"])

    def get_video_downloader(self) -> VideoDownloaderBase:
        if "video_downloader" not in self._instances:
            self._instances["video_downloader"] = HttpVideoDownloader(
                timeout_seconds=self._settings.processing.download_timeout_seconds,
            )
        return cast("VideoDownloaderBase", self._instances["video_downloader"])

    def get_audio_extractor(self) -> AudioExtractorBase:
        if "audio_extractor" not in self._instances:
            self._instances["audio_extractor"] = FFmpegAudioExtractor(
                ffmpeg_path=self._settings.processing.ffmpeg_path,
            )
        return cast("AudioExtractorBase", self._instances["audio_extractor"])

    def get_transcription_adapter(self) -> TranscriptionAdapter:
        if "transcription_adapter" not in self._instances:
            self._instances["transcription_adapter"] = TranscriptionAdapter(
                downloader=self.get_video_downloader(),
                audio_extractor=self.get_audio_extractor(),
                transcription_service=self.get_transcription_service(),
                temp_dir=self._settings.processing.temp_dir,
                language_hint=self._settings.transcription.language,
            )
        return cast("TranscriptionAdapter", self._instances["transcription_adapter"])

    def get_storage_service(self) -> VideoStorageService:
        if "storage" not in self._instances:
            self._instances["storage"] = VideoStorageService(
                document_db=self.get_document_db(),
                doc_settings=self._settings.document_db,
            )
        return cast("VideoStorageService", self._instances["storage"])

    def get_chunk_embedding_service(self) -> ChunkEmbeddingService:
        if "chunk_embedding" not in self._instances:
            self._instances["chunk_embedding"] = ChunkEmbeddingService(
                embedder=self.get_text_embedding_service(),
                storage=self.get_storage_service(),
                batch_size=self._settings.embeddings.text.batch_size,
            )
        return cast("ChunkEmbeddingService", self._instances["chunk_embedding"])

    def get_pipeline(self) -> VideoProcessingPipeline:
        """Get the processing pipeline wired from settings.

        Chunk enrichment is included only when
        ``processing.generate_embeddings`` is enabled.
        """
        if "pipeline" not in self._instances:
            embedder = (
                self.get_chunk_embedding_service()
                if self._settings.processing.generate_embeddings
                else None
            )
            self._instances["pipeline"] = VideoProcessingPipeline(
                storage=self.get_storage_service(),
                transcriber=self.get_transcription_adapter(),
                chunker=SegmentChunker.from_settings(self._settings.chunking),
                embedder=embedder,
            )
        return cast("VideoProcessingPipeline", self._instances["pipeline"])

    def get_submission_service(self) -> VideoSubmissionService:
        if "submission" not in self._instances:
            self._instances["submission"] = VideoSubmissionService(
                storage=self.get_storage_service(),
                queue=self.get_job_queue(),
            )
        return cast("VideoSubmissionService", self._instances["submission"])

    async def ensure_indexes(self) -> None:
        """Create the store and queue indexes."""
        await self.get_storage_service().ensure_indexes()
        await self.get_job_queue().ensure_indexes()

    async def close_all(self) -> None:
        """Close all service connections."""
        for name, instance in self._instances.items():
            close = getattr(instance, "close", None)
            if close is None:
                continue
            try:
                close_result = close()
                if hasattr(close_result, "__await__"):
                    await close_result
            except Exception as e:
                logger.warning(
                    "Failed to close service",
                    extra={"service": name, "error": str(e)},
                )

        self._instances.clear()
