"""Video processing pipeline run by the worker for each job."""

import time
from dataclasses import dataclass

from videochat.application.services.chunking import SegmentChunker
from videochat.application.services.enrichment import ChunkEmbeddingService
from videochat.application.services.storage import VideoStorageService
from videochat.commons.telemetry import LogContext, get_logger, timed
from videochat.domain.exceptions import ValidationError, VideoNotFoundException
from videochat.domain.models.job import Job
from videochat.domain.models.transcript import TranscriptChunk, TranscriptSegment
from videochat.domain.models.video import VideoMetadata, VideoStatus
from videochat.infrastructure.transcription.adapter import TranscriptionAdapter

logger = get_logger(__name__)


@dataclass
class PipelineResult:
    """Outcome of a successful pipeline run."""

    job_id: str
    video_id: str
    segment_count: int
    chunk_count: int
    embedded: bool
    duration_ms: float


class VideoProcessingPipeline:
    """Runs the processing stages for one ``process-video`` job.

    Pipeline steps:
    1. Fetch the video record
    2. Transcribe the hosted video into validated segments
    3. Chunk the segments (and optionally embed the chunks)
    4. Replace the video's stored segments and chunks
    5. Mark the video ready

    Any failure marks the video failed (best effort) and propagates to the
    caller, which records it on the job. Re-running a job for the same video
    converges to the same stored state.
    """

    def __init__(
        self,
        storage: VideoStorageService,
        transcriber: TranscriptionAdapter,
        chunker: SegmentChunker,
        embedder: ChunkEmbeddingService | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            storage: Video, segment and chunk store.
            transcriber: Download-extract-transcribe adapter.
            chunker: Segment chunker.
            embedder: Optional chunk enrichment; skipped when None.
        """
        self._storage = storage
        self._transcriber = transcriber
        self._chunker = chunker
        self._embedder = embedder

    async def process(self, job: Job) -> PipelineResult:
        """Process a job end to end.

        Raises:
            ValidationError: The job carries no video id.
            VideoNotFoundException: The referenced video doesn't exist.
            TranscriptionError: Download, extraction or provider failure,
                or no usable segments.
            ChunkingError: Chunking produced nothing.
            EmbeddingException: Enrichment failed.
            PersistenceError: A store read or write failed.
        """
        video_id = job.video_id
        if not video_id:
            raise ValidationError("Job payload has no video_id", field="video_id")

        started = time.perf_counter()
        with LogContext(job_id=job.id, video_id=video_id):
            logger.info("Processing video", extra={"attempt": job.attempts})
            try:
                video = await self._fetch_video(video_id)
                if job.attempts > 1 and video.is_failed:
                    await self._storage.update_video_status(
                        video_id, VideoStatus.PROCESSING
                    )
                    logger.info("Retrying failed video")
                segments = await self._transcribe(video)
                chunks = await self._chunk(video_id, segments)
                await self._persist(video_id, segments, chunks)
            except VideoNotFoundException:
                logger.error("Video not found, nothing to mark failed")
                raise
            except Exception as e:
                logger.error(
                    "Video processing failed",
                    extra={"error_type": type(e).__name__, "error": str(e)},
                )
                await self._mark_failed(video_id, e)
                raise

            result = PipelineResult(
                job_id=job.id,
                video_id=video_id,
                segment_count=len(segments),
                chunk_count=len(chunks),
                embedded=self._embedder is not None,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            logger.info(
                "Video ready",
                extra={
                    "segment_count": result.segment_count,
                    "chunk_count": result.chunk_count,
                    "duration_ms": result.duration_ms,
                },
            )
            return result

    @timed(logger=logger)
    async def _fetch_video(self, video_id: str) -> VideoMetadata:
        video = await self._storage.get_video(video_id)
        if video is None:
            raise VideoNotFoundException(video_id)
        return video

    @timed(logger=logger)
    async def _transcribe(self, video: VideoMetadata) -> list[TranscriptSegment]:
        drafts = await self._transcriber.transcribe(
            video.source_url, language_hint=video.language
        )
        return [
            TranscriptSegment(
                video_id=video.id,
                start=draft.start,
                end=draft.end,
                text=draft.text,
            )
            for draft in drafts
        ]

    @timed(logger=logger)
    async def _chunk(
        self,
        video_id: str,
        segments: list[TranscriptSegment],
    ) -> list[TranscriptChunk]:
        chunks = self._chunker.build_chunks(video_id, segments)
        if self._embedder is not None:
            chunks = await self._embedder.embed_chunks(video_id, chunks)
        return chunks

    @timed(logger=logger)
    async def _persist(
        self,
        video_id: str,
        segments: list[TranscriptSegment],
        chunks: list[TranscriptChunk],
    ) -> None:
        await self._storage.replace_segments(video_id, segments)
        await self._storage.replace_chunks(video_id, chunks)
        found = await self._storage.update_video_status(
            video_id,
            VideoStatus.READY,
            segment_count=len(segments),
            chunk_count=len(chunks),
        )
        if not found:
            # Deleted while the job was running
            raise VideoNotFoundException(video_id)

    async def _mark_failed(self, video_id: str, error: Exception) -> None:
        """Set the video to FAILED without masking ``error``."""
        try:
            await self._storage.update_video_status(
                video_id,
                VideoStatus.FAILED,
                error_message=str(error) or type(error).__name__,
            )
        except Exception:
            logger.error(
                "Could not mark video as failed",
                exc_info=True,
                extra={
                    "status_update_failed": True,
                    "primary_error": type(error).__name__,
                },
            )
