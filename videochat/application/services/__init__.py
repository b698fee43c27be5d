"""Application services."""

from videochat.application.services.chunking import (
    ChunkDraft,
    SegmentChunker,
    SplitReason,
    chunk_segments,
)
from videochat.application.services.enrichment import (
    ChunkEmbeddingService,
    EmbeddingStats,
)
from videochat.application.services.pipeline import (
    PipelineResult,
    VideoProcessingPipeline,
)
from videochat.application.services.storage import VideoStorageService
from videochat.application.services.submission import (
    SubmissionReceipt,
    VideoSubmissionService,
)

__all__ = [
    # Chunking
    "SegmentChunker",
    "ChunkDraft",
    "SplitReason",
    "chunk_segments",
    # Storage
    "VideoStorageService",
    # Enrichment
    "ChunkEmbeddingService",
    "EmbeddingStats",
    # Pipeline
    "VideoProcessingPipeline",
    "PipelineResult",
    # Producer
    "VideoSubmissionService",
    "SubmissionReceipt",
]
