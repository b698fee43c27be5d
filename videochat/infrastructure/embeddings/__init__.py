"""Embedding services."""

from videochat.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)
from videochat.infrastructure.embeddings.openai_embeddings import (
    OpenAIEmbeddingService,
)

__all__ = [
    "EmbeddingServiceBase",
    "EmbeddingResult",
    "OpenAIEmbeddingService",
]
