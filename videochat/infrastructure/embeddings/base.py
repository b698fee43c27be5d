"""Abstract base class for embedding services."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class EmbeddingResult:
    """Result from embedding generation."""

    vector: list[float]
    dimensions: int
    model: str
    tokens_used: int | None = None


class EmbeddingServiceBase(ABC):
    """Abstract base class for text embedding services.

    Chunk texts are embedded so a downstream search layer can find them;
    nothing in the pipeline reads the vectors back.
    """

    @abstractmethod
    async def embed_text(
        self,
        text: str,
        model: str | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text.

        Args:
            text: Text to embed.
            model: Optional model override.

        Returns:
            Embedding result with vector and metadata.
        """

    @abstractmethod
    async def embed_texts(
        self,
        texts: list[str],
        model: str | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts (batched).

        Args:
            texts: List of texts to embed.
            model: Optional model override.

        Returns:
            List of embedding results in same order as input.
        """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Dimensions of embedding vectors."""

    @property
    @abstractmethod
    def max_batch_size(self) -> int:
        """Maximum number of texts per request."""
