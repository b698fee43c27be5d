"""OpenAI implementation of text embedding service."""

from typing import ClassVar

from openai import AsyncOpenAI

from videochat.infrastructure.embeddings.base import (
    EmbeddingResult,
    EmbeddingServiceBase,
)


class OpenAIEmbeddingService(EmbeddingServiceBase):
    """OpenAI implementation of text embedding service.

    Uses OpenAI's text-embedding models (e.g., text-embedding-3-small/large).
    """

    _MODEL_DIMENSIONS: ClassVar[dict[str, int]] = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    # OpenAI limit per request
    _API_BATCH_LIMIT = 2048

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        base_url: str | None = None,
        batch_size: int = 100,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize OpenAI embedding client.

        Args:
            api_key: OpenAI API key.
            model: Embedding model to use.
            base_url: Optional custom API endpoint (for Azure, etc.).
            batch_size: Texts per request, capped at the API limit.
            client: Optional preconfigured client.
        """
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)
        self._model = model
        self._dimensions = self._MODEL_DIMENSIONS.get(model, 1536)
        self._batch_size = min(batch_size, self._API_BATCH_LIMIT)

    async def embed_text(
        self,
        text: str,
        model: str | None = None,
    ) -> EmbeddingResult:
        """Generate embedding for a single text."""
        results = await self.embed_texts([text], model=model)
        return results[0]

    async def embed_texts(
        self,
        texts: list[str],
        model: str | None = None,
    ) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts (batched)."""
        if not texts:
            return []

        sanitized: list[str] = []
        for i, text in enumerate(texts):
            if not isinstance(text, str):
                raise ValueError(
                    f"Text at index {i} has type {type(text).__name__}, expected str"
                )
            # The API rejects empty strings
            sanitized.append(text if text.strip() else " ")

        use_model = model or self._model

        results: list[EmbeddingResult] = []
        for i in range(0, len(sanitized), self._batch_size):
            batch = sanitized[i : i + self._batch_size]

            response = await self._client.embeddings.create(
                model=use_model,
                input=batch,
            )

            tokens_per_item = None
            if response.usage:
                tokens_per_item = response.usage.total_tokens // len(batch)

            for data in sorted(response.data, key=lambda d: d.index):
                results.append(
                    EmbeddingResult(
                        vector=list(data.embedding),
                        dimensions=len(data.embedding),
                        model=use_model,
                        tokens_used=tokens_per_item,
                    )
                )

        return results

    @property
    def dimensions(self) -> int:
        """Dimensions of embedding vectors."""
        return self._dimensions

    @property
    def max_batch_size(self) -> int:
        """Maximum number of texts per request."""
        return self._batch_size
