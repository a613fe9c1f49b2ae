"""Embedding adapter for Ollama ``/api/embeddings``."""
from __future__ import annotations

import logging

import httpx

from fundscope.config import settings
from fundscope.domain.exceptions import EmbeddingGenerationError
from fundscope.search.embeddings import EmbeddingClient, prepare_text, validate_embedding

logger = logging.getLogger(__name__)


class OllamaEmbeddingClient(EmbeddingClient):
    def __init__(
        self,
        base_url: str | None = None,
        model: str | None = None,
        *,
        dimension: int | None = None,
        max_chars: int | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.model = model or settings.EMBEDDING_MODEL
        self.dimension = dimension or settings.EMBEDDING_DIM
        self._max_chars = max_chars or settings.EMBEDDING_MAX_CHARS
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.OLLAMA_URL).rstrip("/"),
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def embed(self, text: str) -> list[float]:
        prompt = prepare_text(text, self._max_chars)
        if len(prompt) < len(text.strip()):
            logger.info("Embedding input truncated from %d to %d chars", len(text), len(prompt))
        try:
            resp = await self._client.post("/api/embeddings", json={"model": self.model, "prompt": prompt})
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise EmbeddingGenerationError(f"Failed to generate embedding: {exc}") from exc

        values = data.get("embedding") if isinstance(data, dict) else None
        vector = validate_embedding(values, self.dimension)
        logger.debug("Embedding generated (%d dimensions) with %s", len(vector), self.model)
        return vector

    async def aclose(self) -> None:
        await self._client.aclose()
