"""Embedding-generation contract consumed by the search core."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from fundscope.domain.exceptions import EmbeddingGenerationError


def prepare_text(text: str, max_chars: int) -> str:
    """Trim and cap input text before it is sent to the embedding model."""
    return text.strip()[:max_chars]


def validate_embedding(values: Sequence[float] | None, dimension: int) -> list[float]:
    if not values:
        raise EmbeddingGenerationError("Embedding service returned no vector.")
    try:
        vector = [float(x) for x in values]
    except (TypeError, ValueError) as exc:
        raise EmbeddingGenerationError(f"Embedding contains non-numeric values: {exc}") from exc
    if len(vector) != dimension:
        raise EmbeddingGenerationError(
            f"Embedding has {len(vector)} dimensions, expected {dimension}."
        )
    return vector


class EmbeddingClient(ABC):
    """Text in, fixed-length float vector out."""

    dimension: int

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Return the embedding for *text*; raise EmbeddingGenerationError on failure."""
