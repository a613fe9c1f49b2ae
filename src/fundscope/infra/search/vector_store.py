"""VectorStore contract for backends with a native nearest-neighbor operator."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from fundscope.domain.records import FundRecord, SearchFilters


class DistanceMetric(str, Enum):
    COSINE = "cosine"
    L2 = "l2"


@dataclass(frozen=True, slots=True)
class NeighborHit:
    """One scored hit returned by a vector query; lower distance is closer."""

    distance: float
    record: FundRecord


class VectorStore(ABC):
    """Abstract interface for backend-native vector retrieval."""

    name: str = "vector-store"

    @abstractmethod
    async def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        top_k: int,
        *,
        metric: DistanceMetric = DistanceMetric.COSINE,
        filters: SearchFilters | None = None,
    ) -> list[NeighborHit]:
        """Return up to *top_k* hits ordered by ascending distance, ties by record id."""
