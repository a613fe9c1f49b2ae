from __future__ import annotations

import logging
from collections.abc import Sequence

from fundscope.domain.records import FundRecord, ScoredResult
from fundscope.search.scanner import VectorScanner
from fundscope.search.text_match import TextMatcher

logger = logging.getLogger(__name__)

# Each leg fetches this many times the requested limit before merging.
_OVERFETCH = 2


def weighted_fusion(
    text_results: Sequence[FundRecord],
    vector_results: Sequence[ScoredResult],
    text_weight: float,
    semantic_weight: float,
) -> list[ScoredResult]:
    """Merge both legs by fund id.

    total = text_weight (if text matched) + similarity * semantic_weight (if vector matched).
    Weights are used as given, not normalized.
    """
    merged: dict[int, ScoredResult] = {}

    for record in text_results:
        merged[record.id] = ScoredResult(
            record=record,
            similarity=0.0,
            text_score=text_weight,
            semantic_score=0.0,
            total_score=text_weight,
        )

    for res in vector_results:
        semantic = res.similarity * semantic_weight
        existing = merged.get(res.id)
        if existing is not None:
            existing.similarity = res.similarity
            existing.distance = res.distance
            existing.semantic_score = semantic
            existing.total_score = existing.text_score + semantic
        else:
            merged[res.id] = ScoredResult(
                record=res.record,
                similarity=res.similarity,
                distance=res.distance,
                text_score=0.0,
                semantic_score=semantic,
                total_score=semantic,
            )

    fused = list(merged.values())
    fused.sort(key=lambda r: (-r.total_score, r.id))
    return fused


class HybridRanker:
    def __init__(self, text_matcher: TextMatcher, scanner: VectorScanner) -> None:
        self._text = text_matcher
        self._scanner = scanner

    async def hybrid_search(
        self,
        query: str,
        query_vector: Sequence[float],
        text_weight: float = 0.3,
        semantic_weight: float = 0.7,
        limit: int = 10,
    ) -> list[ScoredResult]:
        """Perform Hybrid Search (literal text + vector similarity)."""
        if limit <= 0:
            raise ValueError("limit must be >= 1.")
        fetch = limit * _OVERFETCH
        text_hits = await self._text.search_by_text(query, fetch)
        vector_hits = await self._scanner.search_similar(query_vector, fetch)
        logger.debug(
            "Hybrid search %r: %d text hit(s), %d vector hit(s)", query, len(text_hits), len(vector_hits),
        )
        return weighted_fusion(text_hits, vector_hits, text_weight, semantic_weight)[:limit]
