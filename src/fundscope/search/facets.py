"""Similarity-band and recency-band counts over a result set."""
from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timezone

from fundscope.domain.records import FacetBucket, FacetedResults, FacetSummary, ScoredResult
from fundscope.search.scanner import VectorScanner

# (label, inclusive lower bound); anything below the last bound lands in the last band.
SIMILARITY_BANDS = (("0.9-1.0", 0.9), ("0.7-0.9", 0.7), ("0.5-0.7", 0.5), ("0.0-0.5", None))
# (label, inclusive upper bound in days)
RECENCY_BANDS = (("Last 24 hours", 1), ("Last week", 7), ("Last month", 30), ("Older", None))

_SECONDS_PER_DAY = 86400.0


def _similarity_band(similarity: float) -> int:
    for index, (_, lower) in enumerate(SIMILARITY_BANDS):
        if lower is None or similarity >= lower:
            return index
    return len(SIMILARITY_BANDS) - 1


def _recency_band(age_days: float) -> int:
    for index, (_, upper) in enumerate(RECENCY_BANDS):
        if upper is None or age_days <= upper:
            return index
    return len(RECENCY_BANDS) - 1


def _age_days(created_at: datetime, now: datetime) -> float:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return (now - created_at).total_seconds() / _SECONDS_PER_DAY


def summarize(results: Sequence[ScoredResult], now: datetime | None = None) -> FacetSummary:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    similarity = [FacetBucket(label) for label, _ in SIMILARITY_BANDS]
    recency = [FacetBucket(label) for label, _ in RECENCY_BANDS]
    for res in results:
        similarity[_similarity_band(res.similarity or 0.0)].count += 1
        recency[_recency_band(_age_days(res.record.created_at, now))].count += 1
    return FacetSummary(similarity_ranges=similarity, time_periods=recency)


class FacetSummarizer:
    def __init__(self, scanner: VectorScanner) -> None:
        self._scanner = scanner

    async def search_with_facets(self, query_vector: Sequence[float], limit: int = 20) -> FacetedResults:
        results = await self._scanner.search_similar(query_vector, limit)
        return FacetedResults(results=results, facets=summarize(results))
