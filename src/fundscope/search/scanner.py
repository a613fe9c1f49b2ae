"""Vector scanning strategies.

Both strategies return results ordered by similarity (higher is better),
ties broken by record id, so callers cannot tell which one served them
apart from speed.
"""
from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence

from fundscope.domain.exceptions import BackendError, ScanError, VectorLengthError
from fundscope.domain.records import ScoredResult, SearchFilters, StoredFund
from fundscope.infra.db.record_store import RecordStore
from fundscope.infra.search.vector_store import DistanceMetric, NeighborHit, VectorStore
from fundscope.search.codec import VectorCodec
from fundscope.search.similarity import cosine_similarity, distance_to_similarity, euclidean_distance

logger = logging.getLogger(__name__)


def _prepare_query(query_vector: Sequence[float], limit: int) -> list[float]:
    if limit <= 0:
        raise ValueError("limit must be >= 1.")
    values = [float(x) for x in query_vector]
    if not values:
        raise ScanError("Query vector is empty.")
    return values


def _result_cap(limit: int, filters: SearchFilters | None) -> int:
    if filters is not None and filters.max_results:
        return filters.max_results
    return limit


def rank_results(results: list[ScoredResult]) -> list[ScoredResult]:
    results.sort(key=lambda r: (-r.similarity, r.id))
    return results


def _finalize(
    results: list[ScoredResult], limit: int, filters: SearchFilters | None,
) -> list[ScoredResult]:
    if filters is not None and filters.min_similarity is not None:
        results = [r for r in results if r.similarity >= filters.min_similarity]
    return rank_results(results)[: _result_cap(limit, filters)]


class VectorScanner(ABC):
    name: str = "scanner"

    @abstractmethod
    async def search_similar(
        self,
        query_vector: Sequence[float],
        limit: int = 5,
        use_cosine: bool = True,
        filters: SearchFilters | None = None,
    ) -> list[ScoredResult]:
        """Top matches for *query_vector*, best first."""


class InProcessScanner(VectorScanner):
    """Brute-force scan: decode every candidate payload and score it here."""

    name = "in-process"

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def search_similar(
        self,
        query_vector: Sequence[float],
        limit: int = 5,
        use_cosine: bool = True,
        filters: SearchFilters | None = None,
    ) -> list[ScoredResult]:
        query = _prepare_query(query_vector, limit)
        candidates = await self._store.fetch_candidates(filters)
        return _finalize(score_candidates(query, candidates, use_cosine), limit, filters)


def score_candidates(
    query: Sequence[float], candidates: Iterable[StoredFund], use_cosine: bool = True,
) -> list[ScoredResult]:
    results: list[ScoredResult] = []
    undecodable = 0
    mismatched = 0
    for stored in candidates:
        embedding = VectorCodec.decode(stored.payload)
        if embedding is None:
            undecodable += 1
            continue
        try:
            if use_cosine:
                similarity = cosine_similarity(query, embedding)
                distance = 1.0 - similarity
            else:
                distance = euclidean_distance(query, embedding)
                similarity = distance_to_similarity(distance)
        except VectorLengthError as exc:
            mismatched += 1
            logger.warning("Skipping fund %s: %s", stored.record.id, exc.message)
            continue
        results.append(ScoredResult(record=stored.record, similarity=similarity, distance=distance))

    if undecodable:
        logger.debug("Skipped %d fund(s) with undecodable embeddings", undecodable)
    if mismatched:
        logger.warning("Skipped %d fund(s) whose embedding length differs from the query", mismatched)
    return results


class AcceleratedScanner(VectorScanner):
    """Delegates scoring to a backend vector operator; falls back on backend failure."""

    def __init__(self, vector_store: VectorStore, fallback: InProcessScanner) -> None:
        self._vector_store = vector_store
        self._fallback = fallback
        self._fallback_logged = False

    @property
    def name(self) -> str:
        return self._vector_store.name

    async def search_similar(
        self,
        query_vector: Sequence[float],
        limit: int = 5,
        use_cosine: bool = True,
        filters: SearchFilters | None = None,
    ) -> list[ScoredResult]:
        query = _prepare_query(query_vector, limit)
        metric = DistanceMetric.COSINE if use_cosine else DistanceMetric.L2
        try:
            hits = await self._vector_store.nearest_neighbors(
                query, _result_cap(limit, filters), metric=metric, filters=filters,
            )
        except BackendError as exc:
            self._log_fallback(exc)
            return await self._fallback.search_similar(query, limit, use_cosine, filters)

        results = [r for r in (self._to_result(hit, metric) for hit in hits) if r is not None]
        return _finalize(results, limit, filters)

    def _log_fallback(self, exc: BackendError) -> None:
        if self._fallback_logged:
            logger.debug("%s unavailable, scanning in process: %s", self.name, exc.message)
            return
        self._fallback_logged = True
        logger.warning(
            "%s unavailable, falling back to in-process scan: %s. A stored embedding of the wrong "
            "dimension or a malformed payload fails every backend query; later fallbacks are "
            "logged at debug level.",
            self.name, exc.message,
        )

    @staticmethod
    def _to_result(hit: NeighborHit, metric: DistanceMetric) -> ScoredResult | None:
        if metric == DistanceMetric.COSINE:
            # sqlite-vec yields NaN for zero-norm vectors.
            similarity = 0.0 if math.isnan(hit.distance) else min(1.0, max(-1.0, 1.0 - hit.distance))
            return ScoredResult(record=hit.record, similarity=similarity, distance=1.0 - similarity)
        if math.isnan(hit.distance):
            return None
        return ScoredResult(
            record=hit.record,
            similarity=distance_to_similarity(hit.distance),
            distance=hit.distance,
        )


def select_scanner(store: RecordStore, vector_store: VectorStore | None) -> VectorScanner:
    """Pick the scan strategy once, from whether a native vector backend exists."""
    fallback = InProcessScanner(store)
    if vector_store is None:
        logger.info("No native vector backend; using in-process similarity scan")
        return fallback
    logger.info("Using %s for vector similarity", vector_store.name)
    return AcceleratedScanner(vector_store, fallback)
