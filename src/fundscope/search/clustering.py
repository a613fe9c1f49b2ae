"""Greedy grouping of near-duplicate search results."""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from fundscope.domain.exceptions import VectorLengthError
from fundscope.domain.records import Cluster, ScoredResult
from fundscope.infra.db.record_store import RecordStore
from fundscope.search.codec import VectorCodec
from fundscope.search.scanner import VectorScanner
from fundscope.search.similarity import cosine_similarity

logger = logging.getLogger(__name__)

_CANDIDATE_FACTOR = 3


def build_clusters(
    candidates: Sequence[ScoredResult],
    embeddings: Mapping[int, list[float] | None],
    limit: int,
    similarity_threshold: float,
) -> list[Cluster]:
    """Single greedy pass over *candidates* in score order.

    Each unassigned candidate seeds a cluster and absorbs every later
    unassigned candidate whose cosine similarity to the seed is at least
    *similarity_threshold*. Candidates without a usable embedding are never
    clustered. Stops once *limit* clusters exist, so late candidates may be
    left out.
    """
    clusters: list[Cluster] = []
    processed: set[int] = set()

    for seed in candidates:
        if seed.id in processed:
            continue
        processed.add(seed.id)
        seed_embedding = embeddings.get(seed.id)
        if seed_embedding is None:
            continue

        cluster = Cluster(index=len(clusters), results=[seed])
        for other in candidates:
            if other.id in processed:
                continue
            other_embedding = embeddings.get(other.id)
            if other_embedding is None:
                continue
            try:
                similarity = cosine_similarity(seed_embedding, other_embedding)
            except VectorLengthError as exc:
                logger.warning("Not comparing funds %s and %s: %s", seed.id, other.id, exc.message)
                continue
            if similarity >= similarity_threshold:
                cluster.results.append(other)
                processed.add(other.id)

        clusters.append(cluster)
        if len(clusters) >= limit:
            break
    return clusters


class ClusterBuilder:
    def __init__(self, store: RecordStore, scanner: VectorScanner) -> None:
        self._store = store
        self._scanner = scanner

    async def search_with_clustering(
        self,
        query_vector: Sequence[float],
        limit: int = 10,
        similarity_threshold: float = 0.8,
    ) -> list[Cluster]:
        if limit <= 0:
            raise ValueError("limit must be >= 1.")
        candidates = await self._scanner.search_similar(query_vector, limit * _CANDIDATE_FACTOR)
        stored = await self._store.fetch_by_ids([c.id for c in candidates])
        embeddings = {s.record.id: VectorCodec.decode(s.payload) for s in stored}
        return build_clusters(candidates, embeddings, limit, similarity_threshold)
