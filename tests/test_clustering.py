"""Greedy clustering of similarity results."""
from __future__ import annotations

from datetime import datetime

import pytest

from fundscope.domain.records import FundRecord, ScoredResult
from fundscope.search.clustering import build_clusters
from fundscope.search.engine import SearchEngine


def _result(fund_id: int, similarity: float) -> ScoredResult:
    record = FundRecord(id=fund_id, name=f"Fund {fund_id}", created_at=datetime(2026, 1, 1))
    return ScoredResult(record=record, similarity=similarity, distance=1.0 - similarity)


@pytest.fixture
def engine(use_test_engine, scenario_funds) -> SearchEngine:
    return SearchEngine.from_database(use_test_engine, backend="memory")


@pytest.mark.asyncio
async def test_near_duplicates_share_a_cluster(engine):
    clusters = await engine.search_with_clustering([1.0, 0.0], limit=10, similarity_threshold=0.95)

    member_names = [[r.record.name for r in c.results] for c in clusters]
    assert member_names[0] == ["Alpha Fund", "Alpha Fund II"]
    assert member_names[1:] == [["Epsilon Growth"], ["Gamma Partners"], ["Delta Capital"]]
    assert [c.index for c in clusters] == [0, 1, 2, 3]


@pytest.mark.asyncio
async def test_each_fund_appears_at_most_once(engine):
    clusters = await engine.search_with_clustering([1.0, 0.0], limit=10, similarity_threshold=0.5)
    ids = [r.id for c in clusters for r in c.results]
    assert len(ids) == len(set(ids))
    assert len(ids) == 5


@pytest.mark.asyncio
async def test_cluster_count_is_capped_by_limit(engine):
    clusters = await engine.search_with_clustering([1.0, 0.0], limit=2, similarity_threshold=0.95)
    assert len(clusters) == 2
    assert [r.record.name for r in clusters[1].results] == ["Epsilon Growth"]


@pytest.mark.asyncio
async def test_lower_threshold_merges_more(engine):
    clusters = await engine.search_with_clustering([1.0, 0.0], limit=10, similarity_threshold=0.7)
    assert [r.record.name for r in clusters[0].results] == ["Alpha Fund", "Alpha Fund II", "Epsilon Growth"]


@pytest.mark.asyncio
async def test_non_positive_limit_is_rejected(engine):
    with pytest.raises(ValueError, match="limit must be >= 1"):
        await engine.search_with_clustering([1.0, 0.0], limit=0)


def test_candidates_without_embedding_are_excluded():
    candidates = [_result(1, 0.9), _result(2, 0.8), _result(3, 0.7)]
    embeddings = {1: [1.0, 0.0], 2: None, 3: [1.0, 0.01]}
    clusters = build_clusters(candidates, embeddings, limit=10, similarity_threshold=0.9)
    assert len(clusters) == 1
    assert [r.id for r in clusters[0].results] == [1, 3]


def test_mismatched_lengths_are_not_compared():
    candidates = [_result(1, 0.9), _result(2, 0.8)]
    embeddings = {1: [1.0, 0.0], 2: [1.0, 0.0, 0.0]}
    clusters = build_clusters(candidates, embeddings, limit=10, similarity_threshold=0.1)
    assert [[r.id for r in c.results] for c in clusters] == [[1], [2]]


def test_empty_candidates_give_no_clusters():
    assert build_clusters([], {}, limit=5, similarity_threshold=0.8) == []
