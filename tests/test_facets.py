"""Facet bands over similarity results."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from fundscope.domain.records import FundRecord, ScoredResult
from fundscope.search.engine import SearchEngine
from fundscope.search.facets import summarize


NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def _result(fund_id: int, similarity: float, age: timedelta) -> ScoredResult:
    record = FundRecord(id=fund_id, name=f"Fund {fund_id}", created_at=NOW - age)
    return ScoredResult(record=record, similarity=similarity, distance=1.0 - similarity)


def _counts(buckets) -> dict[str, int]:
    return {b.label: b.count for b in buckets}


def test_similarity_band_edges_are_lower_inclusive():
    results = [
        _result(1, 1.0, timedelta(0)),
        _result(2, 0.9, timedelta(0)),
        _result(3, 0.8999, timedelta(0)),
        _result(4, 0.7, timedelta(0)),
        _result(5, 0.5, timedelta(0)),
        _result(6, 0.4999, timedelta(0)),
        _result(7, -0.3, timedelta(0)),
    ]
    summary = summarize(results, now=NOW)
    assert _counts(summary.similarity_ranges) == {
        "0.9-1.0": 2, "0.7-0.9": 2, "0.5-0.7": 1, "0.0-0.5": 2,
    }


def test_recency_band_edges_are_upper_inclusive():
    results = [
        _result(1, 0.9, timedelta(hours=2)),
        _result(2, 0.9, timedelta(days=1)),
        _result(3, 0.9, timedelta(days=1, seconds=1)),
        _result(4, 0.9, timedelta(days=7)),
        _result(5, 0.9, timedelta(days=30)),
        _result(6, 0.9, timedelta(days=31)),
    ]
    summary = summarize(results, now=NOW)
    assert _counts(summary.time_periods) == {
        "Last 24 hours": 2, "Last week": 2, "Last month": 1, "Older": 1,
    }


def test_bands_are_reported_in_fixed_order_even_when_empty():
    summary = summarize([], now=NOW)
    assert [b.label for b in summary.similarity_ranges] == ["0.9-1.0", "0.7-0.9", "0.5-0.7", "0.0-0.5"]
    assert [b.label for b in summary.time_periods] == ["Last 24 hours", "Last week", "Last month", "Older"]
    assert all(b.count == 0 for b in summary.similarity_ranges + summary.time_periods)


def test_naive_timestamps_are_treated_as_utc():
    record = FundRecord(id=1, name="Naive", created_at=datetime(2026, 6, 1, 6, 0))
    summary = summarize([ScoredResult(record=record, similarity=0.95)], now=NOW)
    assert _counts(summary.time_periods)["Last 24 hours"] == 1


@pytest.mark.asyncio
async def test_band_totals_equal_result_count(use_test_engine, scenario_funds):
    engine = SearchEngine.from_database(use_test_engine, backend="memory")
    faceted = await engine.search_with_facets([1.0, 0.0], limit=4)

    assert len(faceted.results) == 4
    assert sum(b.count for b in faceted.facets.similarity_ranges) == 4
    assert sum(b.count for b in faceted.facets.time_periods) == 4
    assert _counts(faceted.facets.similarity_ranges) == {
        "0.9-1.0": 2, "0.7-0.9": 1, "0.5-0.7": 0, "0.0-0.5": 1,
    }
    assert _counts(faceted.facets.time_periods)["Last 24 hours"] == 4
