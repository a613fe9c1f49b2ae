"""HTTP surface: search and fund endpoints over a temp database."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fundscope.api.app import create_app
from fundscope.domain.exceptions import EmbeddingGenerationError
from fundscope.search.engine import SearchEngine

from conftest import FakeEmbeddingClient


@pytest.fixture
def embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient({"gamma": [0.0, 1.0], "Gamma": [0.0, 1.0]})


@pytest.fixture
def client(use_test_engine, embedder):
    engine = SearchEngine.from_database(use_test_engine, backend="memory", embedder=embedder)
    with TestClient(create_app(search_engine=engine)) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_text_search(client, scenario_funds):
    resp = client.post("/search/text", json={"query": "alpha", "limit": 5})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert {item["name"] for item in body["items"]} == {"Alpha Fund", "Alpha Fund II"}


def test_advanced_text_search(client, scenario_funds):
    resp = client.post(
        "/search/text/advanced", json={"terms": ["alpha", "II"], "operator": "AND"},
    )
    assert resp.status_code == 200
    assert [item["name"] for item in resp.json()["items"]] == ["Alpha Fund II"]


def test_similar_with_vector(client, scenario_funds):
    resp = client.post("/search/similar", json={"query_vector": [1.0, 0.0], "limit": 3})
    assert resp.status_code == 200
    names = [r["fund"]["name"] for r in resp.json()["results"]]
    assert names == ["Alpha Fund", "Alpha Fund II", "Epsilon Growth"]


def test_similar_with_text_query_embeds_it(client, embedder, scenario_funds):
    resp = client.post("/search/similar", json={"query": "gamma-like funds", "limit": 1})
    assert resp.status_code == 200
    assert resp.json()["results"][0]["fund"]["name"] == "Gamma Partners"
    assert embedder.calls == ["gamma-like funds"]


def test_similar_requires_a_query(client):
    resp = client.post("/search/similar", json={"limit": 3})
    assert resp.status_code == 422


def test_hybrid(client, scenario_funds):
    resp = client.post("/search/hybrid", json={"query": "alpha", "query_vector": [1.0, 0.0], "limit": 2})
    assert resp.status_code == 200
    results = resp.json()["results"]
    assert results[0]["fund"]["name"] == "Alpha Fund"
    assert results[0]["total_score"] == pytest.approx(1.0)


def test_clusters(client, scenario_funds):
    resp = client.post(
        "/search/clusters", json={"query_vector": [1.0, 0.0], "similarity_threshold": 0.95},
    )
    assert resp.status_code == 200
    first = resp.json()["clusters"][0]
    assert first["cluster"] == 0
    assert [r["fund"]["name"] for r in first["results"]] == ["Alpha Fund", "Alpha Fund II"]


def test_facets(client, scenario_funds):
    resp = client.post("/search/facets", json={"query_vector": [1.0, 0.0]})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 5
    assert sum(b["count"] for b in body["facets"]["similarity_ranges"]) == 5
    assert sum(b["count"] for b in body["facets"]["time_periods"]) == 5


def test_unknown_field_is_unprocessable(client, scenario_funds):
    resp = client.post("/search/text", json={"query": "a", "sort_field": "name"})
    assert resp.status_code == 422
    assert "Unknown field" in resp.json()["detail"]


def test_create_and_fetch_fund(client):
    resp = client.post("/funds", json={"name": "Gamma Two", "vintage": 2021, "aliases": ["G2"]})
    assert resp.status_code == 201
    created = resp.json()
    assert created["aliases"] == ["G2"]

    fetched = client.get(f"/funds/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Gamma Two"

    embedding = client.get(f"/funds/{created['id']}/embedding").json()
    assert embedding["embedding"] == [0.0, 1.0]

    stats = client.get("/stats").json()
    assert stats == {"documents": 1, "embeddings": 1, "orphaned_documents": 0}


def test_missing_fund_is_404(client):
    assert client.get("/funds/999").status_code == 404
    assert client.post("/funds/999/embedding").status_code == 404


def test_embedding_failure_is_502_with_stage(client, embedder):
    embedder.error = EmbeddingGenerationError("model offline")
    resp = client.post("/funds", json={"name": "Offline Fund"})
    assert resp.status_code == 502
    assert resp.json() == {"detail": "model offline", "stage": "generation"}


def test_backfill(client, use_test_engine, make_fund, seed):
    seed(use_test_engine, make_fund("Pending One"), make_fund("Pending Two"))
    resp = client.post("/embeddings/backfill", params={"limit": 10})
    assert resp.status_code == 200
    assert resp.json() == {"embedded": 2, "failed": []}


def test_similar_rejects_half_open_date_range(client, scenario_funds):
    resp = client.post(
        "/search/similar",
        json={"query_vector": [1.0, 0.0], "start_date": "2026-01-01T00:00:00Z"},
    )
    assert resp.status_code == 422

    reversed_range = client.post(
        "/search/similar",
        json={
            "query_vector": [1.0, 0.0],
            "start_date": "2026-02-01T00:00:00Z",
            "end_date": "2026-01-01T00:00:00",
        },
    )
    assert reversed_range.status_code == 422


def test_similar_with_closed_date_range(client, scenario_funds):
    resp = client.post(
        "/search/similar",
        json={
            "query_vector": [1.0, 0.0],
            "limit": 5,
            "start_date": "2000-01-01T00:00:00Z",
            "end_date": "2000-12-31T00:00:00Z",
        },
    )
    assert resp.status_code == 200
    assert resp.json()["results"] == []


def test_update_and_delete_fund(client, embedder):
    created = client.post("/funds", json={"name": "Alpha Three", "status": "Raising"}).json()

    patched = client.patch(f"/funds/{created['id']}", json={"name": "Gamma Three"})
    assert patched.status_code == 200
    assert patched.json()["name"] == "Gamma Three"
    assert patched.json()["status"] == "Raising"
    assert client.get(f"/funds/{created['id']}/embedding").json()["embedding"] == [0.0, 1.0]

    assert client.patch(f"/funds/{created['id']}", json={}).status_code == 422
    assert client.patch(f"/funds/{created['id']}", json={"name": None}).status_code == 422

    deleted = client.delete(f"/funds/{created['id']}")
    assert deleted.status_code == 204
    assert client.get(f"/funds/{created['id']}").status_code == 404
    assert client.delete(f"/funds/{created['id']}").status_code == 404
    assert client.patch("/funds/999", json={"status": "Closed"}).status_code == 404


def test_list_funds_and_field_values(client):
    client.post("/funds", json={"name": "One", "strategy": "Buyout", "industries": ["Software"]})
    client.post("/funds", json={"name": "Two", "strategy": "Venture", "industries": ["Energy", "Software"]})

    listed = client.get("/funds", params={"field": "strategy", "value": "Venture"}).json()
    assert [f["name"] for f in listed["items"]] == ["Two"]

    assert client.get("/funds/values/strategy").json() == {"field": "strategy", "values": ["Buyout", "Venture"]}
    assert client.get("/funds/values/industries").json()["values"] == ["Energy", "Software"]
    assert client.get("/funds/values/embedding").status_code == 422
