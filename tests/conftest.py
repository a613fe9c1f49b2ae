"""Shared test fixtures.

use_test_engine: temp-file SQLite engine without sqlite-vec; the global
    engine reference is redirected to it.
vec_engine: temp-file SQLite engine with sqlite-vec loaded; skips the test
    when the extension cannot be loaded here.
scenario_funds: five funds with 2-d embeddings used across modules.
"""
from __future__ import annotations

from collections.abc import Sequence

import pytest
from sqlmodel import Session, SQLModel

from fundscope.domain.exceptions import EmbeddingGenerationError
from fundscope.infra.db.engine import create_db_engine
from fundscope.infra.search.vector_sqlite import supports_native_vectors
from fundscope.models.fund import Fund
from fundscope.search.codec import EmbeddingFormat, VectorCodec
from fundscope.search.embeddings import EmbeddingClient

# name -> embedding; ids are assigned 1..5 in this order.
SCENARIO = [
    ("Alpha Fund", [1.0, 0.0]),
    ("Alpha Fund II", [0.99, 0.01]),
    ("Gamma Partners", [0.0, 1.0]),
    ("Delta Capital", [-1.0, 0.0]),
    ("Epsilon Growth", [0.5, 0.5]),
]


class FakeEmbeddingClient(EmbeddingClient):
    """Returns the vector of the first key found in the text, else *default*."""

    def __init__(
        self,
        vectors: dict[str, Sequence[float]] | None = None,
        *,
        default: Sequence[float] = (1.0, 0.0),
        error: Exception | None = None,
    ) -> None:
        self.vectors = dict(vectors or {})
        self.default = list(default)
        self.dimension = len(self.default)
        self.error = error
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        for key, vector in self.vectors.items():
            if key in text:
                return list(vector)
        return list(self.default)


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    db_path = tmp_path / "test_fundscope.db"
    test_engine = create_db_engine(f"sqlite:///{db_path}", load_vector_extension=False)
    SQLModel.metadata.create_all(test_engine)
    monkeypatch.setattr("fundscope.infra.db.engine.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def vec_engine(tmp_path):
    test_engine = create_db_engine(f"sqlite:///{tmp_path / 'test_vec.db'}")
    if not supports_native_vectors(test_engine):
        test_engine.dispose()
        pytest.skip("sqlite-vec extension cannot be loaded in this interpreter")
    SQLModel.metadata.create_all(test_engine)

    yield test_engine

    test_engine.dispose()


@pytest.fixture
def make_fund():
    def _make(name: str, vector: Sequence[float] | None = None, *,
              fmt: EmbeddingFormat = EmbeddingFormat.JSON, **fields) -> Fund:
        payload = VectorCodec(fmt).encode(vector) if vector is not None else None
        return Fund(name=name, embedding=payload, **fields)
    return _make


@pytest.fixture
def seed():
    def _seed(engine, *funds: Fund) -> list[int]:
        with Session(engine) as session:
            session.add_all(funds)
            session.commit()
            return [f.id for f in funds]
    return _seed


@pytest.fixture
def scenario_funds(use_test_engine, make_fund, seed) -> list[int]:
    return seed(use_test_engine, *(make_fund(name, vec) for name, vec in SCENARIO))


@pytest.fixture
def fake_embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient()


@pytest.fixture
def failing_embedder() -> FakeEmbeddingClient:
    return FakeEmbeddingClient(error=EmbeddingGenerationError("model offline"))
