"""sqlite-vec backed VectorStore implementation."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

from sqlalchemy import LargeBinary, bindparam, func, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, col, select

from fundscope.domain.exceptions import BackendError
from fundscope.domain.records import FundRecord, SearchFilters
from fundscope.infra.db.repositories.fund_repository import filter_clauses
from fundscope.infra.search.vector_store import DistanceMetric, NeighborHit, VectorStore
from fundscope.models.fund import Fund
from fundscope.search.codec import serialize_f32

logger = logging.getLogger(__name__)


def supports_native_vectors(engine: Engine) -> bool:
    """True when connections from *engine* have the sqlite-vec functions loaded."""
    try:
        with engine.connect() as conn:
            version = conn.execute(text("SELECT vec_version()")).scalar()
    except SQLAlchemyError:
        return False
    logger.info("sqlite-vec %s detected; using native vector distance", version)
    return True


class SqliteVecStore(VectorStore):
    """VectorStore over the ``fund.embedding`` column using sqlite-vec scalar functions.

    ``vec_distance_cosine`` / ``vec_distance_l2`` accept both packed float32
    blobs and JSON arrays, so rows written in either codec format are scored.
    The query itself is always sent as a float32 blob.
    """

    name = "sqlite-vec"

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        top_k: int,
        *,
        metric: DistanceMetric = DistanceMetric.COSINE,
        filters: SearchFilters | None = None,
    ) -> list[NeighborHit]:
        if top_k <= 0:
            raise ValueError("top_k must be >= 1.")
        try:
            return await asyncio.to_thread(self._query, list(query_vector), top_k, metric, filters)
        except SQLAlchemyError as exc:
            raise BackendError(f"sqlite-vec query failed: {exc}") from exc

    def _query(
        self,
        query_vector: list[float],
        top_k: int,
        metric: DistanceMetric,
        filters: SearchFilters | None,
    ) -> list[NeighborHit]:
        distance_fn = func.vec_distance_cosine if metric == DistanceMetric.COSINE else func.vec_distance_l2
        query_blob = bindparam("query_vector", serialize_f32(query_vector), type_=LargeBinary)
        distance = distance_fn(col(Fund.embedding), query_blob).label("distance")

        stmt = (
            select(Fund, distance)
            .where(col(Fund.embedding).is_not(None), *filter_clauses(filters))
            .order_by(distance, col(Fund.id))
            .limit(top_k)
        )
        with Session(self._engine) as session:
            rows = session.exec(stmt).all()
            return [
                NeighborHit(
                    distance=float(dist) if dist is not None else float("nan"),
                    record=FundRecord.model_validate(fund),
                )
                for fund, dist in rows
            ]
