"""Search infrastructure contracts and adapters."""

from fundscope.infra.search.vector_sqlite import SqliteVecStore, supports_native_vectors
from fundscope.infra.search.vector_store import DistanceMetric, NeighborHit, VectorStore

__all__ = [
    "DistanceMetric",
    "NeighborHit",
    "SqliteVecStore",
    "VectorStore",
    "supports_native_vectors",
]
