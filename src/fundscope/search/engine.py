"""Search facade: one object exposing every public search operation."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from fundscope.config import settings
from fundscope.domain.exceptions import EmbeddingGenerationError
from fundscope.domain.records import (
    Cluster, FacetedResults, FundRecord, ScoredResult, SearchFilters, TextOperator,
)
from fundscope.infra.db.record_store import RecordStore
from fundscope.search.clustering import ClusterBuilder
from fundscope.search.codec import EmbeddingFormat, VectorCodec
from fundscope.search.embeddings import EmbeddingClient
from fundscope.search.facets import FacetSummarizer
from fundscope.search.hybrid_search import HybridRanker
from fundscope.search.scanner import VectorScanner, select_scanner
from fundscope.search.text_match import TextMatcher

logger = logging.getLogger(__name__)


class SearchEngine:
    def __init__(
        self,
        store: RecordStore,
        scanner: VectorScanner,
        *,
        codec: VectorCodec | None = None,
        embedder: EmbeddingClient | None = None,
    ) -> None:
        self.store = store
        self.scanner = scanner
        self.codec = codec or VectorCodec()
        self.embedder = embedder
        self._text = TextMatcher(store)
        self._hybrid = HybridRanker(self._text, scanner)
        self._clusters = ClusterBuilder(store, scanner)
        self._facets = FacetSummarizer(scanner)

    @classmethod
    def from_database(
        cls,
        db_engine=None,
        *,
        embedder: EmbeddingClient | None = None,
        backend: str | None = None,
    ) -> "SearchEngine":
        """Probe the database once for native vector support and wire the strategy."""
        from fundscope.infra.db import engine as engine_module
        from fundscope.infra.db.sql_record_store import SqlRecordStore
        from fundscope.infra.search import SqliteVecStore, supports_native_vectors

        db_engine = db_engine or engine_module.engine
        backend = backend or settings.VECTOR_BACKEND

        vector_store = None
        if backend != "memory":
            if supports_native_vectors(db_engine):
                vector_store = SqliteVecStore(db_engine)
            elif backend == "sqlite-vec":
                logger.warning("VECTOR_BACKEND=sqlite-vec but the extension is not loaded")

        store = SqlRecordStore(db_engine)
        fmt = EmbeddingFormat.BINARY if vector_store is not None else EmbeddingFormat.JSON
        logger.info("Embeddings stored as %s", fmt.value)
        return cls(
            store,
            select_scanner(store, vector_store),
            codec=VectorCodec(fmt),
            embedder=embedder,
        )

    async def embed_query(self, text: str) -> list[float]:
        if self.embedder is None:
            raise EmbeddingGenerationError("No embedding client is configured.")
        return await self.embedder.embed(text)

    async def search_by_text(self, term: str, limit: int = 10, **kwargs: Any) -> list[FundRecord]:
        return await self._text.search_by_text(term, limit, **kwargs)

    async def search_by_text_advanced(
        self,
        terms: Sequence[str],
        operator: TextOperator | str = TextOperator.OR,
        limit: int = 10,
        **kwargs: Any,
    ) -> list[FundRecord]:
        return await self._text.search_by_text_advanced(terms, operator, limit, **kwargs)

    async def search_similar(
        self,
        query_vector: Sequence[float],
        limit: int = 5,
        use_cosine: bool = True,
        filters: SearchFilters | None = None,
    ) -> list[ScoredResult]:
        return await self.scanner.search_similar(query_vector, limit, use_cosine, filters)

    async def hybrid_search(
        self,
        query: str,
        query_vector: Sequence[float],
        text_weight: float = 0.3,
        semantic_weight: float = 0.7,
        limit: int = 10,
    ) -> list[ScoredResult]:
        return await self._hybrid.hybrid_search(query, query_vector, text_weight, semantic_weight, limit)

    async def search_with_clustering(
        self,
        query_vector: Sequence[float],
        limit: int = 10,
        similarity_threshold: float = 0.8,
    ) -> list[Cluster]:
        return await self._clusters.search_with_clustering(query_vector, limit, similarity_threshold)

    async def search_with_facets(self, query_vector: Sequence[float], limit: int = 20) -> FacetedResults:
        return await self._facets.search_with_facets(query_vector, limit)
