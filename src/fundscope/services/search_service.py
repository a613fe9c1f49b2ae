"""Search use-case service."""
from __future__ import annotations

from fundscope.api.schemas.search import (
    AdvancedTextSearchRequest, ClusterList, ClusterRead, ClusterSearchRequest,
    FacetBucketRead, FacetedResponse, FacetSearchRequest, FacetsRead, FundList, FundRead,
    HybridSearchRequest, ScoredResultList, ScoredResultRead, SimilarSearchRequest,
    TextSearchRequest, VectorQuery,
)
from fundscope.domain.records import FundRecord, ScoredResult, SearchFilters
from fundscope.search.engine import SearchEngine


def _fund_read(record: FundRecord) -> FundRead:
    return FundRead.model_validate(record)


def _scored_read(res: ScoredResult) -> ScoredResultRead:
    return ScoredResultRead(
        fund=_fund_read(res.record),
        similarity=res.similarity,
        distance=res.distance,
        text_score=res.text_score,
        semantic_score=res.semantic_score,
        total_score=res.total_score,
    )


class SearchService:
    def __init__(self, engine: SearchEngine) -> None:
        self._engine = engine

    async def _query_vector(self, payload: VectorQuery) -> list[float]:
        if payload.query_vector:
            return payload.query_vector
        return await self._engine.embed_query(payload.query)

    async def search_text(self, payload: TextSearchRequest) -> FundList:
        records = await self._engine.search_by_text(
            payload.query, payload.limit,
            field=payload.field, value=payload.value, sort_field=payload.sort_field,
        )
        return FundList(items=[_fund_read(r) for r in records], total=len(records))

    async def search_text_advanced(self, payload: AdvancedTextSearchRequest) -> FundList:
        records = await self._engine.search_by_text_advanced(
            payload.terms, payload.operator, payload.limit,
            field=payload.field, value=payload.value, sort_field=payload.sort_field,
        )
        return FundList(items=[_fund_read(r) for r in records], total=len(records))

    async def search_similar(self, payload: SimilarSearchRequest) -> ScoredResultList:
        filters = SearchFilters(
            start_date=payload.start_date,
            end_date=payload.end_date,
            min_similarity=payload.min_similarity,
            max_results=payload.max_results,
            field=payload.field,
            value=payload.value,
        )
        results = await self._engine.search_similar(
            await self._query_vector(payload), payload.limit, payload.use_cosine, filters,
        )
        return ScoredResultList(results=[_scored_read(r) for r in results], total=len(results))

    async def hybrid_search(self, payload: HybridSearchRequest) -> ScoredResultList:
        results = await self._engine.hybrid_search(
            payload.query,
            await self._query_vector(payload),
            payload.text_weight,
            payload.semantic_weight,
            payload.limit,
        )
        return ScoredResultList(results=[_scored_read(r) for r in results], total=len(results))

    async def search_with_clustering(self, payload: ClusterSearchRequest) -> ClusterList:
        clusters = await self._engine.search_with_clustering(
            await self._query_vector(payload), payload.limit, payload.similarity_threshold,
        )
        return ClusterList(
            clusters=[
                ClusterRead(cluster=c.index, results=[_scored_read(r) for r in c.results])
                for c in clusters
            ],
            total=len(clusters),
        )

    async def search_with_facets(self, payload: FacetSearchRequest) -> FacetedResponse:
        faceted = await self._engine.search_with_facets(await self._query_vector(payload), payload.limit)
        return FacetedResponse(
            results=[_scored_read(r) for r in faceted.results],
            facets=FacetsRead(
                similarity_ranges=[
                    FacetBucketRead(label=b.label, count=b.count) for b in faceted.facets.similarity_ranges
                ],
                time_periods=[
                    FacetBucketRead(label=b.label, count=b.count) for b in faceted.facets.time_periods
                ],
            ),
            total=len(faceted.results),
        )
