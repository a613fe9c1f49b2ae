"""Search endpoints."""
from fastapi import APIRouter, Depends

from fundscope.api.deps import get_search_service
from fundscope.api.schemas.search import (
    AdvancedTextSearchRequest, ClusterList, ClusterSearchRequest, FacetedResponse,
    FacetSearchRequest, FundList, HybridSearchRequest, ScoredResultList,
    SimilarSearchRequest, TextSearchRequest,
)
from fundscope.services.search_service import SearchService

router = APIRouter(prefix="/search", tags=["search"])


@router.post("/text", response_model=FundList)
async def search_text(
    payload: TextSearchRequest, service: SearchService = Depends(get_search_service),
) -> FundList:
    return await service.search_text(payload)


@router.post("/text/advanced", response_model=FundList)
async def search_text_advanced(
    payload: AdvancedTextSearchRequest, service: SearchService = Depends(get_search_service),
) -> FundList:
    return await service.search_text_advanced(payload)


@router.post("/similar", response_model=ScoredResultList)
async def search_similar(
    payload: SimilarSearchRequest, service: SearchService = Depends(get_search_service),
) -> ScoredResultList:
    return await service.search_similar(payload)


@router.post("/hybrid", response_model=ScoredResultList)
async def hybrid_search(
    payload: HybridSearchRequest, service: SearchService = Depends(get_search_service),
) -> ScoredResultList:
    return await service.hybrid_search(payload)


@router.post("/clusters", response_model=ClusterList)
async def search_with_clustering(
    payload: ClusterSearchRequest, service: SearchService = Depends(get_search_service),
) -> ClusterList:
    return await service.search_with_clustering(payload)


@router.post("/facets", response_model=FacetedResponse)
async def search_with_facets(
    payload: FacetSearchRequest, service: SearchService = Depends(get_search_service),
) -> FacetedResponse:
    return await service.search_with_facets(payload)
