"""Fund ingestion and embedding endpoints."""
from fastapi import APIRouter, Depends, Query, Response

from fundscope.api.deps import get_embedding_service
from fundscope.api.schemas.funds import (
    EmbeddingBackfill, EmbeddingRead, FieldValues, FundCreate, FundUpdate, StatsRead,
)
from fundscope.api.schemas.search import FundList, FundRead
from fundscope.services.embedding_service import EmbeddingService

router = APIRouter(tags=["funds"])


@router.post("/funds", response_model=FundRead, status_code=201)
async def create_fund(
    payload: FundCreate, service: EmbeddingService = Depends(get_embedding_service),
) -> FundRead:
    return await service.insert_fund(payload)


@router.get("/funds", response_model=FundList)
async def list_funds(
    field: str | None = None,
    value: str | None = None,
    embedded: bool = False,
    limit: int = Query(default=50, ge=1),
    service: EmbeddingService = Depends(get_embedding_service),
) -> FundList:
    return await service.list_funds(field, value, embedded, limit)


@router.get("/funds/values/{field}", response_model=FieldValues)
async def field_values(
    field: str, service: EmbeddingService = Depends(get_embedding_service),
) -> FieldValues:
    return await service.field_values(field)


@router.get("/funds/{fund_id}", response_model=FundRead)
async def get_fund(
    fund_id: int, service: EmbeddingService = Depends(get_embedding_service),
) -> FundRead:
    return await service.get_fund(fund_id)


@router.patch("/funds/{fund_id}", response_model=FundRead)
async def update_fund(
    fund_id: int, payload: FundUpdate, service: EmbeddingService = Depends(get_embedding_service),
) -> FundRead:
    return await service.update_fund(fund_id, payload)


@router.delete("/funds/{fund_id}", status_code=204)
async def delete_fund(
    fund_id: int, service: EmbeddingService = Depends(get_embedding_service),
) -> Response:
    await service.delete_fund(fund_id)
    return Response(status_code=204)


@router.get("/funds/{fund_id}/embedding", response_model=EmbeddingRead)
async def get_embedding(
    fund_id: int, service: EmbeddingService = Depends(get_embedding_service),
) -> EmbeddingRead:
    return await service.get_embedding(fund_id)


@router.post("/funds/{fund_id}/embedding", response_model=EmbeddingRead)
async def refresh_embedding(
    fund_id: int, service: EmbeddingService = Depends(get_embedding_service),
) -> EmbeddingRead:
    return await service.refresh_embedding(fund_id)


@router.post("/embeddings/backfill", response_model=EmbeddingBackfill)
async def embed_missing(
    limit: int = Query(default=100, ge=1),
    service: EmbeddingService = Depends(get_embedding_service),
) -> EmbeddingBackfill:
    return await service.embed_missing(limit)


@router.get("/stats", response_model=StatsRead)
async def stats(service: EmbeddingService = Depends(get_embedding_service)) -> StatsRead:
    return await service.stats()
