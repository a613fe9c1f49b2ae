"""Search DTOs: pure Pydantic, zero ORM imports."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fundscope.domain.records import TextOperator


class FundRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_id: str | None = None
    name: str
    aliases: list[str] = []
    manager: str | None = None
    vintage: int | None = None
    strategy: str | None = None
    geography: str | None = None
    strategy_group: str | None = None
    geography_group: str | None = None
    fund_size: float | None = None
    target_size: float | None = None
    status: str | None = None
    industries: list[str] = []
    created_at: datetime


class FundList(BaseModel):
    items: list[FundRead]
    total: int


class ScoredResultRead(BaseModel):
    fund: FundRead
    similarity: float | None = None
    distance: float | None = None
    text_score: float | None = None
    semantic_score: float | None = None
    total_score: float | None = None


class ScoredResultList(BaseModel):
    results: list[ScoredResultRead]
    total: int


class TextSearchRequest(BaseModel):
    query: str
    limit: int = Field(default=10, ge=1)
    field: str | None = None
    value: Any = None
    sort_field: str | None = None


class AdvancedTextSearchRequest(BaseModel):
    terms: list[str]
    operator: TextOperator = TextOperator.OR
    limit: int = Field(default=10, ge=1)
    field: str | None = None
    value: Any = None
    sort_field: str | None = None


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class VectorQuery(BaseModel):
    """Either a precomputed ``query_vector`` or ``query`` text to embed."""

    query: str | None = None
    query_vector: list[float] | None = None

    @model_validator(mode="after")
    def _require_query(self) -> "VectorQuery":
        if not self.query_vector and not self.query:
            raise ValueError("Provide query_vector or query text.")
        return self


class SimilarSearchRequest(VectorQuery):
    limit: int = Field(default=5, ge=1)
    use_cosine: bool = True
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_similarity: float | None = None
    max_results: int | None = Field(default=None, ge=1)
    field: str | None = None
    value: Any = None

    @model_validator(mode="after")
    def _require_closed_range(self) -> "SimilarSearchRequest":
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together.")
        if self.start_date is not None and _utc(self.start_date) > _utc(self.end_date):
            raise ValueError("start_date must not be after end_date.")
        return self


class HybridSearchRequest(VectorQuery):
    query: str
    text_weight: float = 0.3
    semantic_weight: float = 0.7
    limit: int = Field(default=10, ge=1)


class ClusterSearchRequest(VectorQuery):
    limit: int = Field(default=10, ge=1)
    similarity_threshold: float = 0.8


class ClusterRead(BaseModel):
    cluster: int
    results: list[ScoredResultRead]


class ClusterList(BaseModel):
    clusters: list[ClusterRead]
    total: int


class FacetSearchRequest(VectorQuery):
    limit: int = Field(default=20, ge=1)


class FacetBucketRead(BaseModel):
    label: str
    count: int


class FacetsRead(BaseModel):
    similarity_ranges: list[FacetBucketRead]
    time_periods: list[FacetBucketRead]


class FacetedResponse(BaseModel):
    results: list[ScoredResultRead]
    facets: FacetsRead
    total: int
