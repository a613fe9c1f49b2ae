"""Fund DTOs."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class FundCreate(BaseModel):
    external_id: str | None = None
    name: str = Field(min_length=1)
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


class FundUpdate(BaseModel):
    """Partial update; only the fields present in the request are written."""

    external_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    aliases: list[str] | None = None
    manager: str | None = None
    vintage: int | None = None
    strategy: str | None = None
    geography: str | None = None
    strategy_group: str | None = None
    geography_group: str | None = None
    fund_size: float | None = None
    target_size: float | None = None
    status: str | None = None
    industries: list[str] | None = None

    @field_validator("name")
    @classmethod
    def _name_not_null(cls, value: str | None) -> str:
        if value is None:
            raise ValueError("name cannot be null.")
        return value


class FieldValues(BaseModel):
    field: str
    values: list[Any]


class EmbeddingRead(BaseModel):
    fund_id: int
    dimensions: int
    embedding: list[float] | None = None


class EmbeddingBackfill(BaseModel):
    embedded: int
    failed: list[int]


class StatsRead(BaseModel):
    documents: int
    embeddings: int
    orphaned_documents: int
