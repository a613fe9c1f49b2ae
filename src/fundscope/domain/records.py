"""Typed shapes that flow through the search core.

``FundRecord`` is validated once at the storage boundary; everything
downstream works on it and never on raw rows.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator


class FundRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

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

    @field_validator("aliases", "industries", mode="before")
    @classmethod
    def _parse_json_list(cls, value: Any) -> list[str]:
        if value is None or value == "":
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return []
        if not isinstance(value, (list, tuple)):
            return []
        return [str(item) for item in value]


@dataclass(frozen=True, slots=True)
class StoredFund:
    """A fund plus its raw embedding payload exactly as the store holds it."""

    record: FundRecord
    payload: bytes | str | None


class TextOperator(str, Enum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True, slots=True)
class SearchFilters:
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_similarity: float | None = None
    max_results: int | None = None
    field: str | None = None
    value: Any = None

    @property
    def has_date_range(self) -> bool:
        return self.start_date is not None and self.end_date is not None


@dataclass(slots=True)
class ScoredResult:
    record: FundRecord
    similarity: float | None = None
    distance: float | None = None
    text_score: float | None = None
    semantic_score: float | None = None
    total_score: float | None = None

    @property
    def id(self) -> int:
        return self.record.id


@dataclass(slots=True)
class Cluster:
    index: int
    results: list[ScoredResult] = field(default_factory=list)


@dataclass(slots=True)
class FacetBucket:
    label: str
    count: int = 0


@dataclass(slots=True)
class FacetSummary:
    similarity_ranges: list[FacetBucket]
    time_periods: list[FacetBucket]


@dataclass(slots=True)
class FacetedResults:
    results: list[ScoredResult]
    facets: FacetSummary
