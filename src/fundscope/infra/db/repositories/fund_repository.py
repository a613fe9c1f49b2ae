"""Repository for fund rows and their embedding payloads."""
from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, func, or_
from sqlmodel import Session, col, desc, select

from fundscope.domain.records import SearchFilters, TextOperator
from fundscope.models.fund import FILTERABLE_FIELDS, NUMERIC_FIELDS, TEXT_FIELDS, Fund


def _as_utc(value: datetime) -> datetime:
    """Naive bounds are read as UTC; aware ones are converted to it."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _column(name: str, allowed: Sequence[str]):
    if name not in allowed:
        raise ValueError(f"Unknown field {name!r}; expected one of {sorted(allowed)}")
    return getattr(Fund, name)


def filter_clauses(filters: SearchFilters | None) -> list:
    """SQL predicates for the date-range and exact-match parts of *filters*."""
    clauses: list = []
    if filters is None:
        return clauses
    if filters.has_date_range:
        clauses.append(
            col(Fund.created_at).between(
                _as_utc(filters.start_date), _as_utc(filters.end_date)
            )
        )
    if filters.field is not None:
        clauses.append(_column(filters.field, FILTERABLE_FIELDS) == filters.value)
    return clauses


class FundRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    # --- Reads ---

    def get(self, fund_id: int) -> Fund | None:
        return self._s.get(Fund, fund_id)

    def get_many(self, fund_ids: Sequence[int]) -> list[Fund]:
        if not fund_ids:
            return []
        return list(self._s.exec(
            select(Fund).where(col(Fund.id).in_(list(fund_ids)))
        ).all())

    def list_candidates(self, filters: SearchFilters | None = None) -> list[Fund]:
        """All funds carrying an embedding payload, narrowed by *filters*."""
        stmt = select(Fund).where(
            col(Fund.embedding).is_not(None), *filter_clauses(filters)
        )
        return list(self._s.exec(stmt.order_by(col(Fund.id))).all())

    def list_funds(
        self,
        *,
        field: str | None = None,
        value: Any = None,
        embedded_only: bool = False,
        limit: int = 50,
    ) -> list[Fund]:
        """Newest first, optionally narrowed to one field value or to embedded funds."""
        stmt = select(Fund)
        if field is not None:
            stmt = stmt.where(_column(field, FILTERABLE_FIELDS) == value)
        if embedded_only:
            stmt = stmt.where(col(Fund.embedding).is_not(None))
        stmt = stmt.order_by(desc(Fund.created_at), col(Fund.id)).limit(limit)
        return list(self._s.exec(stmt).all())

    def distinct_values(self, field: str) -> list[Any]:
        column = _column(field, FILTERABLE_FIELDS)
        stmt = select(column).where(column.is_not(None)).distinct().order_by(column)
        return list(self._s.exec(stmt).all())

    def all_industries(self) -> list[str]:
        """Every industry tag in use, deduplicated and sorted."""
        tags: set[str] = set()
        for raw in self._s.exec(select(Fund.industries).where(col(Fund.industries).is_not(None))):
            try:
                items = json.loads(raw)
            except ValueError:
                continue
            if isinstance(items, list):
                tags.update(str(item).strip() for item in items if str(item).strip())
        return sorted(tags)

    def list_missing_embeddings(self, limit: int) -> list[Fund]:
        return list(self._s.exec(
            select(Fund)
            .where(col(Fund.embedding).is_(None))
            .order_by(col(Fund.id))
            .limit(limit)
        ).all())

    def search_text(
        self,
        terms: Sequence[str],
        *,
        operator: TextOperator = TextOperator.OR,
        fields: Sequence[str] = TEXT_FIELDS,
        limit: int = 10,
        field: str | None = None,
        value: Any = None,
        sort_field: str | None = None,
    ) -> list[Fund]:
        """Case-insensitive substring match of each term over *fields*.

        Each term becomes an OR across fields; terms are joined by *operator*.
        Newest first unless *sort_field* names a numeric column (descending).
        """
        if not terms:
            return []
        columns = [_column(name, TEXT_FIELDS) for name in fields]
        term_clauses = [
            or_(*(func.lower(c).contains(term.lower(), autoescape=True) for c in columns))
            for term in terms
        ]
        joined = and_(*term_clauses) if operator == TextOperator.AND else or_(*term_clauses)

        stmt = select(Fund).where(joined)
        if field is not None:
            stmt = stmt.where(_column(field, FILTERABLE_FIELDS) == value)
        if sort_field is not None:
            stmt = stmt.order_by(desc(_column(sort_field, NUMERIC_FIELDS)), col(Fund.id))
        else:
            stmt = stmt.order_by(desc(Fund.created_at), col(Fund.id))
        return list(self._s.exec(stmt.limit(limit)).all())

    def count_all(self) -> int:
        return self._s.exec(select(func.count()).select_from(Fund)).one()

    def count_embedded(self) -> int:
        return self._s.exec(
            select(func.count()).select_from(Fund).where(col(Fund.embedding).is_not(None))
        ).one()

    # --- Writes ---

    def create(self, **fields: Any) -> Fund:
        fund = Fund(**fields)
        self._s.add(fund)
        self._s.flush()
        return fund

    def set_embedding(self, fund_id: int, payload: bytes | str | None) -> bool:
        fund = self._s.get(Fund, fund_id)
        if fund is None:
            return False
        fund.embedding = payload
        self._s.add(fund)
        self._s.flush()
        return True

    def update(self, fund_id: int, **fields: Any) -> Fund | None:
        fund = self._s.get(Fund, fund_id)
        if fund is None:
            return None
        for name, value in fields.items():
            if name not in Fund.model_fields or name == "id":
                raise ValueError(f"Unknown field {name!r}")
            setattr(fund, name, value)
        self._s.add(fund)
        self._s.flush()
        return fund

    def delete(self, fund_id: int) -> bool:
        fund = self._s.get(Fund, fund_id)
        if fund is None:
            return False
        self._s.delete(fund)
        self._s.flush()
        return True
