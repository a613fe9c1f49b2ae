"""Literal text matching over fund fields. Rows either match or they don't."""
from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from fundscope.domain.records import FundRecord, TextOperator
from fundscope.infra.db.record_store import RecordStore


def _as_operator(operator: TextOperator | str) -> TextOperator:
    if isinstance(operator, TextOperator):
        return operator
    return TextOperator(operator.upper())


def _check_limit(limit: int) -> None:
    if limit <= 0:
        raise ValueError("limit must be >= 1.")


class TextMatcher:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    async def search_by_text(
        self,
        term: str,
        limit: int = 10,
        *,
        field: str | None = None,
        value: Any = None,
        sort_field: str | None = None,
    ) -> list[FundRecord]:
        _check_limit(limit)
        return await self._store.search_text(
            [term], limit=limit, field=field, value=value, sort_field=sort_field,
        )

    async def search_by_text_advanced(
        self,
        terms: Sequence[str],
        operator: TextOperator | str = TextOperator.OR,
        limit: int = 10,
        *,
        field: str | None = None,
        value: Any = None,
        sort_field: str | None = None,
    ) -> list[FundRecord]:
        _check_limit(limit)
        if not terms:
            return []
        return await self._store.search_text(
            list(terms),
            operator=_as_operator(operator),
            limit=limit,
            field=field,
            value=value,
            sort_field=sort_field,
        )
