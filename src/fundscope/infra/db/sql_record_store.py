"""SQLModel-backed RecordStore; blocking work runs in worker threads."""
from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from typing import Any, TypeVar

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from fundscope.config import settings
from fundscope.domain.exceptions import BackendError
from fundscope.domain.records import FundRecord, SearchFilters, StoredFund, TextOperator
from fundscope.infra.db.record_store import RecordStore
from fundscope.infra.db.repositories.fund_repository import FundRepository
from fundscope.infra.db.uow import UnitOfWork
from fundscope.models.fund import Fund

T = TypeVar("T")


def to_stored(fund: Fund) -> StoredFund:
    return StoredFund(record=FundRecord.model_validate(fund), payload=fund.embedding)


class SqlRecordStore(RecordStore):
    def __init__(
        self,
        engine: Engine | None = None,
        *,
        text_fields: Sequence[str] | None = None,
    ) -> None:
        self._engine = engine
        self._text_fields = tuple(text_fields or settings.TEXT_SEARCH_FIELDS)

    async def _run(self, fn: Callable[[FundRepository], T]) -> T:
        def work() -> T:
            with UnitOfWork(self._engine) as uow:
                return fn(FundRepository(uow.session))

        try:
            return await asyncio.to_thread(work)
        except SQLAlchemyError as exc:
            raise BackendError(f"Record store request failed: {exc}") from exc

    async def fetch_candidates(self, filters: SearchFilters | None = None) -> list[StoredFund]:
        return await self._run(
            lambda repo: [to_stored(f) for f in repo.list_candidates(filters)]
        )

    async def fetch_by_ids(self, record_ids: Sequence[int]) -> list[StoredFund]:
        ids = list(record_ids)
        return await self._run(lambda repo: [to_stored(f) for f in repo.get_many(ids)])

    async def get(self, record_id: int) -> StoredFund | None:
        def work(repo: FundRepository) -> StoredFund | None:
            fund = repo.get(record_id)
            return to_stored(fund) if fund is not None else None

        return await self._run(work)

    async def search_text(
        self,
        terms: Sequence[str],
        *,
        operator: TextOperator = TextOperator.OR,
        limit: int = 10,
        field: str | None = None,
        value: Any = None,
        sort_field: str | None = None,
    ) -> list[FundRecord]:
        terms = list(terms)
        return await self._run(
            lambda repo: [
                FundRecord.model_validate(f)
                for f in repo.search_text(
                    terms,
                    operator=operator,
                    fields=self._text_fields,
                    limit=limit,
                    field=field,
                    value=value,
                    sort_field=sort_field,
                )
            ]
        )

    async def write_embedding(self, record_id: int, encoded: bytes | str) -> bool:
        return await self._run(lambda repo: repo.set_embedding(record_id, encoded))

    async def insert(self, fields: Mapping[str, Any]) -> FundRecord:
        data = dict(fields)
        return await self._run(lambda repo: FundRecord.model_validate(repo.create(**data)))

    async def update(self, record_id: int, fields: Mapping[str, Any]) -> FundRecord | None:
        data = dict(fields)

        def work(repo: FundRepository) -> FundRecord | None:
            fund = repo.update(record_id, **data)
            return FundRecord.model_validate(fund) if fund is not None else None

        return await self._run(work)

    async def delete(self, record_id: int) -> bool:
        return await self._run(lambda repo: repo.delete(record_id))

    async def list_records(
        self,
        *,
        field: str | None = None,
        value: Any = None,
        embedded_only: bool = False,
        limit: int = 50,
    ) -> list[FundRecord]:
        return await self._run(
            lambda repo: [
                FundRecord.model_validate(f)
                for f in repo.list_funds(
                    field=field, value=value, embedded_only=embedded_only, limit=limit,
                )
            ]
        )

    async def distinct_values(self, field: str) -> list[Any]:
        return await self._run(lambda repo: repo.distinct_values(field))

    async def list_industries(self) -> list[str]:
        return await self._run(lambda repo: repo.all_industries())

    async def list_missing_embeddings(self, limit: int) -> list[FundRecord]:
        return await self._run(
            lambda repo: [FundRecord.model_validate(f) for f in repo.list_missing_embeddings(limit)]
        )

    async def stats(self) -> dict[str, int]:
        def work(repo: FundRepository) -> dict[str, int]:
            documents = repo.count_all()
            embeddings = repo.count_embedded()
            return {
                "documents": documents,
                "embeddings": embeddings,
                "orphaned_documents": documents - embeddings,
            }

        return await self._run(work)
