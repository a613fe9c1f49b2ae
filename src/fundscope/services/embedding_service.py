"""Fund ingestion and embedding upkeep."""
from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from fundscope.api.schemas.funds import (
    EmbeddingBackfill, EmbeddingRead, FieldValues, FundCreate, FundUpdate, StatsRead,
)
from fundscope.api.schemas.search import FundList, FundRead
from fundscope.domain.exceptions import EmbeddingGenerationError, NotFoundError
from fundscope.domain.records import FundRecord
from fundscope.logging import logger
from fundscope.search.engine import SearchEngine


# Attributes that feed the embedding document; changing any of them re-embeds.
EMBEDDED_FIELDS = (
    "name", "aliases", "status", "vintage", "strategy", "geography",
    "industries", "fund_size", "target_size",
)


def _json_list(values: list[str] | None) -> str | None:
    return json.dumps(values) if values is not None else None


def build_fund_document(fund: Mapping[str, Any]) -> str:
    """Text that represents one fund to the embedding model.

    A title line (``name (vintage)``) followed by one ``Label: value`` line
    per populated attribute.
    """
    name = fund.get("name") or "Fund"
    vintage = fund.get("vintage")
    title = f"{name} ({vintage})" if vintage is not None else name

    aliases = fund.get("aliases") or []
    industries = fund.get("industries") or []
    parts = [f"Name: {name}"]
    if aliases:
        parts.append(f"Aliases: {', '.join(aliases)}")
    if fund.get("status"):
        parts.append(f"Status: {fund['status']}")
    if vintage is not None:
        parts.append(f"Vintage: {vintage}")
    if fund.get("strategy"):
        parts.append(f"Strategy: {fund['strategy']}")
    if fund.get("geography"):
        parts.append(f"Geography: {fund['geography']}")
    if industries:
        parts.append(f"Industries: {', '.join(industries)}")
    if fund.get("fund_size") is not None:
        parts.append(f"Fund Size: {fund['fund_size']}")
    if fund.get("target_size") is not None:
        parts.append(f"Target Size: {fund['target_size']}")
    return f"{title}\n\n" + "\n".join(parts)


class EmbeddingService:
    def __init__(self, engine: SearchEngine) -> None:
        self._engine = engine

    async def _embed_fund(self, fund: Mapping[str, Any]) -> bytes | str:
        vector = await self._engine.embed_query(build_fund_document(fund))
        return self._engine.codec.encode(vector)

    async def insert_fund(self, payload: FundCreate) -> FundRead:
        """Embed first, then insert; a failed embedding means no row is written."""
        fields = payload.model_dump()
        encoded = await self._embed_fund(fields)
        row = {
            **fields,
            "aliases": _json_list(fields["aliases"]),
            "industries": _json_list(fields["industries"]),
            "embedding": encoded,
        }
        record = await self._engine.store.insert(row)
        logger.info(f"Inserted fund {record.id} with {self._engine.codec.format.value} embedding.")
        return FundRead.model_validate(record)

    async def get_fund(self, fund_id: int) -> FundRead:
        stored = await self._engine.store.get(fund_id)
        if stored is None:
            raise NotFoundError(f"Fund {fund_id} not found")
        return FundRead.model_validate(stored.record)

    async def update_fund(self, fund_id: int, payload: FundUpdate) -> FundRead:
        """Write the changed fields; re-embed first when an embedded field changed.

        An update also resets ``created_at`` so the fund counts as recent again.
        """
        changes = payload.model_dump(exclude_unset=True)
        if not changes:
            raise ValueError("No fields to update.")
        stored = await self._engine.store.get(fund_id)
        if stored is None:
            raise NotFoundError(f"Fund {fund_id} not found")

        current = stored.record.model_dump()
        row: dict[str, Any] = dict(changes)
        for key in ("aliases", "industries"):
            if key in row:
                row[key] = _json_list(row[key])
        if any(key in EMBEDDED_FIELDS and value != current[key] for key, value in changes.items()):
            row["embedding"] = await self._embed_fund({**current, **changes})
        row["created_at"] = datetime.now(timezone.utc)

        record = await self._engine.store.update(fund_id, row)
        if record is None:
            raise NotFoundError(f"Fund {fund_id} not found")
        if "embedding" in row:
            logger.info(f"Updated fund {fund_id} and refreshed its embedding.")
        else:
            logger.info(f"Updated fund {fund_id}; embedding unchanged.")
        return FundRead.model_validate(record)

    async def delete_fund(self, fund_id: int) -> None:
        if not await self._engine.store.delete(fund_id):
            raise NotFoundError(f"Fund {fund_id} not found")
        logger.info(f"Deleted fund {fund_id}.")

    async def list_funds(
        self,
        field: str | None = None,
        value: Any = None,
        embedded_only: bool = False,
        limit: int = 50,
    ) -> FundList:
        records = await self._engine.store.list_records(
            field=field, value=value, embedded_only=embedded_only, limit=limit,
        )
        return FundList(items=[FundRead.model_validate(r) for r in records], total=len(records))

    async def field_values(self, field: str) -> FieldValues:
        """Distinct values of one field; ``industries`` lists the individual tags."""
        if field == "industries":
            values = await self._engine.store.list_industries()
        else:
            values = await self._engine.store.distinct_values(field)
        return FieldValues(field=field, values=values)

    async def refresh_embedding(self, fund_id: int) -> EmbeddingRead:
        stored = await self._engine.store.get(fund_id)
        if stored is None:
            raise NotFoundError(f"Fund {fund_id} not found")
        encoded = await self._embed_fund(stored.record.model_dump())
        await self._engine.store.write_embedding(fund_id, encoded)
        vector = self._engine.codec.decode(encoded)
        logger.info(f"Embedding updated for fund {fund_id}.")
        return EmbeddingRead(fund_id=fund_id, dimensions=len(vector), embedding=vector)

    async def get_embedding(self, fund_id: int) -> EmbeddingRead:
        stored = await self._engine.store.get(fund_id)
        if stored is None:
            raise NotFoundError(f"Fund {fund_id} not found")
        vector = self._engine.codec.decode(stored.payload)
        return EmbeddingRead(fund_id=fund_id, dimensions=len(vector or []), embedding=vector)

    async def embed_missing(self, limit: int = 100) -> EmbeddingBackfill:
        """Backfill funds that have no embedding; per-fund failures are reported, not raised."""
        pending: list[FundRecord] = await self._engine.store.list_missing_embeddings(limit)
        embedded = 0
        failed: list[int] = []
        for record in pending:
            try:
                encoded = await self._embed_fund(record.model_dump())
            except EmbeddingGenerationError as exc:
                logger.error(f"Embedding failed for fund {record.id}: {exc.message}")
                failed.append(record.id)
                continue
            await self._engine.store.write_embedding(record.id, encoded)
            embedded += 1
        logger.info(f"Backfilled {embedded} embedding(s), {len(failed)} failure(s).")
        return EmbeddingBackfill(embedded=embedded, failed=failed)

    async def stats(self) -> StatsRead:
        return StatsRead(**await self._engine.store.stats())
