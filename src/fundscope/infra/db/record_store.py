"""RecordStore contract: the read/write primitives the search core consumes."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from fundscope.domain.records import FundRecord, SearchFilters, StoredFund, TextOperator


class RecordStore(ABC):
    """Async access to fund records and their embedding payloads."""

    @abstractmethod
    async def fetch_candidates(self, filters: SearchFilters | None = None) -> list[StoredFund]:
        """Return every fund with a non-null embedding payload, optionally prefiltered."""

    @abstractmethod
    async def fetch_by_ids(self, record_ids: Sequence[int]) -> list[StoredFund]:
        """Return the funds with the given ids (any order, missing ids omitted)."""

    @abstractmethod
    async def get(self, record_id: int) -> StoredFund | None:
        """Return one fund or ``None``."""

    @abstractmethod
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
        """Substring search over the configured text fields."""

    @abstractmethod
    async def write_embedding(self, record_id: int, encoded: bytes | str) -> bool:
        """Store an encoded embedding; return False when the record does not exist."""

    @abstractmethod
    async def insert(self, fields: Mapping[str, Any]) -> FundRecord:
        """Insert one fund row and return it."""

    @abstractmethod
    async def update(self, record_id: int, fields: Mapping[str, Any]) -> FundRecord | None:
        """Overwrite the given columns; ``None`` when the record does not exist."""

    @abstractmethod
    async def delete(self, record_id: int) -> bool:
        """Remove one fund; return False when it does not exist."""

    @abstractmethod
    async def list_records(
        self,
        *,
        field: str | None = None,
        value: Any = None,
        embedded_only: bool = False,
        limit: int = 50,
    ) -> list[FundRecord]:
        """Newest funds first, optionally narrowed by an exact field value."""

    @abstractmethod
    async def distinct_values(self, field: str) -> list[Any]:
        """Sorted distinct non-null values of one filterable field."""

    @abstractmethod
    async def list_industries(self) -> list[str]:
        """Sorted distinct industry tags across all funds."""

    @abstractmethod
    async def list_missing_embeddings(self, limit: int) -> list[FundRecord]:
        """Funds that have no embedding payload yet."""

    @abstractmethod
    async def stats(self) -> dict[str, int]:
        """Counts of documents, embedded documents and orphaned documents."""
