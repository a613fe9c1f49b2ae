"""Fund table."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import Column
from sqlalchemy.types import UserDefinedType
from sqlmodel import Field, SQLModel


class EmbeddingPayload(UserDefinedType):
    """Untyped BLOB column: holds packed float32 bytes or a JSON array string.

    No bind/result processing, so SQLite keeps whichever type was written.
    """

    cache_ok = True

    def get_col_spec(self, **kw) -> str:
        return "BLOB"


# Columns the text matcher may search and the filters may compare against.
TEXT_FIELDS = ("name", "strategy", "geography", "status", "manager",
               "strategy_group", "geography_group")
FILTERABLE_FIELDS = TEXT_FIELDS + ("external_id", "vintage")
NUMERIC_FIELDS = ("vintage", "fund_size", "target_size")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Fund(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    external_id: Optional[str] = Field(default=None, index=True)
    name: str = Field(index=True)
    aliases: Optional[str] = None  # JSON list
    manager: Optional[str] = None
    vintage: Optional[int] = None
    strategy: Optional[str] = None
    geography: Optional[str] = None
    strategy_group: Optional[str] = None
    geography_group: Optional[str] = None
    fund_size: Optional[float] = None
    target_size: Optional[float] = None
    status: Optional[str] = None
    industries: Optional[str] = None  # JSON list
    created_at: datetime = Field(default_factory=_utcnow, index=True)
    embedding: Optional[Union[bytes, str]] = Field(
        default=None, sa_column=Column("embedding", EmbeddingPayload(), nullable=True)
    )
