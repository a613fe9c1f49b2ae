"""Engine factory: WAL pragmas plus sqlite-vec loading on every connection."""
from __future__ import annotations

import logging
import sqlite3

import sqlite_vec
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from fundscope.config import settings
import fundscope.models  # noqa: F401   # registers the Fund mapper

logger = logging.getLogger(__name__)


def _set_wal_mode(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.close()


def _load_sqlite_vec(dbapi_conn, _):
    try:
        dbapi_conn.enable_load_extension(True)
        sqlite_vec.load(dbapi_conn)
        dbapi_conn.enable_load_extension(False)
    except (AttributeError, sqlite3.OperationalError) as exc:
        # Interpreter built without extension loading, or the shared library
        # is missing for this platform. Vector search falls back in-process.
        logger.debug("sqlite-vec not loaded: %s", exc)


def create_db_engine(url: str, *, load_vector_extension: bool = True) -> Engine:
    """Build an engine usable from worker threads.

    In-memory databases share one connection so every thread sees the same data.
    """
    kwargs: dict = {"echo": False, "connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    new_engine = create_engine(url, **kwargs)
    event.listen(new_engine, "connect", _set_wal_mode)
    if load_vector_extension:
        event.listen(new_engine, "connect", _load_sqlite_vec)
    return new_engine


engine = create_db_engine(
    settings.database_url,
    load_vector_extension=settings.VECTOR_BACKEND != "memory",
)

__all__ = ["create_db_engine", "engine"]
