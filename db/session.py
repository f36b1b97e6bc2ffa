"""
db/session.py

SQLAlchemy engine for the report source database.

The engine owns the connection pool.  Callers borrow one connection per
statement (see :mod:`db.row_source`) and never hold it across pipeline steps.
"""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from db.config import resolve_database_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_db_engine(database_url: str | None = None) -> Engine:
    url = database_url or resolve_database_url()
    echo = _get_bool_env("SQL_ECHO", default=False)

    if url.startswith("sqlite"):
        # SQLite has no server-side pool; in-memory databases must share one connection.
        options: dict = {"echo": echo, "connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.rstrip("/").endswith("sqlite:"):
            options["poolclass"] = StaticPool
        return create_engine(url, **options)

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=_get_int_env("DB_POOL_RECYCLE", 1800),
        pool_size=_get_int_env("DB_POOL_SIZE", 5),
        max_overflow=_get_int_env("DB_MAX_OVERFLOW", 10),
        pool_timeout=_get_int_env("DB_POOL_TIMEOUT", 30),
    )


_engine: Engine | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def dispose_engine() -> None:
    """Close every pooled connection and forget the shared engine."""
    global _engine
    if _engine is not None:
        _engine.dispose()
        _engine = None
