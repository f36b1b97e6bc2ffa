"""
db/row_source.py

Pooled row source for report queries.

Each call borrows one pooled connection, runs exactly one statement and
returns the connection to the pool before returning rows.  Pool exhaustion
(``pool_timeout``) surfaces as a RowSourceError like any other failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class RowSourceError(RuntimeError):
    """Raised when a query cannot be executed against the report database."""


class RowSource:
    """
    Executes parameterized SELECT statements and returns rows as dicts.
    """

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            from db.session import get_engine

            try:
                self._engine = get_engine()
            except RuntimeError as exc:
                raise RowSourceError(str(exc)) from exc
        return self._engine

    def fetch(self, query: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """
        Run *query* with named bind *params* and return every row, in order.

        Raises
        ------
        RowSourceError: On connection, pool or statement failure.
        """
        try:
            with self.engine.connect() as connection:
                result = connection.execute(text(query), dict(params or {}))
                rows = [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.warning("Row source query failed: %s", exc.__class__.__name__)
            raise RowSourceError(f"Query failed: {exc}") from exc
        return rows

    def ping(self) -> bool:
        """Return True when a trivial statement succeeds."""
        try:
            with self.engine.connect() as connection:
                probe = "SELECT 1 FROM dual" if self.engine.dialect.name == "oracle" else "SELECT 1"
                connection.execute(text(probe))
        except (SQLAlchemyError, RowSourceError):
            logger.warning("Report database is unreachable", exc_info=True)
            return False
        return True
