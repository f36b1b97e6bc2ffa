"""
reports/filters.py

Report filter set and parameterized predicate construction.

Recognized filters
------------------
fromDate : inclusive lower bound on the report's date column (YYYY-MM-DD)
toDate   : inclusive upper bound on the report's date column (YYYY-MM-DD)
type     : exact match on the report's type column

Any other key is a passthrough: it is kept on the FilterSet (and so reaches
the template context) but never forwarded to the row source.

Predicate clauses are joined with AND in the fixed order fromDate, toDate,
type.  Bind parameters are named ``p1``, ``p2``, ... by position so that the
same predicate works for drivers that bind positionally.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

FROM_DATE_KEY = "fromDate"
TO_DATE_KEY = "toDate"
TYPE_KEY = "type"

RECOGNIZED_FILTER_KEYS: tuple[str, ...] = (FROM_DATE_KEY, TO_DATE_KEY, TYPE_KEY)

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_filter_date(value: Any) -> date | None:
    """
    Parse a filter date.

    Accepts ``date``/``datetime`` instances and strictly formatted
    ``YYYY-MM-DD`` strings.  Returns None for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not _ISO_DATE_RE.match(candidate):
        return None
    try:
        return date.fromisoformat(candidate)
    except ValueError:
        return None


@dataclass(frozen=True)
class FilterSet:
    """
    User-supplied report constraints.

    Attributes
    ----------
    from_date:   Raw ``fromDate`` value, if supplied.
    to_date:     Raw ``toDate`` value, if supplied.
    type:        Raw ``type`` value, if supplied.
    passthrough: Every other supplied key, untouched.
    """

    from_date: str | None = None
    to_date: str | None = None
    type: str | None = None
    passthrough: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "FilterSet":
        """Build a FilterSet from query parameters or a JSON object; blank values count as absent."""
        if not raw:
            return cls()

        def _clean(value: Any) -> Any:
            if value is None:
                return None
            if isinstance(value, str):
                stripped = value.strip()
                return stripped or None
            return value

        passthrough = {
            key: value
            for key, value in raw.items()
            if key not in RECOGNIZED_FILTER_KEYS and _clean(value) is not None
        }
        return cls(
            from_date=_clean(raw.get(FROM_DATE_KEY)),
            to_date=_clean(raw.get(TO_DATE_KEY)),
            type=_clean(raw.get(TYPE_KEY)),
            passthrough=passthrough,
        )

    def to_dict(self) -> dict[str, Any]:
        """Recognized filters that are set, followed by passthroughs."""
        payload: dict[str, Any] = {}
        if self.from_date is not None:
            payload[FROM_DATE_KEY] = self.from_date
        if self.to_date is not None:
            payload[TO_DATE_KEY] = self.to_date
        if self.type is not None:
            payload[TYPE_KEY] = self.type
        payload.update(self.passthrough)
        return payload

    def validation_errors(self) -> list[str]:
        """Return one message per invalid date filter or inverted date range."""
        errors: list[str] = []
        start = parse_filter_date(self.from_date) if self.from_date is not None else None
        end = parse_filter_date(self.to_date) if self.to_date is not None else None

        if self.from_date is not None and start is None:
            errors.append("Invalid fromDate format. Use YYYY-MM-DD")
        if self.to_date is not None and end is None:
            errors.append("Invalid toDate format. Use YYYY-MM-DD")
        if start is not None and end is not None and start > end:
            errors.append("fromDate cannot be after toDate")
        return errors


@dataclass(frozen=True)
class FilterPredicate:
    """
    A WHERE-clause body and its bind parameters.

    ``clause`` is empty when no recognized filter was supplied.
    """

    clause: str = ""
    params: dict[str, Any] = field(default_factory=dict)

    @property
    def values(self) -> list[Any]:
        """Bound values in placeholder order."""
        return list(self.params.values())

    def apply(self, base_query: str) -> str:
        if not self.clause:
            return base_query
        return f"{base_query} WHERE {self.clause}"


def build_predicate(
    filters: FilterSet,
    *,
    date_column: str,
    type_column: str,
) -> FilterPredicate:
    """
    Translate *filters* into a parameterized predicate over the given columns.

    Date values are bound as ``date`` objects.  Callers are expected to have
    validated the FilterSet first; an unparseable date here is a ValueError.
    """
    conditions: list[str] = []
    params: dict[str, Any] = {}

    def _bind(value: Any) -> str:
        name = f"p{len(params) + 1}"
        params[name] = value
        return f":{name}"

    if filters.from_date is not None:
        conditions.append(f"{date_column} >= {_bind(_require_date(filters.from_date, FROM_DATE_KEY))}")
    if filters.to_date is not None:
        conditions.append(f"{date_column} <= {_bind(_require_date(filters.to_date, TO_DATE_KEY))}")
    if filters.type is not None:
        conditions.append(f"{type_column} = {_bind(filters.type)}")

    return FilterPredicate(clause=" AND ".join(conditions), params=params)


def _require_date(value: Any, key: str) -> date:
    parsed = parse_filter_date(value)
    if parsed is None:
        raise ValueError(f"Invalid {key} value {value!r}; expected YYYY-MM-DD.")
    return parsed
