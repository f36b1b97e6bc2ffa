"""
reports/base.py

Abstract base class for report domain modules.

A domain module turns raw rows from its backing table into template-ready
rows (``transform``) and computes aggregate statistics over them
(``summarize``).  Modules are pure: no I/O, no logging, and neither method
mutates its input rows.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

Row = Mapping[str, Any]
Summary = dict[str, Any]

EMPTY_DATASET_MESSAGE = "No data available for the specified criteria"
DEFAULT_DISPLAY_DATE_FORMAT = "%m/%d/%Y"


class BaseReportModule(ABC):
    """
    Contract for report domain modules.

    Subclasses declare which fields they normalize and implement the
    derived-column and summary logic for their domain.
    """

    #: Fields rendered with the display date format.
    date_fields: tuple[str, ...] = ()
    #: Fields rendered as fixed two-decimal strings.
    money_fields: tuple[str, ...] = ()
    #: Fields rendered as integers.
    count_fields: tuple[str, ...] = ()

    def __init__(self, *, date_format: str = DEFAULT_DISPLAY_DATE_FORMAT) -> None:
        self.date_format = date_format

    def transform(self, rows: Iterable[Row]) -> list[dict[str, Any]]:
        """Return one new, normalized row (with derived fields) per input row."""
        return [self.transform_row(row) for row in rows]

    def transform_row(self, row: Row) -> dict[str, Any]:
        transformed = self.normalize_row(row)
        transformed.update(self.derive_fields(row))
        return transformed

    def normalize_row(self, row: Row) -> dict[str, Any]:
        """
        Copy *row* with date and numeric fields in display form.

        Fields that are missing, null, or unparseable are left as they are.
        """
        normalized = dict(row)
        for name in self.date_fields:
            value = row.get(name)
            parsed = coerce_date(value)
            if parsed is not None:
                normalized[name] = parsed.strftime(self.date_format)
        for name in self.money_fields:
            amount = coerce_decimal(row.get(name))
            if amount is not None:
                normalized[name] = format_money(amount)
        for name in self.count_fields:
            amount = coerce_decimal(row.get(name))
            if amount is not None:
                normalized[name] = int(amount)
        return normalized

    @abstractmethod
    def derive_fields(self, row: Row) -> dict[str, Any]:
        """
        Compute domain-specific derived columns from the raw *row*.

        Returns only the derived keys; absent inputs yield absent keys.
        """

    def summarize(self, rows: Sequence[Row]) -> Summary:
        """
        Aggregate *rows* into a summary.

        An empty dataset yields ``totalRecords = 0`` and a message, with no
        numeric aggregates.
        """
        if not rows:
            return {"totalRecords": 0, "message": EMPTY_DATASET_MESSAGE}

        summary: Summary = {
            "totalRecords": len(rows),
            "generatedAt": datetime.now().isoformat(timespec="seconds"),
        }
        summary.update(self.summarize_rows(rows))
        return summary

    @abstractmethod
    def summarize_rows(self, rows: Sequence[Row]) -> Summary:
        """Domain-specific aggregates over a non-empty dataset."""


# ---------------------------------------------------------------------------
# Value coercion helpers
# ---------------------------------------------------------------------------


def coerce_decimal(value: Any) -> Decimal | None:
    """Parse ints, floats, Decimals and numeric strings; None otherwise."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            parsed = Decimal(value.strip().replace(",", ""))
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def number_or_zero(value: Any) -> Decimal:
    """Missing or unparseable numbers count as zero in aggregates."""
    parsed = coerce_decimal(value)
    return parsed if parsed is not None else Decimal(0)


def coerce_date(value: Any) -> date | None:
    """Parse ``date``/``datetime`` values and ISO-8601 strings."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def format_money(value: Decimal) -> str:
    return f"{value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):.2f}"


def average(total: Decimal, count: int) -> Decimal:
    if count == 0:
        return Decimal(0)
    return total / count


def count_by(rows: Iterable[Row], key: str) -> dict[str, int]:
    """Occurrences of each non-empty value of *key*, in first-seen order."""
    counts: dict[str, int] = {}
    for row in rows:
        value = row.get(key)
        if value:
            counts[value] = counts.get(value, 0) + 1
    return counts
