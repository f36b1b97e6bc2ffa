"""
reports/customers.py

Customer report module.

Derived fields
--------------
customer_segment, by lifetime_value:
    >= 10000 Premium, >= 5000 Gold, >= 1000 Silver, else Bronze
customer_status, by days since last_purchase_date:
    <= 30 Active, <= 90 Recent, <= 365 Occasional, else Inactive

Summary
-------
totalLifetimeValue, averageLifetimeValue, totalPurchases, averagePurchases,
segmentDistribution, statusDistribution, uniqueCustomers and the ten rows
with the highest lifetime value.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from reports.base import (
    DEFAULT_DISPLAY_DATE_FORMAT,
    BaseReportModule,
    Row,
    Summary,
    average,
    coerce_date,
    coerce_decimal,
    count_by,
    format_money,
    number_or_zero,
)

# Inclusive lower bounds, checked in order.
_SEGMENT_THRESHOLDS: tuple[tuple[Decimal, str], ...] = (
    (Decimal(10000), "Premium"),
    (Decimal(5000), "Gold"),
    (Decimal(1000), "Silver"),
)
_DEFAULT_SEGMENT = "Bronze"

# Inclusive upper bounds on days since last purchase.
_STATUS_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (30, "Active"),
    (90, "Recent"),
    (365, "Occasional"),
)
_DEFAULT_STATUS = "Inactive"

_TOP_CUSTOMER_COUNT = 10


def classify_segment(lifetime_value: Decimal) -> str:
    for threshold, label in _SEGMENT_THRESHOLDS:
        if lifetime_value >= threshold:
            return label
    return _DEFAULT_SEGMENT


def classify_status(days_since_purchase: int) -> str:
    for threshold, label in _STATUS_THRESHOLDS:
        if days_since_purchase <= threshold:
            return label
    return _DEFAULT_STATUS


class CustomerReportModule(BaseReportModule):
    """Customer rows: value segmentation and recency classification."""

    date_fields = ("created_date", "updated_date", "last_purchase_date", "registration_date")
    money_fields = ("lifetime_value", "total_purchases")

    def __init__(
        self,
        *,
        date_format: str = DEFAULT_DISPLAY_DATE_FORMAT,
        today: Callable[[], date] = date.today,
    ) -> None:
        super().__init__(date_format=date_format)
        self._today = today

    def derive_fields(self, row: Row) -> dict[str, Any]:
        derived: dict[str, Any] = {}

        lifetime_value = coerce_decimal(row.get("lifetime_value"))
        if lifetime_value is not None:
            derived["customer_segment"] = classify_segment(lifetime_value)

        last_purchase = coerce_date(row.get("last_purchase_date"))
        if last_purchase is not None:
            days = (self._today() - last_purchase).days
            derived["customer_status"] = classify_status(days)
        return derived

    def summarize_rows(self, rows: Sequence[Row]) -> Summary:
        count = len(rows)
        total_value = sum((number_or_zero(row.get("lifetime_value")) for row in rows), start=Decimal(0))
        total_purchases = sum((number_or_zero(row.get("total_purchases")) for row in rows), start=Decimal(0))

        identifiers = {
            row.get("customer_id") if row.get("customer_id") is not None else row.get("id")
            for row in rows
        }
        identifiers.discard(None)

        valued = [row for row in rows if coerce_decimal(row.get("lifetime_value")) is not None]
        top_customers = sorted(
            valued,
            key=lambda row: coerce_decimal(row.get("lifetime_value")),
            reverse=True,
        )[:_TOP_CUSTOMER_COUNT]

        return {
            "totalLifetimeValue": format_money(total_value),
            "averageLifetimeValue": format_money(average(total_value, count)),
            "totalPurchases": format_money(total_purchases),
            "averagePurchases": format_money(average(total_purchases, count)),
            "segmentDistribution": count_by(rows, "customer_segment"),
            "statusDistribution": count_by(rows, "customer_status"),
            "uniqueCustomers": len(identifiers),
            "topCustomers": [dict(row) for row in top_customers],
        }
