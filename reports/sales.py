"""
reports/sales.py

Sales report module (also serves the ``orders`` report type).

Derived fields
--------------
total = amount * quantity   (two decimals; only when both are non-zero)

Summary
-------
totalAmount     = sum(amount)                  (two decimals)
averageAmount   = totalAmount / totalRecords   (two decimals)
totalQuantity   = sum(quantity)
averageQuantity = totalQuantity / totalRecords (two decimals)
salesByDate     = {sale_date: {count, total}}  (only when rows carry sale_date)
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from reports.base import (
    BaseReportModule,
    Row,
    Summary,
    average,
    coerce_decimal,
    format_money,
    number_or_zero,
)


class SalesReportModule(BaseReportModule):
    """Sales rows: per-line totals and per-day revenue grouping."""

    date_fields = ("created_date", "updated_date", "sale_date")
    money_fields = ("amount", "price")
    count_fields = ("quantity",)

    def derive_fields(self, row: Row) -> dict[str, Any]:
        amount = coerce_decimal(row.get("amount"))
        quantity = coerce_decimal(row.get("quantity"))
        if not amount or not quantity:
            return {}
        return {"total": format_money(amount * int(quantity))}

    def summarize_rows(self, rows: Sequence[Row]) -> Summary:
        count = len(rows)
        total_amount = sum((number_or_zero(row.get("amount")) for row in rows), start=Decimal(0))
        total_quantity = sum(int(number_or_zero(row.get("quantity"))) for row in rows)

        summary: Summary = {
            "totalAmount": format_money(total_amount),
            "averageAmount": format_money(average(total_amount, count)),
            "totalQuantity": total_quantity,
            "averageQuantity": format_money(average(Decimal(total_quantity), count)),
        }

        if any(row.get("sale_date") for row in rows):
            summary["salesByDate"] = _group_by_sale_date(rows)
        return summary


def _group_by_sale_date(rows: Sequence[Row]) -> dict[str, dict[str, Any]]:
    grouped: dict[str, dict[str, Any]] = {}
    for row in rows:
        sale_date = row.get("sale_date")
        if not sale_date:
            continue
        bucket = grouped.setdefault(str(sale_date), {"count": 0, "total": Decimal(0)})
        bucket["count"] += 1
        bucket["total"] += number_or_zero(row.get("amount"))
    return {
        key: {"count": bucket["count"], "total": format_money(bucket["total"])}
        for key, bucket in grouped.items()
    }
