"""
reports/inventory.py

Inventory report module.

Derived fields
--------------
total_value  = quantity * price  (two decimals; only when both are non-zero)
stock_status = "Out of Stock"  when quantity <= 0
               "Low Stock"     when 0 < quantity <= reorder_level
               "In Stock"      when quantity > reorder_level

A missing reorder_level counts as zero, so any positive quantity is in stock.

Summary
-------
totalQuantity, averageQuantity (rounded), averagePrice, totalValue,
stockStatusCounts, lowStockCount and up to ten low/out-of-stock rows.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from reports.base import (
    BaseReportModule,
    Row,
    Summary,
    average,
    coerce_decimal,
    count_by,
    format_money,
    number_or_zero,
)

OUT_OF_STOCK = "Out of Stock"
LOW_STOCK = "Low Stock"
IN_STOCK = "In Stock"

_LOW_STOCK_STATUSES = frozenset({OUT_OF_STOCK, LOW_STOCK})
_LOW_STOCK_SAMPLE_SIZE = 10


def classify_stock(quantity: Decimal, reorder_level: Decimal) -> str:
    if quantity <= 0:
        return OUT_OF_STOCK
    if quantity <= reorder_level:
        return LOW_STOCK
    return IN_STOCK


class InventoryReportModule(BaseReportModule):
    """Inventory rows: stock valuation and reorder classification."""

    date_fields = ("created_date", "updated_date", "last_restock_date")
    money_fields = ("price",)
    count_fields = ("quantity", "reorder_level")

    def derive_fields(self, row: Row) -> dict[str, Any]:
        derived: dict[str, Any] = {}
        quantity = coerce_decimal(row.get("quantity"))
        price = coerce_decimal(row.get("price"))

        if quantity and price:
            derived["total_value"] = format_money(quantity * price)
        if quantity is not None:
            derived["stock_status"] = classify_stock(quantity, number_or_zero(row.get("reorder_level")))
        return derived

    def summarize_rows(self, rows: Sequence[Row]) -> Summary:
        count = len(rows)
        total_quantity = sum(int(number_or_zero(row.get("quantity"))) for row in rows)
        total_price = sum((number_or_zero(row.get("price")) for row in rows), start=Decimal(0))
        total_value = sum((number_or_zero(row.get("total_value")) for row in rows), start=Decimal(0))

        low_stock_rows = [row for row in rows if row.get("stock_status") in _LOW_STOCK_STATUSES]

        return {
            "totalQuantity": total_quantity,
            "averageQuantity": int(
                average(Decimal(total_quantity), count).quantize(Decimal(1), rounding=ROUND_HALF_UP)
            ),
            "averagePrice": format_money(average(total_price, count)),
            "totalValue": format_money(total_value),
            "stockStatusCounts": count_by(rows, "stock_status"),
            "lowStockCount": len(low_stock_rows),
            "lowStockItems": [dict(row) for row in low_stock_rows[:_LOW_STOCK_SAMPLE_SIZE]],
        }
