"""
tests/test_report_modules.py

Pytest unit tests for the sales, inventory and customer report modules.

All tests are pure Python: no database, no I/O.

Coverage
--------
- Display normalization of dates and numbers
- Derived columns (total, total_value, stock_status, segment, status)
- Summary aggregates per domain
- Empty dataset summaries
- Input rows are never mutated
- Report type registry lookups
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from reports.base import EMPTY_DATASET_MESSAGE
from reports.customers import CustomerReportModule, classify_segment, classify_status
from reports.errors import UnsupportedReportTypeError
from reports.inventory import IN_STOCK, LOW_STOCK, OUT_OF_STOCK, InventoryReportModule
from reports.registry import build_default_registry, is_valid_report_type_name
from reports.sales import SalesReportModule

TODAY = date(2024, 6, 30)


@pytest.fixture()
def sales() -> SalesReportModule:
    return SalesReportModule()


@pytest.fixture()
def inventory() -> InventoryReportModule:
    return InventoryReportModule()


@pytest.fixture()
def customers() -> CustomerReportModule:
    return CustomerReportModule(today=lambda: TODAY)


# ---------------------------------------------------------------------------
# Sales
# ---------------------------------------------------------------------------


class TestSalesModule:
    def test_transform_normalizes_and_derives_total(self, sales: SalesReportModule) -> None:
        [row] = sales.transform([{"sale_date": "2024-01-15", "amount": 19.5, "quantity": "3", "price": 6.5}])

        assert row["sale_date"] == "01/15/2024"
        assert row["amount"] == "19.50"
        assert row["price"] == "6.50"
        assert row["quantity"] == 3
        assert row["total"] == "58.50"

    def test_missing_quantity_skips_total(self, sales: SalesReportModule) -> None:
        [row] = sales.transform([{"amount": 10}])

        assert "total" not in row
        assert row["amount"] == "10.00"

    def test_summary_totals_and_averages(self, sales: SalesReportModule) -> None:
        summary = sales.summarize(sales.transform([{"amount": 100, "quantity": 2}, {"amount": 50, "quantity": 1}]))

        assert summary["totalRecords"] == 2
        assert summary["totalAmount"] == "150.00"
        assert summary["averageAmount"] == "75.00"
        assert summary["totalQuantity"] == 3
        assert "salesByDate" not in summary

    def test_summary_groups_by_sale_date(self, sales: SalesReportModule) -> None:
        rows = sales.transform(
            [
                {"sale_date": "2024-01-15", "amount": 10, "quantity": 1},
                {"sale_date": "2024-01-15", "amount": 5, "quantity": 1},
                {"sale_date": "2024-01-16", "amount": 1, "quantity": 1},
            ]
        )

        assert sales.summarize(rows)["salesByDate"] == {
            "01/15/2024": {"count": 2, "total": "15.00"},
            "01/16/2024": {"count": 1, "total": "1.00"},
        }

    def test_missing_amounts_count_as_zero(self, sales: SalesReportModule) -> None:
        summary = sales.summarize([{"amount": None}, {"amount": 10}])

        assert summary["totalAmount"] == "10.00"
        assert summary["averageAmount"] == "5.00"

    def test_transform_does_not_mutate_input(self, sales: SalesReportModule) -> None:
        original = {"sale_date": date(2024, 1, 15), "amount": Decimal("2.5"), "quantity": 2}
        snapshot = dict(original)

        sales.transform([original])

        assert original == snapshot


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------


class TestInventoryModule:
    @pytest.mark.parametrize(
        ("quantity", "reorder_level", "expected"),
        [
            (0, 10, OUT_OF_STOCK),
            (-2, 10, OUT_OF_STOCK),
            (5, 10, LOW_STOCK),
            (10, 10, LOW_STOCK),
            (20, 10, IN_STOCK),
            (1, None, IN_STOCK),
        ],
    )
    def test_stock_status(self, inventory: InventoryReportModule, quantity, reorder_level, expected) -> None:
        [row] = inventory.transform([{"quantity": quantity, "reorder_level": reorder_level}])

        assert row["stock_status"] == expected

    def test_total_value(self, inventory: InventoryReportModule) -> None:
        [row] = inventory.transform([{"quantity": 4, "price": "2.25"}])

        assert row["total_value"] == "9.00"
        assert row["price"] == "2.25"

    def test_summary(self, inventory: InventoryReportModule) -> None:
        rows = inventory.transform(
            [
                {"sku": "A", "quantity": 0, "reorder_level": 10, "price": 4},
                {"sku": "B", "quantity": 5, "reorder_level": 10, "price": 2},
                {"sku": "C", "quantity": 20, "reorder_level": 10, "price": 3},
            ]
        )

        summary = inventory.summarize(rows)

        assert summary["totalRecords"] == 3
        assert summary["totalQuantity"] == 25
        assert summary["averageQuantity"] == 8
        assert summary["averagePrice"] == "3.00"
        assert summary["totalValue"] == "70.00"
        assert summary["stockStatusCounts"] == {OUT_OF_STOCK: 1, LOW_STOCK: 1, IN_STOCK: 1}
        assert summary["lowStockCount"] == 2
        assert [item["sku"] for item in summary["lowStockItems"]] == ["A", "B"]

    def test_low_stock_sample_is_capped_at_ten(self, inventory: InventoryReportModule) -> None:
        rows = inventory.transform([{"sku": str(i), "quantity": 0} for i in range(15)])

        summary = inventory.summarize(rows)

        assert summary["lowStockCount"] == 15
        assert len(summary["lowStockItems"]) == 10


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------


class TestCustomerModule:
    @pytest.mark.parametrize(
        ("lifetime_value", "expected"),
        [(10000, "Premium"), (9999.99, "Gold"), (5000, "Gold"), (1000, "Silver"), (999, "Bronze"), (0, "Bronze")],
    )
    def test_segment_thresholds(self, lifetime_value, expected) -> None:
        assert classify_segment(Decimal(str(lifetime_value))) == expected

    @pytest.mark.parametrize(
        ("days", "expected"),
        [(0, "Active"), (30, "Active"), (31, "Recent"), (90, "Recent"), (365, "Occasional"), (366, "Inactive")],
    )
    def test_status_thresholds(self, days: int, expected: str) -> None:
        assert classify_status(days) == expected

    def test_transform_derives_segment_and_status(self, customers: CustomerReportModule) -> None:
        [row] = customers.transform(
            [{"customer_id": "C1", "lifetime_value": 10000, "last_purchase_date": "2024-06-10"}]
        )

        assert row["customer_segment"] == "Premium"
        assert row["customer_status"] == "Active"
        assert row["lifetime_value"] == "10000.00"
        assert row["last_purchase_date"] == "06/10/2024"

    def test_missing_fields_are_omitted(self, customers: CustomerReportModule) -> None:
        [row] = customers.transform([{"customer_id": "C1"}])

        assert "customer_segment" not in row
        assert "customer_status" not in row

    def test_summary(self, customers: CustomerReportModule) -> None:
        rows = customers.transform(
            [
                {"customer_id": "C1", "lifetime_value": 12000, "total_purchases": 10, "last_purchase_date": "2024-06-01"},
                {"customer_id": "C2", "lifetime_value": 500, "total_purchases": 2, "last_purchase_date": "2023-01-01"},
                {"customer_id": "C1", "lifetime_value": 2000, "total_purchases": 3, "last_purchase_date": "2024-05-01"},
            ]
        )

        summary = customers.summarize(rows)

        assert summary["totalRecords"] == 3
        assert summary["uniqueCustomers"] == 2
        assert summary["totalLifetimeValue"] == "14500.00"
        assert summary["segmentDistribution"] == {"Premium": 1, "Bronze": 1, "Silver": 1}
        assert summary["statusDistribution"] == {"Active": 1, "Inactive": 1, "Recent": 1}
        assert [row["lifetime_value"] for row in summary["topCustomers"]] == ["12000.00", "2000.00", "500.00"]


# ---------------------------------------------------------------------------
# Shared behavior
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("report_type", ["sales", "orders", "inventory", "customers"])
def test_empty_dataset_summary(report_type: str) -> None:
    module = build_default_registry().get(report_type).module

    summary = module.summarize([])

    assert summary == {"totalRecords": 0, "message": EMPTY_DATASET_MESSAGE}


def test_orders_reuses_sales_module_and_source() -> None:
    registry = build_default_registry()

    assert isinstance(registry.get("orders").module, SalesReportModule)
    assert registry.get("orders").source == registry.get("sales").source


def test_registry_lookup_is_case_insensitive() -> None:
    assert build_default_registry().get(" Sales ").name == "sales"


def test_unknown_report_type() -> None:
    with pytest.raises(UnsupportedReportTypeError, match="Unsupported report type: payroll"):
        build_default_registry().get("payroll")


@pytest.mark.parametrize(
    ("name", "valid"),
    [("sales", True), ("q3-region_2", True), ("", False), ("../etc", False), ("a" * 51, False), ("sales\n", False)],
)
def test_report_type_name_format(name: str, valid: bool) -> None:
    assert is_valid_report_type_name(name) is valid
