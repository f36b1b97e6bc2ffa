"""
reports/registry.py

Report type registry.

Maps each report type tag to the domain module that transforms and
summarizes its rows and to the table/columns its rows are queried from.

Built-in report types
---------------------
sales      → SalesReportModule      over sales_data
orders     → SalesReportModule      over sales_data
inventory  → InventoryReportModule  over inventory_data
customers  → CustomerReportModule   over customer_data

New report types are added with :meth:`ReportTypeRegistry.register`; the
orchestrator only ever looks report types up here.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from reports.base import DEFAULT_DISPLAY_DATE_FORMAT, BaseReportModule
from reports.customers import CustomerReportModule
from reports.errors import UnsupportedReportTypeError
from reports.filters import FilterPredicate, FilterSet, build_predicate
from reports.inventory import InventoryReportModule
from reports.sales import SalesReportModule

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
REPORT_TYPE_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,50}$")


def is_valid_report_type_name(name: str | None) -> bool:
    """Report type tags are 1-50 letters, digits, underscores or hyphens."""
    return bool(name) and REPORT_TYPE_NAME_RE.fullmatch(name) is not None


@dataclass(frozen=True)
class ReportSource:
    """
    Backing table for one report type.

    Names are interpolated into SQL, so only plain identifiers are accepted.
    """

    table: str
    date_column: str
    type_column: str

    def __post_init__(self) -> None:
        for name in (self.table, self.date_column, self.type_column):
            if not _IDENTIFIER_RE.match(name):
                raise ValueError(f"Invalid SQL identifier {name!r} in report source.")

    @property
    def base_query(self) -> str:
        return f"SELECT * FROM {self.table}"

    def predicate(self, filters: FilterSet) -> FilterPredicate:
        return build_predicate(filters, date_column=self.date_column, type_column=self.type_column)


@dataclass(frozen=True)
class ReportType:
    """One registered report type: its tag, domain module and row source."""

    name: str
    module: BaseReportModule
    source: ReportSource


SALES_SOURCE = ReportSource(table="sales_data", date_column="sale_date", type_column="sale_type")
INVENTORY_SOURCE = ReportSource(
    table="inventory_data",
    date_column="last_restock_date",
    type_column="category",
)
CUSTOMER_SOURCE = ReportSource(
    table="customer_data",
    date_column="registration_date",
    type_column="customer_type",
)


class ReportTypeRegistry:
    """
    Registry of report types, keyed by lower-cased tag.
    """

    def __init__(self, report_types: Iterable[ReportType] = ()) -> None:
        self._report_types: dict[str, ReportType] = {}
        for report_type in report_types:
            self.register(report_type)

    def register(self, report_type: ReportType) -> None:
        self._report_types[report_type.name.strip().lower()] = report_type

    def get(self, name: str) -> ReportType:
        resolved = self._report_types.get((name or "").strip().lower())
        if resolved is None:
            raise UnsupportedReportTypeError(f"Unsupported report type: {name}", report_type=name)
        return resolved

    def is_registered(self, name: str | None) -> bool:
        return bool(name) and name.strip().lower() in self._report_types

    def names(self) -> list[str]:
        return list(self._report_types)


def build_default_registry(*, date_format: str = DEFAULT_DISPLAY_DATE_FORMAT) -> ReportTypeRegistry:
    """Registry with the built-in sales, orders, inventory and customers report types."""
    sales = SalesReportModule(date_format=date_format)
    return ReportTypeRegistry(
        [
            ReportType(name="sales", module=sales, source=SALES_SOURCE),
            ReportType(name="inventory", module=InventoryReportModule(date_format=date_format), source=INVENTORY_SOURCE),
            ReportType(name="customers", module=CustomerReportModule(date_format=date_format), source=CUSTOMER_SOURCE),
            ReportType(name="orders", module=sales, source=SALES_SOURCE),
        ]
    )
