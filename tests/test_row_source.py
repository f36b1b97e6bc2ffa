"""
tests/test_row_source.py

Row source tests against an in-memory SQLite database built from the ORM
models, plus one end-to-end pipeline run over the same database.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.orm import Session

import db.models  # noqa: F401  registers all ORM models on Base.metadata
from app.services.report_orchestrator import ReportOrchestrator
from conftest import FAKE_PDF, FakeConverter, docx_text, make_docx
from db.base import Base
from db.models import CustomerRecord, InventoryItem, SaleRecord
from db.row_source import RowSource, RowSourceError
from db.session import create_db_engine
from reports.filters import FilterSet
from reports.registry import INVENTORY_SOURCE, SALES_SOURCE


@pytest.fixture()
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as session:
        session.add_all(
            [
                SaleRecord(sale_date=date(2024, 1, 5), sale_type="online", amount=Decimal("100"), quantity=2),
                SaleRecord(sale_date=date(2024, 1, 20), sale_type="retail", amount=Decimal("50"), quantity=1),
                SaleRecord(sale_date=date(2024, 2, 2), sale_type="online", amount=Decimal("10"), quantity=3),
                InventoryItem(sku="A-1", quantity=0, reorder_level=5, price=Decimal("3.00")),
                CustomerRecord(customer_id="C-1", lifetime_value=Decimal("12000")),
            ]
        )
        session.commit()
    yield engine
    engine.dispose()


def test_fetch_unfiltered_returns_all_rows_as_dicts(engine) -> None:
    rows = RowSource(engine).fetch(SALES_SOURCE.base_query)

    assert len(rows) == 3
    assert isinstance(rows[0], dict)
    assert {"sale_date", "sale_type", "amount", "quantity"} <= set(rows[0])


def test_fetch_with_date_range_predicate(engine) -> None:
    predicate = SALES_SOURCE.predicate(FilterSet.from_mapping({"fromDate": "2024-01-01", "toDate": "2024-01-31"}))

    rows = RowSource(engine).fetch(predicate.apply(SALES_SOURCE.base_query), predicate.params)

    assert sorted(row["amount"] for row in rows) == [50, 100]


def test_fetch_with_type_predicate(engine) -> None:
    predicate = SALES_SOURCE.predicate(FilterSet.from_mapping({"type": "online"}))

    rows = RowSource(engine).fetch(predicate.apply(SALES_SOURCE.base_query), predicate.params)

    assert [row["sale_type"] for row in rows] == ["online", "online"]


def test_statement_failure_raises_row_source_error(engine) -> None:
    with pytest.raises(RowSourceError):
        RowSource(engine).fetch("SELECT * FROM no_such_table")


def test_ping(engine) -> None:
    assert RowSource(engine).ping() is True


def test_pipeline_over_sqlite(engine, template_registry) -> None:
    template_registry.save(
        content=make_docx("{{ reportType }} {{ summary.totalRecords }} {{ summary.totalAmount }}"),
        report_type="sales",
        original_name="sales.docx",
    )
    converter = FakeConverter()
    orchestrator = ReportOrchestrator(
        template_registry=template_registry,
        row_source=RowSource(engine),
        converter=converter,
    )

    result = orchestrator.generate_report("sales", FilterSet.from_mapping({"toDate": "2024-01-31"}))

    assert result.content == FAKE_PDF
    assert docx_text(converter.documents[0]) == "SALES 2 150.00"


def test_inventory_rows_transform_from_sqlite(engine, template_registry) -> None:
    orchestrator = ReportOrchestrator(
        template_registry=template_registry,
        row_source=RowSource(engine),
        converter=FakeConverter(),
    )

    [row] = orchestrator.fetch_data("inventory")

    assert row["sku"] == "A-1"
    assert row["stock_status"] == "Out of Stock"
    assert INVENTORY_SOURCE.table == "inventory_data"
