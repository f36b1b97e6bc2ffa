"""
Shared fixtures and fakes for the report pipeline tests.
"""

from __future__ import annotations

import io
from collections.abc import Mapping, Sequence
from typing import Any

import pytest
from docx import Document

from reports.errors import ConversionError
from templating.registry import TemplateRegistry
from templating.storage import LocalTemplateStorage

FAKE_PDF = b"%PDF-1.4 fake"


def make_docx(*paragraphs: str) -> bytes:
    """Build a .docx whose body is one paragraph per argument."""
    document = Document()
    for text in paragraphs:
        document.add_paragraph(text)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def docx_text(content: bytes) -> str:
    """All paragraph text of a .docx, newline separated."""
    return "\n".join(paragraph.text for paragraph in Document(io.BytesIO(content)).paragraphs)


class FakeRowSource:
    """Row source returning canned rows per table and recording every query."""

    def __init__(self, rows_by_table: Mapping[str, Sequence[Mapping[str, Any]]] | None = None) -> None:
        self.rows_by_table = {table: list(rows) for table, rows in (rows_by_table or {}).items()}
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.fail_with: Exception | None = None
        self.connected = True

    def fetch(self, query: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        self.queries.append((query, dict(params or {})))
        if self.fail_with is not None:
            raise self.fail_with
        table = query.split(" FROM ", 1)[1].split(" ", 1)[0]
        return [dict(row) for row in self.rows_by_table.get(table, [])]

    def ping(self) -> bool:
        return self.connected


class FakeConverter:
    """Converter returning a fixed PDF payload, or raising when told to."""

    def __init__(self) -> None:
        self.documents: list[bytes] = []
        self.fail = False

    def convert(self, document: bytes, *, source_suffix: str = ".docx") -> bytes:
        self.documents.append(document)
        if self.fail:
            raise ConversionError("Document converter exited with status 1.")
        return FAKE_PDF

    def is_available(self) -> bool:
        return not self.fail


@pytest.fixture()
def template_registry(tmp_path) -> TemplateRegistry:
    return TemplateRegistry(LocalTemplateStorage(tmp_path / "templates"))


@pytest.fixture()
def row_source() -> FakeRowSource:
    return FakeRowSource(
        {
            "sales_data": [
                {"id": 1, "sale_date": "2024-01-15", "sale_type": "online", "amount": 100, "quantity": 2},
                {"id": 2, "sale_date": "2024-01-16", "sale_type": "retail", "amount": 50, "quantity": 1},
            ],
            "inventory_data": [
                {"id": 1, "sku": "A-1", "quantity": 0, "reorder_level": 10, "price": 4.5},
                {"id": 2, "sku": "B-2", "quantity": 20, "reorder_level": 10, "price": 2},
            ],
            "customer_data": [],
        }
    )


@pytest.fixture()
def converter() -> FakeConverter:
    return FakeConverter()
