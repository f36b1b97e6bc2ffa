"""
tests/test_renderer.py

Pytest tests for TemplateRenderer against real .docx files built with
python-docx.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from conftest import docx_text, make_docx
from reports.errors import TemplateRenderError
from templating.renderer import TemplateRenderer
from templating.types import RenderContext


@pytest.fixture()
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture()
def context() -> RenderContext:
    return RenderContext(
        report_type="sales",
        template_name="Monthly",
        generated_at=datetime(2024, 2, 1, 9, 30, tzinfo=timezone.utc),
        filters={"fromDate": "2024-01-01", "region": "R&D"},
        data=[{"id": 1, "total": "200.00"}, {"id": 2, "total": "50.00"}],
        summary={"totalRecords": 2, "totalAmount": "150.00"},
    )


def test_merge_fields_are_populated(renderer: TemplateRenderer, context: RenderContext) -> None:
    template = make_docx(
        "Report: {{ reportType }} / {{ templateName }}",
        "Generated: {{ generatedDate }}",
        "Region: {{ filters.region }}",
        "Total: {{ summary.totalAmount }} over {{ summary.totalRecords }} rows",
        "{% for row in data %}[{{ row.id }}={{ row.total }}]{% endfor %}",
    )

    text = docx_text(renderer.render(template, context))

    assert "Report: SALES / Monthly" in text
    assert "Generated: 2024-02-01T09:30:00+00:00" in text
    assert "Region: R&D" in text
    assert "Total: 150.00 over 2 rows" in text
    assert "[1=200.00][2=50.00]" in text


def test_render_from_path(renderer: TemplateRenderer, context: RenderContext, tmp_path) -> None:
    path = tmp_path / "template.docx"
    path.write_bytes(make_docx("{{ reportType }}"))

    assert "SALES" in docx_text(renderer.render(path, context))


def test_unknown_top_level_field_is_reported(renderer: TemplateRenderer, context: RenderContext) -> None:
    template = make_docx("Dear {{ customerName }}, {{ reportType }}")

    with pytest.raises(TemplateRenderError) as exc_info:
        renderer.render(template, context)

    assert exc_info.value.missing_fields == ["customerName"]
    assert exc_info.value.report_type == "sales"
    assert exc_info.value.to_dict()["missing_fields"] == ["customerName"]


def test_missing_nested_field_fails(renderer: TemplateRenderer, context: RenderContext) -> None:
    template = make_docx("Average: {{ summary.averageAmount }}")

    with pytest.raises(TemplateRenderError):
        renderer.render(template, context)


def test_invalid_docx_fails(renderer: TemplateRenderer, context: RenderContext) -> None:
    with pytest.raises(TemplateRenderError, match="not a valid .docx"):
        renderer.render(b"this is not a zip archive", context)


def test_broken_merge_field_syntax_fails(renderer: TemplateRenderer, context: RenderContext) -> None:
    with pytest.raises(TemplateRenderError):
        renderer.render(make_docx("{{ reportType "), context)
