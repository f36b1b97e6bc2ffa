"""
app/services/report_orchestrator.py

Report generation pipeline orchestrator.

Wires TemplateRegistry → RowSource → report module → TemplateRenderer →
DocumentConverter into a single synchronous run.  No business logic lives
here; every layer retains its own responsibility:

    TemplateRegistry   – which template file serves a report type / name
    RowSource          – one parameterized SELECT per report
    report module      – row normalization, derived fields, summary
    TemplateRenderer   – merge fields → populated .docx
    DocumentConverter  – .docx → PDF in a scoped temp directory

Pipeline
--------
    ResolveTemplate → FetchData → Transform → Summarize → Render → Convert

Any step's failure ends the run with that step's typed error; there are no
retries between steps.

Failure contract
----------------
- Missing report type / bad filters → ReportValidationError
- Unknown report type              → UnsupportedReportTypeError
- No matching template             → TemplateNotFoundError
- Row source failure               → DataFetchError (report type attached)
- Template/data mismatch           → TemplateRenderError
- Converter failure                → ConversionError

Batch runs capture each item's failure independently and keep input order.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from app.logging_utils import elapsed_ms, log_event
from conversion.base import PDF_CONTENT_TYPE, DocumentConverter
from db.row_source import RowSource, RowSourceError
from reports.errors import DataFetchError, ReportError, ReportValidationError
from reports.filters import FilterSet
from reports.registry import ReportType, ReportTypeRegistry, build_default_registry
from templating.registry import TemplateRegistry
from templating.renderer import TemplateRenderer
from templating.types import RenderContext, TemplateRecord

logger = logging.getLogger(__name__)

DEFAULT_BATCH_MAX_SIZE = 5
PREVIEW_SAMPLE_SIZE = 5


# ---------------------------------------------------------------------------
# Request / result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportRequest:
    """One report to generate: report type, filters and optional template name."""

    report_type: str
    filters: FilterSet = field(default_factory=FilterSet)
    template_name: str | None = None


@dataclass(frozen=True)
class ReportResult:
    """
    A generated report.

    Attributes
    ----------
    content:       PDF bytes.
    filename:      Download filename, always ending in ``.pdf``.
    template_name: Display name of the template that was used.
    content_type:  Always ``application/pdf``.
    """

    content: bytes
    filename: str
    template_name: str
    content_type: str = PDF_CONTENT_TYPE

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ReportPreview:
    """Transformed rows and summary for a report, without rendering."""

    report_type: str
    filters: dict[str, Any]
    data_count: int
    summary: dict[str, Any]
    sample_data: list[dict[str, Any]]


@dataclass(frozen=True)
class ReportStatus:
    """Readiness of one report type."""

    report_type: str
    template_available: bool
    database_connected: bool
    template_file: str | None = None
    template_uploaded_at: datetime | None = None

    @property
    def can_generate(self) -> bool:
        return self.template_available and self.database_connected


@dataclass(frozen=True)
class BatchItemSuccess:
    index: int
    report_type: str
    filename: str
    size: int
    template_name: str


@dataclass(frozen=True)
class BatchItemFailure:
    index: int
    report_type: str
    error: str
    details: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BatchResult:
    """
    Outcome of a batch run.

    ``results`` and ``errors`` are each ordered by input index.
    """

    batch_id: str
    results: list[BatchItemSuccess]
    errors: list[BatchItemFailure]

    @property
    def total(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def successful(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def message(self) -> str:
        return f"Batch processing completed: {self.successful} successful, {self.failed} failed"


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportOrchestrator:
    """
    Runs the report pipeline for single and batch requests.

    Every collaborator is injected; one instance is built at application
    startup and shared across requests.
    """

    def __init__(
        self,
        *,
        template_registry: TemplateRegistry,
        row_source: RowSource,
        converter: DocumentConverter,
        renderer: TemplateRenderer | None = None,
        report_types: ReportTypeRegistry | None = None,
        batch_max_size: int = DEFAULT_BATCH_MAX_SIZE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._templates = template_registry
        self._row_source = row_source
        self._converter = converter
        self._renderer = renderer or TemplateRenderer()
        self._report_types = report_types or build_default_registry()
        self._batch_max_size = batch_max_size
        self._clock = clock

    @property
    def batch_max_size(self) -> int:
        return self._batch_max_size

    # ------------------------------------------------------------------
    # Single report
    # ------------------------------------------------------------------

    def generate_report(
        self,
        report_type: str,
        filters: FilterSet | None = None,
        template_name: str | None = None,
    ) -> ReportResult:
        """
        Run the full pipeline and return the PDF.

        The filename is ``<template_name>_<YYYY-MM-DD>.pdf`` when a template
        name was requested, otherwise ``<report_type>_report_<YYYY-MM-DD>.pdf``.
        """
        filters = filters or FilterSet()
        definition = self._checked_report_type(report_type, filters)
        started = time.perf_counter()
        log_event(
            logger,
            logging.INFO,
            "report_generation_started",
            report_type=definition.name,
            template_name=template_name,
            filters=filters.to_dict(),
        )

        template = self._templates.resolve(definition.name, template_name)
        log_event(logger, logging.INFO, "template_resolved", report_type=definition.name, template=template.file_name)

        transformed = self._fetch_and_transform(definition, filters)
        summary = definition.module.summarize(transformed)
        log_event(
            logger,
            logging.INFO,
            "data_prepared",
            report_type=definition.name,
            record_count=len(transformed),
        )

        generated_at = self._clock()
        context = RenderContext(
            report_type=definition.name,
            template_name=template.template_name,
            generated_at=generated_at,
            filters=filters.to_dict(),
            data=transformed,
            summary=summary,
        )
        document = self._renderer.render(self._templates.read_content(template), context)
        log_event(logger, logging.INFO, "template_rendered", report_type=definition.name, document_bytes=len(document))

        pdf = self._converter.convert(document)

        filename = _build_filename(definition.name, template_name, generated_at)
        log_event(
            logger,
            logging.INFO,
            "report_generation_completed",
            report_type=definition.name,
            filename=filename,
            pdf_bytes=len(pdf),
            duration_ms=elapsed_ms(started),
        )
        return ReportResult(content=pdf, filename=filename, template_name=template.template_name)

    def fetch_data(self, report_type: str, filters: FilterSet | None = None) -> list[dict[str, Any]]:
        """Fetch and transform rows without summarizing or rendering."""
        filters = filters or FilterSet()
        definition = self._checked_report_type(report_type, filters)
        return self._fetch_and_transform(definition, filters)

    def summarize(self, report_type: str, rows: Sequence[Mapping[str, Any]]) -> dict[str, Any]:
        return self._report_types.get(report_type).module.summarize(rows)

    def preview(self, report_type: str, filters: FilterSet | None = None) -> ReportPreview:
        """Validate, fetch, transform and summarize; return the first rows as a sample."""
        filters = filters or FilterSet()
        data = self.fetch_data(report_type, filters)
        summary = self.summarize(report_type, data)
        return ReportPreview(
            report_type=report_type,
            filters=filters.to_dict(),
            data_count=len(data),
            summary=summary,
            sample_data=data[:PREVIEW_SAMPLE_SIZE],
        )

    def validate_request(self, report_type: str | None, filters: FilterSet | None = None) -> list[str]:
        """
        Return every rule the request breaks; an empty list means valid.

        Never raises.
        """
        errors: list[str] = []
        if not report_type or not report_type.strip():
            errors.append("Report type is required")
        elif not self._report_types.is_registered(report_type):
            errors.append(f"Unsupported report type: {report_type}")
        if filters is not None:
            errors.extend(filters.validation_errors())
        return errors

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def batch_generate(self, requests: Sequence[ReportRequest]) -> BatchResult:
        """
        Generate up to ``batch_max_size`` reports, one after another.

        A failing item is recorded in ``errors`` and the batch moves on.

        Raises
        ------
        ReportValidationError: When the batch is empty or over the cap.
        """
        if not requests:
            raise ReportValidationError(["Reports array is required and must not be empty"])
        if len(requests) > self._batch_max_size:
            raise ReportValidationError(
                [f"Maximum {self._batch_max_size} reports can be generated in batch"],
                message="Batch too large",
            )

        batch_id = uuid.uuid4().hex
        log_event(logger, logging.INFO, "batch_started", batch_id=batch_id, size=len(requests))

        results: list[BatchItemSuccess] = []
        errors: list[BatchItemFailure] = []
        for index, request in enumerate(requests):
            try:
                report = self.generate_report(request.report_type, request.filters, request.template_name)
            except ReportError as exc:
                details = exc.errors if isinstance(exc, ReportValidationError) else []
                errors.append(
                    BatchItemFailure(
                        index=index,
                        report_type=request.report_type or "unknown",
                        error=exc.message,
                        details=details,
                    )
                )
                log_event(
                    logger,
                    logging.WARNING,
                    "batch_item_failed",
                    batch_id=batch_id,
                    index=index,
                    report_type=request.report_type,
                    error=type(exc).__name__,
                )
                continue
            except Exception:
                logger.exception("Unexpected failure in batch %s item %d", batch_id, index)
                errors.append(
                    BatchItemFailure(index=index, report_type=request.report_type or "unknown", error="Internal error")
                )
                continue
            results.append(
                BatchItemSuccess(
                    index=index,
                    report_type=request.report_type,
                    filename=report.filename,
                    size=report.size,
                    template_name=report.template_name,
                )
            )

        result = BatchResult(batch_id=batch_id, results=results, errors=errors)
        log_event(
            logger,
            logging.INFO,
            "batch_completed",
            batch_id=batch_id,
            successful=result.successful,
            failed=result.failed,
        )
        return result

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def available_report_types(self) -> list[str]:
        """Registered report types followed by any other type that has templates."""
        return list(dict.fromkeys([*self._report_types.names(), *self._templates.report_types()]))

    def report_status(self, report_type: str) -> ReportStatus:
        # Templates are stored under the lower-cased report type.
        templates = self._templates.list_by_report_type((report_type or "").strip().lower())
        template: TemplateRecord | None = templates[0] if templates else None
        return ReportStatus(
            report_type=report_type,
            template_available=template is not None,
            database_connected=self._row_source.ping(),
            template_file=template.file_name if template else None,
            template_uploaded_at=template.upload_date if template else None,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _checked_report_type(self, report_type: str | None, filters: FilterSet) -> ReportType:
        if not report_type or not report_type.strip():
            raise ReportValidationError(["Report type is required"])
        definition = self._report_types.get(report_type)
        filter_errors = filters.validation_errors()
        if filter_errors:
            raise ReportValidationError(filter_errors, report_type=definition.name)
        return definition

    def _fetch_and_transform(self, definition: ReportType, filters: FilterSet) -> list[dict[str, Any]]:
        predicate = definition.source.predicate(filters)
        query = predicate.apply(definition.source.base_query)
        try:
            rows = self._row_source.fetch(query, predicate.params)
        except RowSourceError as exc:
            raise DataFetchError(f"Failed to fetch {definition.name} data: {exc}", report_type=definition.name) from exc
        log_event(logger, logging.INFO, "data_fetched", report_type=definition.name, record_count=len(rows))
        return definition.module.transform(rows)


def _build_filename(report_type: str, template_name: str | None, generated_at: datetime) -> str:
    stamp = generated_at.date().isoformat()
    if template_name:
        return f"{template_name}_{stamp}.pdf"
    return f"{report_type}_report_{stamp}.pdf"
