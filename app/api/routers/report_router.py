"""
app/api/routers/report_router.py

Report generation HTTP endpoints.

    GET  /generate                          PDF download
    GET  /generate/available-types          report types that can be requested
    GET  /generate/preview/{report_type}    data + summary, no rendering
    GET  /generate/status/{report_type}     template / database readiness
    POST /generate/batch                    up to 5 reports, partial failures allowed

Filters arrive as query parameters: ``fromDate``, ``toDate``, ``type`` and
any other key, which is passed through to the template context.
"""

from __future__ import annotations

import re
import unicodedata
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from app.api.dependencies import get_report_orchestrator
from app.api.errors import to_http_exception
from app.schemas.reports import (
    AvailableReportTypesResponse,
    BatchItemErrorResponse,
    BatchItemSuccessResponse,
    BatchReportRequest,
    BatchReportResponse,
    ReportPreviewResponse,
    ReportReadiness,
    ReportStatusResponse,
    StatusTemplateInfo,
)
from app.services.report_orchestrator import ReportOrchestrator, ReportRequest
from reports.errors import ReportError
from reports.filters import FilterSet

router = APIRouter(prefix="/generate", tags=["reports"])

_CONTROL_PARAMS = frozenset({"report", "templateName"})
_UNSAFE_FILENAME_CHARS = re.compile(r'["\\/\x00-\x1f\x7f]')


def _filters_from_query(request: Request) -> FilterSet:
    return FilterSet.from_mapping(
        {key: value for key, value in request.query_params.items() if key not in _CONTROL_PARAMS}
    )


def _content_disposition(filename: str) -> str:
    """
    Attachment header carrying an ASCII fallback name plus the UTF-8
    ``filename*`` form for names outside latin-1.
    """
    fallback = unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    fallback = _UNSAFE_FILENAME_CHARS.sub("_", fallback)
    if not fallback.removesuffix(".pdf").strip("_ "):
        fallback = "report.pdf"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _validation_failure(errors: list[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Validation failed", "details": errors},
    )


@router.get(
    "",
    response_class=Response,
    responses={200: {"content": {"application/pdf": {}}, "description": "The generated report."}},
)
def generate_report(
    request: Request,
    report: str | None = Query(default=None, description="Report type, e.g. sales"),
    template_name: str | None = Query(default=None, alias="templateName"),
    orchestrator: ReportOrchestrator = Depends(get_report_orchestrator),
) -> Response:
    """
    Generate one report and return it as a PDF attachment.
    """

    if not report:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Report type is required. Use ?report=sales"},
        )

    filters = _filters_from_query(request)
    errors = orchestrator.validate_request(report, filters)
    if errors:
        raise _validation_failure(errors)

    try:
        result = orchestrator.generate_report(report, filters, template_name)
    except ReportError as exc:
        raise to_http_exception(exc, operation="Report generation") from exc

    return Response(
        content=result.content,
        media_type=result.content_type,
        headers={"Content-Disposition": _content_disposition(result.filename)},
    )


@router.get("/available-types", response_model=AvailableReportTypesResponse)
def available_report_types(
    orchestrator: ReportOrchestrator = Depends(get_report_orchestrator),
) -> AvailableReportTypesResponse:
    report_types = orchestrator.available_report_types()
    return AvailableReportTypesResponse(
        available_report_types=report_types,
        message=(
            "Report types available"
            if report_types
            else "No report types available. Please upload templates first."
        ),
    )


@router.get("/preview/{report_type}", response_model=ReportPreviewResponse)
def preview_report(
    report_type: str,
    request: Request,
    orchestrator: ReportOrchestrator = Depends(get_report_orchestrator),
) -> ReportPreviewResponse:
    """
    Return the data count, summary and first rows of a report without rendering it.
    """

    filters = _filters_from_query(request)
    errors = orchestrator.validate_request(report_type, filters)
    if errors:
        raise _validation_failure(errors)

    try:
        preview = orchestrator.preview(report_type, filters)
    except ReportError as exc:
        raise to_http_exception(exc, operation="Report preview") from exc

    return ReportPreviewResponse(
        report_type=preview.report_type,
        filters=preview.filters,
        data_count=preview.data_count,
        summary=preview.summary,
        sample_data=preview.sample_data,
    )


@router.get("/status/{report_type}", response_model=ReportStatusResponse)
def report_status(
    report_type: str,
    orchestrator: ReportOrchestrator = Depends(get_report_orchestrator),
) -> ReportStatusResponse:
    readiness = orchestrator.report_status(report_type)
    template_info = None
    if readiness.template_file is not None and readiness.template_uploaded_at is not None:
        template_info = StatusTemplateInfo(
            filename=readiness.template_file,
            upload_date=readiness.template_uploaded_at,
        )

    return ReportStatusResponse(
        report_type=report_type,
        status=ReportReadiness(
            template="available" if readiness.template_available else "missing",
            database="connected" if readiness.database_connected else "disconnected",
            can_generate=readiness.can_generate,
        ),
        template=template_info,
        message="Report generation is ready" if readiness.can_generate else "Report generation is not ready",
    )


@router.post("/batch", response_model=BatchReportResponse)
def batch_generate(
    payload: BatchReportRequest,
    orchestrator: ReportOrchestrator = Depends(get_report_orchestrator),
) -> BatchReportResponse:
    """
    Generate several reports; one failing report does not abort the others.
    """

    requests = [
        ReportRequest(
            report_type=(item.report or "").strip(),
            filters=FilterSet.from_mapping(item.filters),
            template_name=item.template_name,
        )
        for item in payload.reports
    ]

    try:
        result = orchestrator.batch_generate(requests)
    except ReportError as exc:
        raise to_http_exception(exc, operation="Batch generation") from exc

    return BatchReportResponse(
        batch_id=result.batch_id,
        total=result.total,
        successful=result.successful,
        failed=result.failed,
        results=[
            BatchItemSuccessResponse(
                index=item.index,
                report=item.report_type,
                filename=item.filename,
                size=item.size,
                template_name=item.template_name,
            )
            for item in result.results
        ],
        errors=[
            BatchItemErrorResponse(
                index=item.index,
                report=item.report_type,
                error=item.error,
                details=item.details,
            )
            for item in result.errors
        ],
        message=result.message,
    )
