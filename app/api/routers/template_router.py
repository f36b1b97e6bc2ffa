"""
app/api/routers/template_router.py

Template upload and management HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, UploadFile, status

from app.api.dependencies import get_docx_upload, get_template_registry, read_upload_limited
from app.api.errors import to_http_exception
from app.schemas.templates import (
    TemplateDeleteResponse,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateResponse,
    TemplatesByReportTypeResponse,
    TemplateUploadResponse,
)
from reports.errors import ReportError
from reports.registry import is_valid_report_type_name
from templating.registry import TemplateRegistry

router = APIRouter(prefix="/upload-template", tags=["templates"])


@router.post("", response_model=TemplateUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_template(
    template: UploadFile = Depends(get_docx_upload),
    report_type: str | None = Form(default=None, alias="reportType"),
    template_name: str | None = Form(default=None, alias="templateName"),
    registry: TemplateRegistry = Depends(get_template_registry),
) -> TemplateUploadResponse:
    """
    Store one .docx template for a report type.
    """

    try:
        normalized_type = (report_type or "").strip().lower()
        if not normalized_type:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Report type is required"},
            )
        if not is_valid_report_type_name(normalized_type):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Invalid report type format"},
            )

        content = read_upload_limited(template)
        record = registry.save(
            content=content,
            report_type=normalized_type,
            original_name=template.filename or "template.docx",
            template_name=template_name,
        )
    except ReportError as exc:
        raise to_http_exception(exc, operation="Template upload") from exc
    finally:
        template.file.close()

    return TemplateUploadResponse(template=TemplateResponse.from_record(record))


@router.get("", response_model=TemplateListResponse)
def list_templates(registry: TemplateRegistry = Depends(get_template_registry)) -> TemplateListResponse:
    return TemplateListResponse(templates=[TemplateResponse.from_record(record) for record in registry.list_all()])


@router.get("/report-type/{report_type}", response_model=TemplatesByReportTypeResponse)
def templates_by_report_type(
    report_type: str,
    registry: TemplateRegistry = Depends(get_template_registry),
) -> TemplatesByReportTypeResponse:
    records = registry.list_by_report_type(report_type)
    return TemplatesByReportTypeResponse(
        report_type=report_type,
        template_names=[record.template_name for record in records],
        templates=[TemplateResponse.from_record(record) for record in records],
    )


@router.get("/{template_id}", response_model=TemplateDetailResponse)
def get_template(
    template_id: str,
    registry: TemplateRegistry = Depends(get_template_registry),
) -> TemplateDetailResponse:
    try:
        record = registry.get(template_id)
    except ReportError as exc:
        raise to_http_exception(exc, operation="Template lookup") from exc
    return TemplateDetailResponse(template=TemplateResponse.from_record(record))


@router.delete("/{template_id}", response_model=TemplateDeleteResponse)
def delete_template(
    template_id: str,
    registry: TemplateRegistry = Depends(get_template_registry),
) -> TemplateDeleteResponse:
    """
    Remove a template's file and its registry entry.
    """

    try:
        record = registry.delete(template_id)
    except ReportError as exc:
        raise to_http_exception(exc, operation="Template deletion") from exc
    return TemplateDeleteResponse(id=record.id)
