"""
app/schemas/templates.py

Response schemas for template management endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.reports import ApiModel
from templating.types import TemplateRecord


class TemplateResponse(ApiModel):
    """
    API response model for one uploaded template.
    """

    id: str
    filename: str
    report_type: str = Field(alias="reportType")
    template_name: str = Field(alias="templateName")
    original_name: str = Field(alias="originalName")
    upload_date: datetime = Field(alias="uploadDate")
    size: int = Field(..., ge=0)

    @classmethod
    def from_record(cls, record: TemplateRecord) -> "TemplateResponse":
        return cls(
            id=record.id,
            filename=record.file_name,
            report_type=record.report_type,
            template_name=record.template_name,
            original_name=record.original_name,
            upload_date=record.upload_date,
            size=record.size,
        )


class TemplateUploadResponse(ApiModel):
    message: str = "Template uploaded successfully"
    template: TemplateResponse


class TemplateListResponse(ApiModel):
    templates: list[TemplateResponse] = Field(default_factory=list)


class TemplateDetailResponse(ApiModel):
    template: TemplateResponse


class TemplatesByReportTypeResponse(ApiModel):
    report_type: str = Field(alias="reportType")
    template_names: list[str] = Field(default_factory=list, alias="templateNames")
    templates: list[TemplateResponse] = Field(default_factory=list)


class TemplateDeleteResponse(ApiModel):
    message: str = "Template deleted successfully"
    id: str
