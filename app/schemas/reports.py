"""
app/schemas/reports.py

Request and response schemas for report generation endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """
    Base model accepting either the Python name or the wire alias.
    """

    model_config = ConfigDict(populate_by_name=True)


class BatchReportItem(ApiModel):
    """
    One entry of a batch request.
    """

    report: str | None = None
    template_name: str | None = Field(default=None, alias="templateName")
    filters: dict[str, Any] = Field(default_factory=dict)


class BatchReportRequest(ApiModel):
    reports: list[BatchReportItem] = Field(default_factory=list)


class AvailableReportTypesResponse(ApiModel):
    available_report_types: list[str] = Field(alias="availableReportTypes")
    message: str


class ReportPreviewResponse(ApiModel):
    report_type: str = Field(alias="reportType")
    filters: dict[str, Any] = Field(default_factory=dict)
    data_count: int = Field(alias="dataCount", ge=0)
    summary: dict[str, Any] = Field(default_factory=dict)
    sample_data: list[dict[str, Any]] = Field(default_factory=list, alias="sampleData")
    message: str = "Data preview generated successfully"


class ReportReadiness(ApiModel):
    template: Literal["available", "missing"]
    database: Literal["connected", "disconnected"]
    can_generate: bool = Field(alias="canGenerate")


class StatusTemplateInfo(ApiModel):
    filename: str
    upload_date: datetime = Field(alias="uploadDate")


class ReportStatusResponse(ApiModel):
    report_type: str = Field(alias="reportType")
    status: ReportReadiness
    template: StatusTemplateInfo | None = None
    message: str


class BatchItemSuccessResponse(ApiModel):
    index: int = Field(..., ge=0)
    report: str
    filename: str
    size: int = Field(..., ge=0)
    template_name: str = Field(alias="templateName")
    status: Literal["success"] = "success"


class BatchItemErrorResponse(ApiModel):
    index: int = Field(..., ge=0)
    report: str
    error: str
    details: list[str] = Field(default_factory=list)


class BatchReportResponse(ApiModel):
    """
    API response model for a batch run; ``results`` and ``errors`` follow input order.
    """

    batch_id: str = Field(alias="batchId")
    total: int = Field(..., ge=0)
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)
    results: list[BatchItemSuccessResponse] = Field(default_factory=list)
    errors: list[BatchItemErrorResponse] = Field(default_factory=list)
    message: str
