"""
app/schemas package marker.
"""

from app.schemas.reports import (
    AvailableReportTypesResponse,
    BatchReportRequest,
    BatchReportResponse,
    ReportPreviewResponse,
    ReportStatusResponse,
)
from app.schemas.templates import (
    TemplateDeleteResponse,
    TemplateDetailResponse,
    TemplateListResponse,
    TemplateResponse,
    TemplatesByReportTypeResponse,
    TemplateUploadResponse,
)

__all__ = [
    "AvailableReportTypesResponse",
    "BatchReportRequest",
    "BatchReportResponse",
    "ReportPreviewResponse",
    "ReportStatusResponse",
    "TemplateDeleteResponse",
    "TemplateDetailResponse",
    "TemplateListResponse",
    "TemplateResponse",
    "TemplatesByReportTypeResponse",
    "TemplateUploadResponse",
]
