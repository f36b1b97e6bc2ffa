"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service lookup.
"""

from __future__ import annotations

from fastapi import File, HTTPException, Request, UploadFile, status

from app.config import get_report_settings
from app.services.report_orchestrator import ReportOrchestrator
from templating.registry import TemplateRegistry
from templating.renderer import DOCX_CONTENT_TYPE

DOCX_CONTENT_TYPES = {DOCX_CONTENT_TYPE}


def get_docx_upload(template: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Validate that the uploaded template is a .docx by extension or MIME type.
    """

    if template is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "No template file provided"},
        )

    filename = (template.filename or "").strip().lower()
    content_type = (template.content_type or "").strip().lower()

    is_docx_filename = filename.endswith(".docx")
    is_docx_content_type = content_type in DOCX_CONTENT_TYPES

    if not is_docx_filename and not is_docx_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Only .docx files are allowed"},
        )

    return template


def read_upload_limited(upload: UploadFile, *, max_bytes: int | None = None) -> bytes:
    """
    Read an upload fully, rejecting empty payloads and payloads over *max_bytes*.
    """

    limit = max_bytes if max_bytes is not None else get_report_settings().template_max_bytes
    content = upload.file.read(limit + 1)
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Template file is empty"},
        )
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": f"Template file exceeds the {limit}-byte limit"},
        )
    return content


def get_report_orchestrator(request: Request) -> ReportOrchestrator:
    """
    Return the orchestrator built during application startup.
    """

    return request.app.state.report_orchestrator


def get_template_registry(request: Request) -> TemplateRegistry:
    """
    Return the template registry built during application startup.
    """

    return request.app.state.template_registry
