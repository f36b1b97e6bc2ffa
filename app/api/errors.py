"""
app/api/errors.py

Translation of report pipeline errors into HTTP responses.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from reports.errors import (
    ReportError,
    ReportValidationError,
    TemplateNotFoundError,
    UnsupportedReportTypeError,
)

logger = logging.getLogger(__name__)


def status_code_for(exc: ReportError) -> int:
    if isinstance(exc, (ReportValidationError, UnsupportedReportTypeError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, TemplateNotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: ReportError, *, operation: str) -> HTTPException:
    """
    Map *exc* to an HTTPException whose detail is the error's structured body.

    Server-side failures are logged with their traceback.
    """

    code = status_code_for(exc)
    if code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.exception("%s failed for report type %s", operation, exc.report_type)
    return HTTPException(status_code=code, detail=exc.to_dict())
