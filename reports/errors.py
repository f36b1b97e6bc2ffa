"""
reports/errors.py

Exception taxonomy for the report generation pipeline.

Every pipeline stage raises one of these types.  The HTTP layer maps them to
status codes; the batch runner captures them per item.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class ReportError(Exception):
    """Base exception for report pipeline failures."""

    def __init__(self, message: str, *, report_type: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.report_type = report_type

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": type(self).__name__, "message": self.message}
        if self.report_type is not None:
            payload["report_type"] = self.report_type
        return payload


class ReportValidationError(ReportError, ValueError):
    """
    Raised when a report request breaks one or more user-correctable rules.

    ``errors`` holds one human-readable entry per violated rule.
    """

    def __init__(
        self,
        errors: Sequence[str],
        *,
        message: str = "Validation failed",
        report_type: str | None = None,
    ) -> None:
        super().__init__(message, report_type=report_type)
        self.errors = list(errors)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["details"] = list(self.errors)
        return payload


class ReportNotFoundError(ReportError):
    """Base exception for lookups that matched nothing."""


class UnsupportedReportTypeError(ReportNotFoundError):
    """Raised when no domain module is registered for a report type."""


class TemplateNotFoundError(ReportNotFoundError):
    """Raised when a template id, report type or template name has no match."""


class DataFetchError(ReportError):
    """Raised when the row source cannot return rows for a report."""


class TemplateRenderError(ReportError):
    """Raised when a template cannot be populated with the report context."""

    def __init__(
        self,
        message: str,
        *,
        report_type: str | None = None,
        missing_fields: Sequence[str] = (),
    ) -> None:
        super().__init__(message, report_type=report_type)
        self.missing_fields = list(missing_fields)

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.missing_fields:
            payload["missing_fields"] = list(self.missing_fields)
        return payload


class ConversionError(ReportError):
    """
    Raised for every document-to-PDF failure.

    The underlying process or I/O error is attached as ``__cause__``.
    """
