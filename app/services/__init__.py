"""
app/services package marker.
"""

from app.services.report_orchestrator import (
    BatchResult,
    ReportOrchestrator,
    ReportRequest,
    ReportResult,
)

__all__ = [
    "BatchResult",
    "ReportOrchestrator",
    "ReportRequest",
    "ReportResult",
]
