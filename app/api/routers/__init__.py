"""
app/api/routers package marker.
"""

from app.api.routers.report_router import router as report_router
from app.api.routers.template_router import router as template_router

__all__ = [
    "report_router",
    "template_router",
]
