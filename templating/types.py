"""
Typed DTOs shared by template storage, registry and rendering.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class StoredTemplateFile:
    """
    Metadata produced by the storage backend after saving a template file.
    """

    file_name: str
    storage_path: str
    file_size_bytes: int
    checksum: str
    stored_at: datetime


@dataclass(frozen=True)
class TemplateRecord:
    """
    One uploaded report template.

    ``storage_path`` is relative to the template storage root.
    """

    id: str
    report_type: str
    template_name: str
    file_name: str
    storage_path: str
    original_name: str
    size: int
    upload_date: datetime
    checksum: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "report_type": self.report_type,
            "template_name": self.template_name,
            "file_name": self.file_name,
            "storage_path": self.storage_path,
            "original_name": self.original_name,
            "size": self.size,
            "upload_date": self.upload_date.isoformat(),
            "checksum": self.checksum,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TemplateRecord":
        return cls(
            id=str(payload["id"]),
            report_type=str(payload["report_type"]),
            template_name=str(payload["template_name"]),
            file_name=str(payload["file_name"]),
            storage_path=str(payload["storage_path"]),
            original_name=str(payload["original_name"]),
            size=int(payload["size"]),
            upload_date=datetime.fromisoformat(str(payload["upload_date"])),
            checksum=payload.get("checksum"),
        )


@dataclass(frozen=True)
class RenderContext:
    """
    Everything a template can reference while being populated.
    """

    report_type: str
    template_name: str
    generated_at: datetime
    filters: Mapping[str, Any] = field(default_factory=dict)
    data: Sequence[Mapping[str, Any]] = ()
    summary: Mapping[str, Any] = field(default_factory=dict)

    def to_template_data(self) -> dict[str, Any]:
        """Merge-field names exposed to template authors."""
        return {
            "reportType": self.report_type.upper(),
            "templateName": self.template_name,
            "generatedDate": self.generated_at.isoformat(),
            "filters": dict(self.filters),
            "data": [dict(row) for row in self.data],
            "summary": dict(self.summary),
        }
