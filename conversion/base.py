"""
Converter interface consumed by the report orchestrator.
"""

from __future__ import annotations

from typing import Protocol

PDF_CONTENT_TYPE = "application/pdf"


class DocumentConverter(Protocol):
    """
    Turns a populated document into PDF bytes.

    Implementations raise ``reports.errors.ConversionError`` for every failure.
    """

    def convert(self, document: bytes, *, source_suffix: str = ".docx") -> bytes:
        ...

    def is_available(self) -> bool:
        ...
