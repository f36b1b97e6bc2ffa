"""
db/base.py

Declarative base and shared columns for the report source tables.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Project-wide declarative base.

    Monetary columns annotated as ``Decimal`` map to NUMERIC(14, 2).
    """

    type_annotation_map: dict[type, Any] = {Decimal: Numeric(14, 2)}


class ReportSourceMixin:
    """
    Surrogate key plus the created_date / updated_date audit columns that
    every report source table carries.

    Report modules render the audit dates with the display date format.
    """

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    created_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=lambda: datetime.now(timezone.utc),
    )
