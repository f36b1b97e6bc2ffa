"""
db/models/customer.py

Customer accounts with purchase history rollups.  Backs the ``customers``
report type.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportSourceMixin


class CustomerRecord(Base, ReportSourceMixin):
    """
    One customer and their lifetime purchase totals.
    """

    __tablename__ = "customer_data"

    customer_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    customer_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Account type, e.g. individual, business",
    )

    registration_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    last_purchase_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    total_purchases: Mapped[Decimal | None] = mapped_column(nullable=True)

    lifetime_value: Mapped[Decimal | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("ix_customer_data_registration_date", "registration_date"),
        Index("ix_customer_data_customer_type", "customer_type"),
    )

    def __repr__(self) -> str:
        return f"<CustomerRecord id={self.id} customer_id={self.customer_id!r}>"
