"""
db/models/sales.py

Sales line items.  Backs the ``sales`` and ``orders`` report types.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportSourceMixin


class SaleRecord(Base, ReportSourceMixin):
    """
    One sale: what was sold, when, to whom, and for how much.

    ``amount`` is the unit sale amount; reports derive ``total`` as
    ``amount * quantity``.
    """

    __tablename__ = "sales_data"

    sale_date: Mapped[date] = mapped_column(Date, nullable=False)

    sale_type: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Channel or order type, e.g. online, retail, wholesale",
    )

    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)

    region: Mapped[str | None] = mapped_column(String(100), nullable=True)

    amount: Mapped[Decimal | None] = mapped_column(nullable=True)

    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)

    price: Mapped[Decimal | None] = mapped_column(nullable=True)

    __table_args__ = (
        Index("ix_sales_data_sale_date", "sale_date"),
        Index("ix_sales_data_sale_type", "sale_type"),
    )

    def __repr__(self) -> str:
        return f"<SaleRecord id={self.id} sale_date={self.sale_date} amount={self.amount}>"
