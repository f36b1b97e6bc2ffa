"""
db/models/inventory.py

Stock levels per item.  Backs the ``inventory`` report type.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, ReportSourceMixin


class InventoryItem(Base, ReportSourceMixin):
    """
    Current on-hand quantity for one stock-keeping unit.
    """

    __tablename__ = "inventory_data"

    sku: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    product_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    category: Mapped[str | None] = mapped_column(String(100), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    reorder_level: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="Quantity at or below which the item counts as low stock",
    )

    price: Mapped[Decimal | None] = mapped_column(nullable=True)

    last_restock_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        Index("ix_inventory_data_category", "category"),
        Index("ix_inventory_data_last_restock_date", "last_restock_date"),
    )

    def __repr__(self) -> str:
        return f"<InventoryItem id={self.id} sku={self.sku!r} quantity={self.quantity}>"
