"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.customer import CustomerRecord
from db.models.inventory import InventoryItem
from db.models.sales import SaleRecord

__all__ = [
    "CustomerRecord",
    "InventoryItem",
    "SaleRecord",
]
