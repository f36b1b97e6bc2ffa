"""create report source tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_date", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "sales_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sale_date", sa.Date(), nullable=False),
        sa.Column("sale_type", sa.String(length=50), nullable=True),
        sa.Column("product_name", sa.String(length=255), nullable=True),
        sa.Column("customer_id", sa.String(length=64), nullable=True),
        sa.Column("region", sa.String(length=100), nullable=True),
        sa.Column("amount", sa.Numeric(14, 2), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sales_data_sale_date", "sales_data", ["sale_date"], unique=False)
    op.create_index("ix_sales_data_sale_type", "sales_data", ["sale_type"], unique=False)

    op.create_table(
        "inventory_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("sku", sa.String(length=64), nullable=False),
        sa.Column("product_name", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reorder_level", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=True),
        sa.Column("last_restock_date", sa.Date(), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sku", name="uq_inventory_data_sku"),
    )
    op.create_index("ix_inventory_data_category", "inventory_data", ["category"], unique=False)
    op.create_index("ix_inventory_data_last_restock_date", "inventory_data", ["last_restock_date"], unique=False)

    op.create_table(
        "customer_data",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("customer_id", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("customer_type", sa.String(length=50), nullable=True),
        sa.Column("registration_date", sa.Date(), nullable=True),
        sa.Column("last_purchase_date", sa.Date(), nullable=True),
        sa.Column("total_purchases", sa.Numeric(14, 2), nullable=True),
        sa.Column("lifetime_value", sa.Numeric(14, 2), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("customer_id", name="uq_customer_data_customer_id"),
    )
    op.create_index("ix_customer_data_registration_date", "customer_data", ["registration_date"], unique=False)
    op.create_index("ix_customer_data_customer_type", "customer_data", ["customer_type"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_customer_data_customer_type", table_name="customer_data")
    op.drop_index("ix_customer_data_registration_date", table_name="customer_data")
    op.drop_table("customer_data")

    op.drop_index("ix_inventory_data_last_restock_date", table_name="inventory_data")
    op.drop_index("ix_inventory_data_category", table_name="inventory_data")
    op.drop_table("inventory_data")

    op.drop_index("ix_sales_data_sale_type", table_name="sales_data")
    op.drop_index("ix_sales_data_sale_date", table_name="sales_data")
    op.drop_table("sales_data")
