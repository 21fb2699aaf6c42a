"""create billing tables

Revision ID: 3f1a6c2b9d40
Revises:
Create Date: 2026-10-19 10:12:31.508214

"""
from __future__ import annotations

import uuid

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision = "3f1a6c2b9d40"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP")),
    ]


def upgrade() -> None:
    op.create_table(
        "bills",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, default=uuid.uuid4),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64)),
        sa.Column("type", sa.String(20), nullable=False, server_default="Purchase"),
        sa.Column("vendor_name", sa.String(255), nullable=False),
        sa.Column("gstin", sa.String(20)),
        sa.Column("address", sa.Text()),
        sa.Column("bill_number", sa.String(100), nullable=False),
        sa.Column("date", sa.Date()),
        sa.Column("gst_type", sa.String(20), server_default="Intra-State"),
        sa.Column("status", sa.String(20), server_default="Pending"),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("duties_and_taxes", sa.JSON()),
        sa.Column("total_without_gst", sa.Numeric(14, 2), server_default="0"),
        sa.Column("total_cgst", sa.Numeric(14, 2), server_default="0"),
        sa.Column("total_sgst", sa.Numeric(14, 2), server_default="0"),
        sa.Column("total_igst", sa.Numeric(14, 2), server_default="0"),
        sa.Column("total_gst", sa.Numeric(14, 2), server_default="0"),
        sa.Column("commission_rate", sa.Numeric(7, 2), server_default="0"),
        sa.Column("commission_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("labor_charges", sa.Numeric(14, 2), server_default="0"),
        sa.Column("market_fee", sa.Numeric(14, 2), server_default="0"),
        sa.Column("round_off", sa.Numeric(8, 2), server_default="0"),
        sa.Column("grand_total", sa.Numeric(14, 2), server_default="0"),
        *_audit_columns(),
    )
    op.create_index("ix_bills_company_id", "bills", ["company_id"])
    op.create_index("ix_bills_type", "bills", ["type"])

    op.create_table(
        "duties_taxes",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, default=uuid.uuid4),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64)),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="Charge"),
        sa.Column("calc_method", sa.String(20), nullable=False, server_default="Percentage"),
        sa.Column("rate", sa.Numeric(7, 2), server_default="0"),
        sa.Column("fixed_amount", sa.Numeric(14, 2), server_default="0"),
        sa.Column("apply_on", sa.String(20), nullable=False, server_default="Subtotal"),
        *_audit_columns(),
    )
    op.create_index("ix_duties_taxes_company_id", "duties_taxes", ["company_id"])

    op.create_table(
        "vendors",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, default=uuid.uuid4),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("gstin", sa.String(20)),
        sa.Column("address", sa.Text()),
        *_audit_columns(),
    )
    op.create_index("ix_vendors_company_id", "vendors", ["company_id"])

    op.create_table(
        "stock_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, default=uuid.uuid4),
        sa.Column("company_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku", sa.String(100)),
        sa.Column("hsn", sa.String(20)),
        sa.Column("unit", sa.String(20), server_default="PCS"),
        sa.Column("rate", sa.Numeric(14, 2), server_default="0"),
        sa.Column("tax_rate", sa.Numeric(5, 2), server_default="18"),
        sa.Column("in_stock", sa.Numeric(14, 3), server_default="0"),
        *_audit_columns(),
    )
    op.create_index("ix_stock_items_company_id", "stock_items", ["company_id"])


def downgrade() -> None:
    for table in ("stock_items", "vendors", "duties_taxes", "bills"):
        op.drop_index(f"ix_{table}_company_id", table_name=table)
    op.drop_index("ix_bills_type", table_name="bills")
    op.drop_table("stock_items")
    op.drop_table("vendors")
    op.drop_table("duties_taxes")
    op.drop_table("bills")
