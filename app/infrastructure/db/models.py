import uuid

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import UUID

from app.infrastructure.db.base import Base


class Bill(Base):
    """Sales invoices and purchase bills, told apart by ``type``."""
    __tablename__ = "bills"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64))
    type = Column(String(20), nullable=False, default="Purchase", index=True)  # Sale | Purchase

    vendor_name = Column(String(255), nullable=False)
    gstin = Column(String(20))
    address = Column(Text)
    bill_number = Column(String(100), nullable=False)
    date = Column(Date)
    gst_type = Column(String(20), default="Intra-State")
    status = Column(String(20), default="Pending")

    items = Column(JSON, nullable=False, default=list)
    duties_and_taxes = Column(JSON, default=list)

    total_without_gst = Column(Numeric(14, 2), default=0)
    total_cgst = Column(Numeric(14, 2), default=0)
    total_sgst = Column(Numeric(14, 2), default=0)
    total_igst = Column(Numeric(14, 2), default=0)
    total_gst = Column(Numeric(14, 2), default=0)
    commission_rate = Column(Numeric(7, 2), default=0)
    commission_amount = Column(Numeric(14, 2), default=0)
    labor_charges = Column(Numeric(14, 2), default=0)
    market_fee = Column(Numeric(14, 2), default=0)
    round_off = Column(Numeric(8, 2), default=0)
    grand_total = Column(Numeric(14, 2), default=0)

    is_deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class DutyTax(Base):
    """Master duties & taxes ledger, cloned into new sales invoices."""
    __tablename__ = "duties_taxes"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64))
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False, default="Charge")  # Charge | Deduction
    calc_method = Column(String(20), nullable=False, default="Percentage")
    rate = Column(Numeric(7, 2), default=0)
    fixed_amount = Column(Numeric(14, 2), default=0)
    apply_on = Column(String(20), nullable=False, default="Subtotal")
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Vendor(Base):
    """Party directory shared by purchase bills (vendors) and sales (customers)."""
    __tablename__ = "vendors"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    gstin = Column(String(20))
    address = Column(Text)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class StockItem(Base):
    __tablename__ = "stock_items"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100))
    hsn = Column(String(20))
    unit = Column(String(20), default="PCS")
    rate = Column(Numeric(14, 2), default=0)
    tax_rate = Column(Numeric(5, 2), default=18)
    in_stock = Column(Numeric(14, 3), default=0)
    is_deleted = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
