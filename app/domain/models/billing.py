# app/domain/models/billing.py
"""
Domain models for purchase bills and sales invoices.

Both document kinds share one shape (header, line items, GST aggregates) and
are told apart by ``doc_type``:

  - ``PurchaseBill``  ("Purchase") carries the fixed commission / labour /
    market-fee charges.
  - ``SalesInvoice``  ("Sale") carries a user-defined duties & taxes ledger and
    allows the CGST/SGST/IGST totals to be overridden by hand.

Numeric fields accept raw form input: anything that does not parse as a
finite number is stored as 0.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, BeforeValidator, Field, TypeAdapter

ZERO = Decimal("0")
HUNDRED = Decimal("100")

DEFAULT_UNIT = "PCS"


def to_decimal(value: Any) -> Decimal:
    """Coerce form input to a finite Decimal, falling back to 0."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return ZERO
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return ZERO
    return result if result.is_finite() else ZERO


def to_text(value: Any) -> str:
    return "" if value is None else str(value)


def _to_date(value: Any) -> dt.date:
    if value is None or value == "":
        return dt.date.today()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    return dt.date.fromisoformat(str(value)[:10])


Amount = Annotated[Decimal, BeforeValidator(to_decimal)]
Text = Annotated[str, BeforeValidator(to_text)]
IsoDate = Annotated[dt.date, BeforeValidator(_to_date)]


def new_id() -> str:
    return uuid4().hex


# ---------------------------------------------------------------------------
# Enumerations (values match the stored strings)
# ---------------------------------------------------------------------------

class _LenientEnum(str, Enum):
    """Unknown values resolve to the member the billing forms fall back to."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return cls._fallback()

    @classmethod
    def _fallback(cls):
        return next(iter(cls))


class TransactionType(_LenientEnum):
    INTRA_STATE = "Intra-State"
    INTER_STATE = "Inter-State"


class AdjustmentKind(_LenientEnum):
    CHARGE = "Charge"
    DEDUCTION = "Deduction"


class CalcMethod(_LenientEnum):
    PERCENTAGE = "Percentage"
    FIXED = "Fixed"
    HYBRID = "Hybrid"

    @classmethod
    def _fallback(cls):
        return cls.HYBRID


class ApplyBase(_LenientEnum):
    SUBTOTAL = "Subtotal"
    RUNNING_TOTAL = "Running Total"

    @classmethod
    def _fallback(cls):
        return cls.RUNNING_TOTAL


# ---------------------------------------------------------------------------
# Line items and adjustments
# ---------------------------------------------------------------------------

class LineItem(BaseModel):
    """One row of a bill or invoice. Derived amounts are engine-owned."""

    id: str = Field(default_factory=new_id)
    name: Text = ""
    code: Text = ""  # HSN / SAC
    quantity: Amount = Decimal("1")
    unit_label: Text = DEFAULT_UNIT
    unit_rate: Amount = ZERO
    tax_rate_percent: Amount = ZERO

    taxable_amount: Amount = ZERO
    tax_amount: Amount = ZERO
    line_total: Amount = ZERO


EDITABLE_ITEM_FIELDS = frozenset(
    {"name", "code", "quantity", "unit_label", "unit_rate", "tax_rate_percent"}
)


class AdjustmentLedgerEntry(BaseModel):
    """A duty, tax or charge applied on top of the item subtotal."""

    id: str = Field(default_factory=new_id)
    name: Text = ""
    kind: AdjustmentKind = AdjustmentKind.CHARGE
    method: CalcMethod = CalcMethod.PERCENTAGE
    rate: Amount = ZERO
    fixed_amount: Amount = ZERO
    apply_base: ApplyBase = ApplyBase.SUBTOTAL

    # Signed contribution to the grand total, set by the engine
    amount: Amount = ZERO


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------

class DocumentBase(BaseModel):
    id: str | None = None
    party_name: Text = ""
    tax_id: Text = ""  # GSTIN
    address: Text = ""
    document_number: Text = ""
    date: IsoDate = Field(default_factory=dt.date.today)
    display_date: Text = ""
    transaction_type: TransactionType = TransactionType.INTRA_STATE
    status: Text = "Pending"

    items: list[LineItem] = Field(default_factory=list)

    taxable_total: Amount = ZERO
    cgst_total: Amount = ZERO
    sgst_total: Amount = ZERO
    igst_total: Amount = ZERO
    tax_total: Amount = ZERO
    pre_round_total: Amount = ZERO
    round_off: Amount = ZERO
    grand_total: Amount = ZERO


class PurchaseBill(DocumentBase):
    doc_type: Literal["Purchase"] = "Purchase"

    commission_rate: Amount = ZERO
    commission_amount: Amount = ZERO
    labor_charges: Amount = ZERO
    market_fee: Amount = ZERO


class SalesInvoice(DocumentBase):
    doc_type: Literal["Sale"] = "Sale"

    adjustments: list[AdjustmentLedgerEntry] = Field(default_factory=list)
    # When set, the next recalculation re-derives CGST/SGST/IGST from the
    # items; otherwise the held (possibly hand-typed) totals are kept.
    reset_taxes: bool = True


Document = Annotated[Union[PurchaseBill, SalesInvoice], Field(discriminator="doc_type")]

document_adapter: TypeAdapter[PurchaseBill | SalesInvoice] = TypeAdapter(Document)


# ---------------------------------------------------------------------------
# Catalog records (read-only lookups)
# ---------------------------------------------------------------------------

class CatalogItem(BaseModel):
    name: Text
    code: Text = ""
    unit_rate: Amount = ZERO
    tax_rate_percent: Amount = ZERO
    unit_label: Text = DEFAULT_UNIT


class Party(BaseModel):
    name: Text
    tax_id: Text = ""
    address: Text = ""
