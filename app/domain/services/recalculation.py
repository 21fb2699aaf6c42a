# app/domain/services/recalculation.py
"""
Bill / invoice recalculation engine.

``recalculate`` is a pure function of the document: it never mutates its
input, never raises on malformed numbers (they count as 0) and is
idempotent. It runs after every single field edit.

Order of computation:
  1. Normalize every line item (taxable, tax, line total).
  2. Split the aggregate GST (CGST+SGST or IGST). Sales invoices keep
     hand-typed tax totals unless ``reset_taxes`` is set.
  3. Apply charges: the fixed purchase charges, or the sales duties & taxes
     ledger folded left to right.
  4. Round the running total to the nearest rupee, once.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.domain.models.billing import PurchaseBill, SalesInvoice, to_decimal
from app.domain.services.adjustments import apply_adjustments, purchase_charges
from app.domain.services.line_items import normalize_line_item
from app.domain.services.tax_split import held_split, split_tax

_UNIT = Decimal("1")
_PAISA = Decimal("0.01")


def round_half_away_from_zero(value: Decimal, quantum: Decimal = _UNIT) -> Decimal:
    # ROUND_HALF_UP in the decimal module rounds ties away from zero
    return value.quantize(quantum, rounding=ROUND_HALF_UP)


def _rounding(running_total: Decimal) -> dict:
    grand_total = round_half_away_from_zero(running_total)
    return {
        "pre_round_total": running_total,
        "round_off": round_half_away_from_zero(grand_total - running_total, _PAISA),
        "grand_total": grand_total,
    }


def recalculate_purchase_bill(bill: PurchaseBill) -> PurchaseBill:
    items = [normalize_line_item(item) for item in bill.items]
    taxable = sum((item.taxable_amount for item in items), Decimal("0"))
    gst = sum((item.tax_amount for item in items), Decimal("0"))

    split = split_tax(gst, bill.transaction_type)
    charges = purchase_charges(
        taxable, bill.commission_rate, bill.labor_charges, bill.market_fee
    )
    running = taxable + split.total + charges.total

    return bill.model_copy(
        update={
            "items": items,
            "taxable_total": taxable,
            "cgst_total": split.cgst,
            "sgst_total": split.sgst,
            "igst_total": split.igst,
            "tax_total": split.total,
            "commission_rate": to_decimal(bill.commission_rate),
            "commission_amount": charges.commission_amount,
            "labor_charges": charges.labor_charges,
            "market_fee": charges.market_fee,
            **_rounding(running),
        }
    )


def recalculate_sales_invoice(invoice: SalesInvoice) -> SalesInvoice:
    items = [normalize_line_item(item) for item in invoice.items]
    taxable = sum((item.taxable_amount for item in items), Decimal("0"))

    if invoice.reset_taxes:
        item_tax = sum((item.tax_amount for item in items), Decimal("0"))
        split = split_tax(item_tax, invoice.transaction_type)
    else:
        split = held_split(invoice.cgst_total, invoice.sgst_total, invoice.igst_total)

    adjustments, running = apply_adjustments(
        invoice.adjustments, taxable, taxable + split.total
    )

    return invoice.model_copy(
        update={
            "items": items,
            "taxable_total": taxable,
            "cgst_total": split.cgst,
            "sgst_total": split.sgst,
            "igst_total": split.igst,
            "tax_total": split.total,
            "adjustments": adjustments,
            "reset_taxes": False,
            **_rounding(running),
        }
    )


def recalculate(document: PurchaseBill | SalesInvoice) -> PurchaseBill | SalesInvoice:
    """Recompute every derived field of a bill or invoice."""
    if isinstance(document, PurchaseBill):
        return recalculate_purchase_bill(document)
    if isinstance(document, SalesInvoice):
        return recalculate_sales_invoice(document)
    raise TypeError(f"Cannot recalculate {type(document).__name__}")
