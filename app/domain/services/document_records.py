# app/domain/services/document_records.py
"""
Conversion between domain documents and the flat ``bills`` record.

Sales invoices and purchase bills share one table. The record keeps the
column names the table was created with (``vendor_name``, ``bill_number``,
``gst_type``, ``total_without_gst`` ...), and line items / duties are stored
as JSON lists.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from app.domain.models.billing import (
    AdjustmentLedgerEntry,
    LineItem,
    PurchaseBill,
    SalesInvoice,
    document_adapter,
)
from app.domain.services.formatting import DisplaySettings, format_date
from app.domain.services.line_items import new_line_item

logger = logging.getLogger("document_records")

SALE = "Sale"
PURCHASE = "Purchase"

_REQUIRED_MESSAGES = {
    PURCHASE: "Vendor and Bill No are required.",
    SALE: "Required: Customer and Invoice Number",
}


class DocumentValidationError(ValueError):
    """Raised when a document is submitted without its identifying fields."""


def validate_for_submit(document: PurchaseBill | SalesInvoice) -> None:
    """Party name and document number are the only hard preconditions."""
    if not document.party_name.strip() or not document.document_number.strip():
        logger.debug(
            "Rejected %s submit: party=%r number=%r",
            document.doc_type,
            document.party_name,
            document.document_number,
        )
        raise DocumentValidationError(_REQUIRED_MESSAGES[document.doc_type])


# ---------------------------------------------------------------------------
# Domain -> record
# ---------------------------------------------------------------------------

def _json_number(value: Decimal) -> float:
    return float(value)


def _item_to_record(item: LineItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "itemName": item.name,
        "hsnCode": item.code,
        "qty": _json_number(item.quantity),
        "unit": item.unit_label,
        "rate": _json_number(item.unit_rate),
        "tax_rate": _json_number(item.tax_rate_percent),
        "taxableAmount": _json_number(item.taxable_amount),
        "amount": _json_number(item.line_total),
    }


def _adjustment_to_record(entry: AdjustmentLedgerEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "name": entry.name,
        "type": entry.kind.value,
        "calc_method": entry.method.value,
        "rate": _json_number(entry.rate),
        "fixed_amount": _json_number(entry.fixed_amount),
        "apply_on": entry.apply_base.value,
        "amount": _json_number(entry.amount),
    }


def to_record(
    document: PurchaseBill | SalesInvoice,
    *,
    company_id: str,
    user_id: str | None = None,
) -> dict[str, Any]:
    """
    Flatten a recomputed document for persistence.

    UI-only state (``display_date``, ``reset_taxes``) and the pre-rounding
    total are not stored.
    """
    record: dict[str, Any] = {
        "company_id": company_id,
        "user_id": user_id,
        "type": document.doc_type,
        "vendor_name": document.party_name,
        "gstin": document.tax_id,
        "address": document.address,
        "bill_number": document.document_number,
        "date": document.date,
        "gst_type": document.transaction_type.value,
        "status": document.status,
        "items": [_item_to_record(item) for item in document.items],
        "total_without_gst": document.taxable_total,
        "total_cgst": document.cgst_total,
        "total_sgst": document.sgst_total,
        "total_igst": document.igst_total,
        "total_gst": document.tax_total,
        "round_off": document.round_off,
        "grand_total": document.grand_total,
        "is_deleted": False,
    }
    if document.id:
        record["id"] = document.id

    if isinstance(document, PurchaseBill):
        record.update(
            commission_rate=document.commission_rate,
            commission_amount=document.commission_amount,
            labor_charges=document.labor_charges,
            market_fee=document.market_fee,
        )
    else:
        record["duties_and_taxes"] = [
            _adjustment_to_record(entry) for entry in document.adjustments
        ]
    return record


# ---------------------------------------------------------------------------
# Record -> domain
# ---------------------------------------------------------------------------

def _item_from_record(raw: Mapping[str, Any]) -> dict[str, Any]:
    data = {
        "name": raw.get("itemName", raw.get("name")),
        "code": raw.get("hsnCode", raw.get("hsn")),
        "quantity": raw.get("qty"),
        "unit_label": raw.get("unit") or None,
        "unit_rate": raw.get("rate"),
        "tax_rate_percent": raw.get("tax_rate"),
    }
    if raw.get("id"):
        data["id"] = str(raw["id"])
    return {key: value for key, value in data.items() if value is not None}


def _adjustment_from_record(raw: Mapping[str, Any]) -> dict[str, Any]:
    data = {
        "name": raw.get("name"),
        "kind": raw.get("type"),
        "method": raw.get("calc_method"),
        "rate": raw.get("rate"),
        "fixed_amount": raw.get("fixed_amount"),
        "apply_base": raw.get("apply_on"),
        "amount": raw.get("amount"),
    }
    if raw.get("id"):
        data["id"] = str(raw["id"])
    return {key: value for key, value in data.items() if value is not None}


def adjustment_from_record(raw: Mapping[str, Any]) -> AdjustmentLedgerEntry:
    """Build a ledger entry from a ``duties_taxes`` row or a stored duty."""
    return AdjustmentLedgerEntry(**_adjustment_from_record(raw))


def from_record(
    record: Mapping[str, Any],
    display: DisplaySettings | None = None,
) -> PurchaseBill | SalesInvoice:
    """
    Rebuild a document from a stored record.

    Accepts both the bill and the invoice spelling of the header fields.
    Stored tax totals are kept as loaded (``reset_taxes`` off), so a
    hand-edited invoice reopens with its own CGST/SGST/IGST.
    """
    doc_type = SALE if record.get("type") == SALE else PURCHASE

    raw_items = record.get("items")
    if isinstance(raw_items, list):
        items = [_item_from_record(raw) for raw in raw_items if isinstance(raw, Mapping)]
    elif doc_type == SALE:
        items = [new_line_item().model_dump()]
    else:
        items = []

    data: dict[str, Any] = {
        "doc_type": doc_type,
        "id": str(record["id"]) if record.get("id") else None,
        "party_name": record.get("customer_name") or record.get("vendor_name") or "",
        "tax_id": record.get("gstin"),
        "address": record.get("address"),
        "document_number": record.get("invoice_number") or record.get("bill_number") or "",
        "date": record.get("date"),
        "transaction_type": record.get("gst_type"),
        "status": record.get("status") or "Pending",
        "items": items,
        "taxable_total": record.get("total_without_gst"),
        "cgst_total": record.get("total_cgst"),
        "sgst_total": record.get("total_sgst"),
        "igst_total": record.get("total_igst"),
        "tax_total": record.get("total_gst"),
        "round_off": record.get("round_off"),
        "grand_total": record.get("grand_total"),
    }

    if doc_type == SALE:
        duties = record.get("duties_and_taxes") or []
        data["adjustments"] = [
            _adjustment_from_record(raw) for raw in duties if isinstance(raw, Mapping)
        ]
        data["reset_taxes"] = False
    else:
        for key in ("commission_rate", "commission_amount", "labor_charges", "market_fee"):
            data[key] = record.get(key)

    document = document_adapter.validate_python(
        {key: value for key, value in data.items() if value is not None}
    )
    return document.model_copy(update={"display_date": format_date(document.date, display)})
