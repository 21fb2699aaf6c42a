# app/domain/services/document_editor.py
"""
Editing session for one bill or invoice.

``DocumentEditor`` holds the live document, applies one field edit at a time
and re-runs the recalculation engine after every edit, the way the bill and
invoice forms do on each keystroke. There is no draft state besides the
in-memory document; ``submit`` validates it and returns the flat record for
persistence.

Structural edits (adding, removing, editing or selecting an item, switching
between intra-state and inter-state) re-derive an invoice's CGST/SGST/IGST.
Typing a tax total by hand, editing a duty, or changing the party or date does
not, so a manual tax override survives those edits.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from app.domain.models.billing import (
    EDITABLE_ITEM_FIELDS,
    AdjustmentLedgerEntry,
    CatalogItem,
    LineItem,
    Party,
    PurchaseBill,
    SalesInvoice,
    TransactionType,
    to_decimal,
    to_text,
)
from app.domain.services.adjustments import clone_master_ledger
from app.domain.services.document_records import (
    PURCHASE,
    SALE,
    from_record,
    to_record,
    validate_for_submit,
)
from app.domain.services.formatting import DisplaySettings, format_date, parse_date_input
from app.domain.services.line_items import apply_catalog_item, find_party, new_line_item
from app.domain.services.recalculation import recalculate

logger = logging.getLogger("document_editor")

MANUAL_TAX_FIELDS = frozenset({"cgst_total", "sgst_total", "igst_total"})
PURCHASE_CHARGE_FIELDS = frozenset({"commission_rate", "labor_charges", "market_fee"})
ADJUSTMENT_VALUE_FIELDS = frozenset({"rate", "fixed_amount"})
HEADER_FIELDS = frozenset({"document_number", "tax_id", "address", "status"})


class DocumentEditor:
    def __init__(
        self,
        document: PurchaseBill | SalesInvoice,
        *,
        catalog: Iterable[CatalogItem] = (),
        parties: Iterable[Party] = (),
        display: DisplaySettings | None = None,
    ) -> None:
        self.catalog = list(catalog)
        self.parties = list(parties)
        self.display = display or DisplaySettings()
        self.document = recalculate(document)

    # ---------- construction ----------

    @classmethod
    def blank(
        cls,
        doc_type: str,
        *,
        master_ledger: Iterable[AdjustmentLedgerEntry] = (),
        today: dt.date | None = None,
        **kwargs: Any,
    ) -> "DocumentEditor":
        """
        A new document dated today with one blank line. Sales invoices start
        with a copy of the tenant's duties & taxes masters.
        """
        display = kwargs.get("display") or DisplaySettings()
        today = today or dt.date.today()
        common = {
            "date": today,
            "display_date": format_date(today, display),
            "items": [new_line_item()],
        }
        if doc_type == SALE:
            document = SalesInvoice(adjustments=clone_master_ledger(master_ledger), **common)
        elif doc_type == PURCHASE:
            document = PurchaseBill(**common)
        else:
            raise ValueError(f"Unknown document type: {doc_type!r}")
        logger.debug("New %s dated %s with %d duties", doc_type, today, len(getattr(document, "adjustments", [])))
        return cls(document, **kwargs)

    @classmethod
    def load(cls, record: Mapping[str, Any], **kwargs: Any) -> "DocumentEditor":
        """Reopen a stored bill or invoice, keeping its stored tax totals."""
        return cls(from_record(record, kwargs.get("display")), **kwargs)

    # ---------- internals ----------

    def _apply(self, **update: Any) -> PurchaseBill | SalesInvoice:
        self.document = recalculate(self.document.model_copy(update=update))
        return self.document

    def _structural(self, **update: Any) -> PurchaseBill | SalesInvoice:
        if isinstance(self.document, SalesInvoice):
            update["reset_taxes"] = True
        return self._apply(**update)

    def _require_sale(self, action: str) -> SalesInvoice:
        if not isinstance(self.document, SalesInvoice):
            raise ValueError(f"{action} is only available on sales invoices")
        return self.document

    # ---------- line items ----------

    def _row(self, index: Any) -> int:
        """Only non-negative positions of existing rows can be edited."""
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"Line item index must be an integer, got {index!r}")
        if not 0 <= index < len(self.document.items):
            raise IndexError(f"Line item index {index} out of range")
        return index

    def add_item(self) -> PurchaseBill | SalesInvoice:
        return self._structural(items=[*self.document.items, new_line_item()])

    def remove_item(self, index: int) -> PurchaseBill | SalesInvoice:
        index = self._row(index)
        items = [item for i, item in enumerate(self.document.items) if i != index]
        if not items and isinstance(self.document, SalesInvoice):
            items = [new_line_item()]
        return self._structural(items=items)

    def update_item(self, index: int, field: str, value: Any) -> PurchaseBill | SalesInvoice:
        if field not in EDITABLE_ITEM_FIELDS:
            raise ValueError(f"Line item field {field!r} is not editable")
        index = self._row(index)
        items = list(self.document.items)
        items[index] = LineItem.model_validate({**items[index].model_dump(), field: value})
        return self._structural(items=items)

    def select_item(self, index: int, name: str) -> PurchaseBill | SalesInvoice:
        """Pick an item by name; catalog matches prefill code, rate, tax and unit."""
        index = self._row(index)
        items = list(self.document.items)
        items[index] = apply_catalog_item(items[index], to_text(name), self.catalog)
        return self._structural(items=items)

    # ---------- header ----------

    def set_transaction_type(self, transaction_type: TransactionType | str) -> PurchaseBill | SalesInvoice:
        return self._structural(transaction_type=TransactionType(transaction_type))

    def set_party(self, name: str) -> PurchaseBill | SalesInvoice:
        """Set the party; a directory match fills GSTIN and address."""
        name = to_text(name)
        party = find_party(self.parties, name)
        update: dict[str, Any] = {"party_name": name}
        if party is not None:
            update["tax_id"] = party.tax_id or self.document.tax_id
            update["address"] = party.address or self.document.address
        return self._apply(**update)

    def set_field(self, field: str, value: Any) -> PurchaseBill | SalesInvoice:
        if field not in HEADER_FIELDS:
            raise ValueError(f"Header field {field!r} is not editable")
        return self._apply(**{field: to_text(value)})

    def set_display_date(self, text: str) -> PurchaseBill | SalesInvoice:
        """Typing in the date box only changes the displayed text."""
        return self._apply(display_date=to_text(text))

    def commit_display_date(self) -> PurchaseBill | SalesInvoice:
        """On blur: a parseable date replaces ``date`` and is re-displayed."""
        iso = parse_date_input(self.document.display_date, self.display)
        if iso is None:
            return self.document
        parsed = dt.date.fromisoformat(iso)
        return self._apply(date=parsed, display_date=format_date(parsed, self.display))

    # ---------- charges and taxes ----------

    def set_charge(self, field: str, value: Any) -> PurchaseBill | SalesInvoice:
        """Commission %, labour charges or market fee on a purchase bill."""
        if not isinstance(self.document, PurchaseBill):
            raise ValueError("Purchase charges are only available on purchase bills")
        if field not in PURCHASE_CHARGE_FIELDS:
            raise ValueError(f"Unknown purchase charge {field!r}")
        return self._apply(**{field: to_decimal(value)})

    def set_manual_tax(self, field: str, value: Any) -> SalesInvoice:
        """Override CGST, SGST or IGST by hand until the next structural edit."""
        self._require_sale("Manual tax override")
        if field not in MANUAL_TAX_FIELDS:
            raise ValueError(f"Unknown tax field {field!r}")
        return self._apply(**{field: to_decimal(value), "reset_taxes": False})

    def update_adjustment(self, adjustment_id: str, field: str, value: Any) -> SalesInvoice:
        """Change a duty's rate or fixed amount for this invoice only."""
        invoice = self._require_sale("Duties & taxes")
        if field not in ADJUSTMENT_VALUE_FIELDS:
            raise ValueError(f"Adjustment field {field!r} is not editable")
        adjustments = [
            entry.model_copy(update={field: to_decimal(value)}) if entry.id == adjustment_id else entry
            for entry in invoice.adjustments
        ]
        return self._apply(adjustments=adjustments, reset_taxes=False)

    # ---------- submit ----------

    def submit(self, *, company_id: str, user_id: str | None = None) -> dict[str, Any]:
        """Validate and flatten the document for the bills table."""
        validate_for_submit(self.document)
        return to_record(self.document, company_id=company_id, user_id=user_id)
