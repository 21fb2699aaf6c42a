"""Tests for flattening documents into bills records and back."""

import datetime as dt
from decimal import Decimal

import pytest

from app.domain.models.billing import (
    AdjustmentKind,
    ApplyBase,
    CalcMethod,
    PurchaseBill,
    SalesInvoice,
    TransactionType,
)
from app.domain.services.document_records import (
    DocumentValidationError,
    adjustment_from_record,
    from_record,
    to_record,
    validate_for_submit,
)
from app.domain.services.formatting import DisplaySettings
from app.domain.services.recalculation import recalculate


def test_sale_record_shape(sales_invoice, freight_charge):
    doc = recalculate(sales_invoice.model_copy(update={"adjustments": [freight_charge]}))
    record = to_record(doc, company_id="c1", user_id="u1")

    assert record["type"] == "Sale"
    assert record["vendor_name"] == "Sharma Traders"
    assert record["bill_number"] == "INV-001"
    assert record["gst_type"] == "Intra-State"
    assert record["date"] == dt.date(2025, 1, 15)
    assert record["total_without_gst"] == Decimal("200")
    assert record["grand_total"] == Decimal("246")
    assert record["is_deleted"] is False
    assert "id" not in record
    assert "commission_rate" not in record

    item = record["items"][0]
    assert item["itemName"] == "Basmati Rice"
    assert item["hsnCode"] == "1006"
    assert item["qty"] == 2.0
    assert item["taxableAmount"] == 200.0
    assert item["amount"] == 236.0

    duty = record["duties_and_taxes"][0]
    assert duty == {
        "id": "freight",
        "name": "Freight",
        "type": "Charge",
        "calc_method": "Percentage",
        "rate": 5.0,
        "fixed_amount": 0.0,
        "apply_on": "Subtotal",
        "amount": 10.0,
    }


def test_purchase_record_shape(purchase_bill):
    record = to_record(recalculate(purchase_bill), company_id="c1")
    assert record["type"] == "Purchase"
    assert record["commission_amount"] == Decimal("4")
    assert record["market_fee"] == Decimal("5")
    assert "duties_and_taxes" not in record
    assert record["user_id"] is None


def test_ui_state_is_not_stored(sales_invoice):
    record = to_record(recalculate(sales_invoice), company_id="c1")
    assert "display_date" not in record
    assert "reset_taxes" not in record
    assert "pre_round_total" not in record


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestFromRecord:

    def test_stored_invoice_keeps_its_taxes(self):
        record = {
            "id": "5f0c1d9e-8a59-4d3b-9b0e-0d7a6e1a2b3c",
            "type": "Sale",
            "customer_name": "Sharma Traders",
            "invoice_number": "INV-009",
            "date": "2025-01-15",
            "gst_type": "Intra-State",
            "items": [{"id": "a", "itemName": "Rice", "qty": 2, "rate": 100, "tax_rate": 18}],
            "total_cgst": 20,
            "total_sgst": 20,
        }
        doc = from_record(record)
        assert isinstance(doc, SalesInvoice)
        assert doc.id == "5f0c1d9e-8a59-4d3b-9b0e-0d7a6e1a2b3c"
        assert doc.party_name == "Sharma Traders"
        assert doc.document_number == "INV-009"
        assert doc.reset_taxes is False
        assert doc.display_date == "15/01/2025"

        doc = recalculate(doc)
        assert doc.cgst_total == Decimal("20")
        assert doc.grand_total == Decimal("240")

    def test_bill_column_names(self):
        record = {
            "type": "Purchase",
            "vendor_name": "Kisan Agro",
            "bill_number": "PB-7",
            "date": dt.date(2024, 12, 1),
            "items": [],
            "commission_rate": Decimal("2.5"),
            "labor_charges": None,
        }
        doc = from_record(record, DisplaySettings(date_format="MM/DD/YYYY"))
        assert isinstance(doc, PurchaseBill)
        assert doc.commission_rate == Decimal("2.5")
        assert doc.labor_charges == 0
        assert doc.display_date == "12/01/2024"

    def test_missing_items_on_sale_gives_blank_row(self):
        doc = from_record({"type": "Sale", "items": None})
        assert len(doc.items) == 1

    def test_missing_items_on_purchase_gives_empty_list(self):
        assert from_record({"type": "Purchase", "items": "corrupt"}).items == []

    def test_unknown_type_is_purchase(self):
        assert isinstance(from_record({"type": "Quote"}), PurchaseBill)

    def test_item_defaults(self):
        doc = from_record({"type": "Sale", "items": [{"itemName": "X", "unit": ""}]})
        assert doc.items[0].unit_label == "PCS"
        assert doc.items[0].quantity == 1

    def test_stored_duties(self):
        record = {
            "type": "Sale",
            "gst_type": "inter-state",
            "duties_and_taxes": [
                {
                    "id": "d1",
                    "name": "TCS",
                    "type": "Deduction",
                    "calc_method": "Hybrid",
                    "rate": 1,
                    "fixed_amount": 2,
                    "apply_on": "Running Total",
                }
            ],
        }
        doc = from_record(record)
        assert doc.transaction_type == TransactionType.INTER_STATE
        entry = doc.adjustments[0]
        assert entry.kind == AdjustmentKind.DEDUCTION
        assert entry.method == CalcMethod.HYBRID
        assert entry.apply_base == ApplyBase.RUNNING_TOTAL


def test_adjustment_from_master_row():
    entry = adjustment_from_record(
        {"id": "abc", "name": "Freight", "type": "Charge", "calc_method": "Fixed",
         "rate": None, "fixed_amount": Decimal("50"), "apply_on": "Subtotal"}
    )
    assert entry.id == "abc"
    assert entry.method == CalcMethod.FIXED
    assert entry.rate == 0
    assert entry.amount == 0


@pytest.mark.parametrize(
    "party, number",
    [("", "INV-1"), ("Sharma", ""), ("   ", "INV-1")],
)
def test_validate_for_submit(party, number):
    with pytest.raises(DocumentValidationError):
        validate_for_submit(SalesInvoice(party_name=party, document_number=number))


def test_validation_error_is_value_error():
    assert issubclass(DocumentValidationError, ValueError)
