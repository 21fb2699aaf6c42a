"""Shared test fixtures for the billing engine test suite."""

import asyncio
import datetime as dt
from decimal import Decimal

import pytest

from app.domain.models.billing import (
    AdjustmentLedgerEntry,
    CatalogItem,
    LineItem,
    Party,
    PurchaseBill,
    SalesInvoice,
)


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def basic_item() -> LineItem:
    """qty 2 x 100 @ 18% GST."""
    return LineItem(name="Basmati Rice", code="1006", quantity="2", unit_rate="100", tax_rate_percent="18")


@pytest.fixture
def sales_invoice(basic_item) -> SalesInvoice:
    return SalesInvoice(
        party_name="Sharma Traders",
        document_number="INV-001",
        date=dt.date(2025, 1, 15),
        items=[basic_item],
    )


@pytest.fixture
def purchase_bill(basic_item) -> PurchaseBill:
    return PurchaseBill(
        party_name="Kisan Agro",
        document_number="PB-001",
        date=dt.date(2025, 1, 15),
        items=[basic_item],
        commission_rate="2",
        labor_charges="10",
        market_fee="5",
    )


@pytest.fixture
def freight_charge() -> AdjustmentLedgerEntry:
    return AdjustmentLedgerEntry(id="freight", name="Freight", rate=Decimal("5"))


@pytest.fixture
def catalog() -> list[CatalogItem]:
    return [
        CatalogItem(name="Basmati Rice", code="1006", unit_rate="120", tax_rate_percent="5", unit_label="KG"),
        CatalogItem(name="Sugar", code="1701", unit_rate="45", tax_rate_percent="5", unit_label=""),
    ]


@pytest.fixture
def parties() -> list[Party]:
    return [
        Party(name="Sharma Traders", tax_id="27AADCB2230M1ZP", address="Mumbai, Maharashtra"),
        Party(name="Kisan Agro", tax_id="36AABCU9603R1ZM", address=""),
    ]
