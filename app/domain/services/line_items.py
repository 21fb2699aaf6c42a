# app/domain/services/line_items.py
"""
Line item normalization and catalog prefill.

Every recalculation normalizes *all* items, not just the edited row, because
the document aggregates depend on the full set.
"""

from __future__ import annotations

from collections.abc import Iterable

from app.domain.models.billing import (
    DEFAULT_UNIT,
    HUNDRED,
    CatalogItem,
    LineItem,
    Party,
    to_decimal,
)


def new_line_item() -> LineItem:
    """A blank row: quantity 1, rate 0, tax 0."""
    return LineItem()


def normalize_line_item(item: LineItem) -> LineItem:
    """Coerce the editable numerics and recompute taxable, tax and line total."""
    quantity = to_decimal(item.quantity)
    unit_rate = to_decimal(item.unit_rate)
    tax_rate = to_decimal(item.tax_rate_percent)

    taxable = quantity * unit_rate
    tax = taxable * (tax_rate / HUNDRED)

    return item.model_copy(
        update={
            "quantity": quantity,
            "unit_rate": unit_rate,
            "tax_rate_percent": tax_rate,
            "taxable_amount": taxable,
            "tax_amount": tax,
            "line_total": taxable + tax,
        }
    )


def find_catalog_item(catalog: Iterable[CatalogItem], name: str) -> CatalogItem | None:
    """Exact-name lookup in the stock item catalog."""
    for entry in catalog:
        if entry.name == name:
            return entry
    return None


def apply_catalog_item(item: LineItem, name: str, catalog: Iterable[CatalogItem]) -> LineItem:
    """
    Set the row's name; when it matches a catalog item, also take its HSN
    code, rate, tax rate and unit. Free-typed names leave the rest untouched.
    """
    match = find_catalog_item(catalog, name)
    if match is None:
        return item.model_copy(update={"name": name})

    return item.model_copy(
        update={
            "name": name,
            "code": match.code,
            "unit_rate": match.unit_rate,
            "tax_rate_percent": match.tax_rate_percent,
            "unit_label": match.unit_label or DEFAULT_UNIT,
        }
    )


def find_party(parties: Iterable[Party], name: str) -> Party | None:
    """Case-insensitive lookup in the party directory."""
    folded = name.lower()
    for party in parties:
        if party.name.lower() == folded:
            return party
    return None
