# app/api/v1/schemas/documents.py
"""Request and response schemas for bill / invoice and duties & taxes endpoints."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, Field, RootModel

from app.domain.models.billing import (
    AdjustmentKind,
    ApplyBase,
    CalcMethod,
    Document,
)


class DocumentBody(RootModel[Document]):
    """A sales invoice or purchase bill, selected by ``doc_type``."""


EditOp = Literal[
    "add_item",
    "remove_item",
    "update_item",
    "select_item",
    "set_party",
    "set_field",
    "set_transaction_type",
    "set_display_date",
    "commit_display_date",
    "set_charge",
    "set_manual_tax",
    "update_adjustment",
]


class EditOperation(BaseModel):
    """One form edit, e.g. ``{"op": "update_item", "args": {"index": 0, "field": "quantity", "value": "2"}}``."""

    op: EditOp
    args: dict[str, Any] = Field(default_factory=dict)


class EditRequest(BaseModel):
    document: Document
    edits: list[EditOperation] = Field(min_length=1)


class DutyTaxIn(BaseModel):
    """Create or replace a duties & taxes master entry."""

    name: str = Field(min_length=1, max_length=100)
    type: AdjustmentKind = AdjustmentKind.CHARGE
    calc_method: CalcMethod = CalcMethod.PERCENTAGE
    rate: Decimal = Decimal("0")
    fixed_amount: Decimal = Decimal("0")
    apply_on: ApplyBase = ApplyBase.SUBTOTAL


class DutyTaxDetail(BaseModel):
    id: str
    name: str
    type: str
    calc_method: str
    rate: Decimal | None
    fixed_amount: Decimal | None
    apply_on: str
