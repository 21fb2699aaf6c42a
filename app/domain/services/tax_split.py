# app/domain/services/tax_split.py
"""CGST/SGST vs IGST split of the aggregate GST on a document."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.domain.models.billing import ZERO, TransactionType, to_decimal

_TWO = Decimal("2")


@dataclass(frozen=True)
class TaxSplit:
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.cgst + self.sgst + self.igst


def split_tax(total_tax: Decimal, transaction_type: TransactionType) -> TaxSplit:
    """
    Intra-state supply: half CGST, half SGST.
    Inter-state supply: all IGST.
    """
    if transaction_type == TransactionType.INTER_STATE:
        return TaxSplit(igst=total_tax)
    half = total_tax / _TWO
    return TaxSplit(cgst=half, sgst=half)


def held_split(cgst: Any, sgst: Any, igst: Any) -> TaxSplit:
    """Tax totals as currently held on an invoice (possibly typed by hand)."""
    return TaxSplit(cgst=to_decimal(cgst), sgst=to_decimal(sgst), igst=to_decimal(igst))
