# app/domain/services/adjustments.py
"""
Duties, taxes and charges applied after GST.

Sales invoices fold a user-defined ledger left to right: each entry may be
based on the taxable subtotal or on the running total so far, so the order
of the list changes the result.

Purchase bills carry three fixed additive charges instead:
commission (% of taxable subtotal), labour charges and market fee.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from app.domain.models.billing import (
    HUNDRED,
    ZERO,
    AdjustmentKind,
    AdjustmentLedgerEntry,
    ApplyBase,
    CalcMethod,
    to_decimal,
)


def adjustment_amount(
    entry: AdjustmentLedgerEntry,
    taxable_total: Decimal,
    running_total: Decimal,
) -> Decimal:
    """Signed contribution of one ledger entry at its position in the fold."""
    base = taxable_total if entry.apply_base == ApplyBase.SUBTOTAL else running_total
    rate = to_decimal(entry.rate)
    fixed = to_decimal(entry.fixed_amount)

    if entry.method == CalcMethod.PERCENTAGE:
        raw = base * (rate / HUNDRED)
    elif entry.method == CalcMethod.FIXED:
        raw = fixed
    else:
        raw = base * (rate / HUNDRED) + fixed

    # Only the kind decides the sign
    if entry.kind == AdjustmentKind.DEDUCTION:
        return -abs(raw)
    return abs(raw)


def apply_adjustments(
    adjustments: Sequence[AdjustmentLedgerEntry],
    taxable_total: Decimal,
    opening_total: Decimal,
) -> tuple[list[AdjustmentLedgerEntry], Decimal]:
    """
    Fold the ledger in list order starting from ``opening_total``
    (taxable + CGST + SGST + IGST).

    Returns the entries with their ``amount`` filled in, and the running
    total after the last one.
    """
    running = opening_total
    processed: list[AdjustmentLedgerEntry] = []
    for entry in adjustments:
        amount = adjustment_amount(entry, taxable_total, running)
        running += amount
        processed.append(
            entry.model_copy(
                update={
                    "rate": to_decimal(entry.rate),
                    "fixed_amount": to_decimal(entry.fixed_amount),
                    "amount": amount,
                }
            )
        )
    return processed, running


def clone_master_ledger(masters: Iterable[AdjustmentLedgerEntry]) -> list[AdjustmentLedgerEntry]:
    """
    Copy the tenant's master duties & taxes into a new document with a zero
    amount. Later edits on the document never touch the masters.
    """
    return [master.model_copy(update={"amount": ZERO}, deep=True) for master in masters]


@dataclass(frozen=True)
class PurchaseCharges:
    commission_amount: Decimal = ZERO
    labor_charges: Decimal = ZERO
    market_fee: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.commission_amount + self.labor_charges + self.market_fee


def purchase_charges(
    taxable_total: Decimal,
    commission_rate,
    labor_charges,
    market_fee,
) -> PurchaseCharges:
    return PurchaseCharges(
        commission_amount=taxable_total * (to_decimal(commission_rate) / HUNDRED),
        labor_charges=to_decimal(labor_charges),
        market_fee=to_decimal(market_fee),
    )
