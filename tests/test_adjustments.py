"""Tests for the duties & taxes fold and purchase bill charges."""

from decimal import Decimal

import pytest

from app.domain.models.billing import (
    AdjustmentKind,
    AdjustmentLedgerEntry,
    ApplyBase,
    CalcMethod,
)
from app.domain.services.adjustments import (
    adjustment_amount,
    apply_adjustments,
    clone_master_ledger,
    purchase_charges,
)

TAXABLE = Decimal("1000")
RUNNING = Decimal("1180")


def _entry(**kwargs) -> AdjustmentLedgerEntry:
    return AdjustmentLedgerEntry(name=kwargs.pop("name", "Duty"), **kwargs)


# ---------------------------------------------------------------------------
# Single entry
# ---------------------------------------------------------------------------

class TestAdjustmentAmount:

    def test_percentage_of_subtotal(self):
        entry = _entry(method=CalcMethod.PERCENTAGE, rate="5", apply_base=ApplyBase.SUBTOTAL)
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("50")

    def test_percentage_of_running_total(self):
        entry = _entry(method=CalcMethod.PERCENTAGE, rate="5", apply_base=ApplyBase.RUNNING_TOTAL)
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("59")

    def test_fixed_ignores_base_and_rate(self):
        entry = _entry(method=CalcMethod.FIXED, rate="50", fixed_amount="25")
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("25")

    def test_hybrid_adds_both(self):
        entry = _entry(method=CalcMethod.HYBRID, rate="1", fixed_amount="10")
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("20")

    @pytest.mark.parametrize("fixed", ["30", "-30"])
    def test_deduction_is_always_negative(self, fixed):
        entry = _entry(kind=AdjustmentKind.DEDUCTION, method=CalcMethod.FIXED, fixed_amount=fixed)
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("-30")

    def test_charge_is_always_positive(self):
        entry = _entry(method=CalcMethod.FIXED, fixed_amount="-30")
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("30")

    def test_unknown_method_and_base_fall_back(self):
        entry = AdjustmentLedgerEntry.model_validate(
            {"name": "Cess", "method": "Weird", "apply_base": "Other", "rate": "10", "fixed_amount": "1"}
        )
        assert entry.method == CalcMethod.HYBRID
        assert entry.apply_base == ApplyBase.RUNNING_TOTAL
        assert adjustment_amount(entry, TAXABLE, RUNNING) == Decimal("119")

    def test_unknown_kind_is_a_charge(self):
        entry = AdjustmentLedgerEntry.model_validate({"kind": "Rebate"})
        assert entry.kind == AdjustmentKind.CHARGE


# ---------------------------------------------------------------------------
# Fold
# ---------------------------------------------------------------------------

class TestApplyAdjustments:

    def test_empty_ledger(self):
        processed, running = apply_adjustments([], TAXABLE, RUNNING)
        assert processed == []
        assert running == RUNNING

    def test_running_total_sees_earlier_entries(self):
        ledger = [
            _entry(name="Freight", method=CalcMethod.FIXED, fixed_amount="20"),
            _entry(name="Insurance", rate="10", apply_base=ApplyBase.RUNNING_TOTAL),
        ]
        processed, running = apply_adjustments(ledger, TAXABLE, RUNNING)
        assert [e.amount for e in processed] == [Decimal("20"), Decimal("120")]
        assert running == Decimal("1320")

    def test_order_changes_result(self):
        fixed = _entry(name="Freight", method=CalcMethod.FIXED, fixed_amount="20")
        pct = _entry(name="Insurance", rate="10", apply_base=ApplyBase.RUNNING_TOTAL)
        _, forward = apply_adjustments([fixed, pct], TAXABLE, RUNNING)
        _, backward = apply_adjustments([pct, fixed], TAXABLE, RUNNING)
        assert forward == Decimal("1320")
        assert backward == Decimal("1318")

    def test_deduction_then_charge(self):
        ledger = [
            _entry(name="Discount", kind=AdjustmentKind.DEDUCTION, rate="10"),
            _entry(name="Packing", method=CalcMethod.FIXED, fixed_amount="15"),
        ]
        processed, running = apply_adjustments(ledger, TAXABLE, RUNNING)
        assert processed[0].amount == Decimal("-100")
        assert running == Decimal("1095")

    def test_input_entries_are_not_mutated(self):
        entry = _entry(rate="5")
        apply_adjustments([entry], TAXABLE, RUNNING)
        assert entry.amount == 0


def test_clone_master_ledger_is_independent():
    masters = [_entry(name="Freight", rate="5", amount="42")]
    cloned = clone_master_ledger(masters)
    assert cloned[0].amount == 0
    assert cloned[0].id == masters[0].id

    cloned[0].rate = Decimal("99")
    assert masters[0].rate == Decimal("5")
    assert masters[0].amount == Decimal("42")


# ---------------------------------------------------------------------------
# Purchase charges
# ---------------------------------------------------------------------------

def test_purchase_charges():
    charges = purchase_charges(Decimal("200"), "2", "10", "5")
    assert charges.commission_amount == Decimal("4")
    assert charges.labor_charges == Decimal("10")
    assert charges.market_fee == Decimal("5")
    assert charges.total == Decimal("19")


def test_purchase_charges_malformed_input_counts_as_zero():
    charges = purchase_charges(Decimal("200"), "x", None, "")
    assert charges.total == 0
