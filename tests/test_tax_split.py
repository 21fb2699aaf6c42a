"""Tests for the CGST/SGST vs IGST split."""

from decimal import Decimal

import pytest

from app.domain.models.billing import TransactionType
from app.domain.services.tax_split import TaxSplit, held_split, split_tax


def test_intra_state_halves():
    split = split_tax(Decimal("36"), TransactionType.INTRA_STATE)
    assert split == TaxSplit(cgst=Decimal("18"), sgst=Decimal("18"), igst=Decimal("0"))


def test_inter_state_is_all_igst():
    split = split_tax(Decimal("36"), TransactionType.INTER_STATE)
    assert split.igst == Decimal("36")
    assert split.cgst == 0 and split.sgst == 0


def test_odd_paisa_is_split_exactly():
    split = split_tax(Decimal("0.01"), TransactionType.INTRA_STATE)
    assert split.cgst == Decimal("0.005")
    assert split.total == Decimal("0.01")


@pytest.mark.parametrize("raw", ["inter-state", "INTER-STATE", " Inter-State "])
def test_transaction_type_matches_case_insensitively(raw):
    assert TransactionType(raw) == TransactionType.INTER_STATE


def test_unknown_transaction_type_is_intra_state():
    assert TransactionType("Export") == TransactionType.INTRA_STATE


def test_held_split_coerces_values():
    split = held_split("20", None, "bad")
    assert split == TaxSplit(cgst=Decimal("20"), sgst=Decimal("0"), igst=Decimal("0"))
    assert split.total == Decimal("20")
