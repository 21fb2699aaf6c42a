# tests/test_bill_repository.py
"""Tests for the bills repository (save with column-strip retry, reads, soft delete)."""

import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import CompileError, DBAPIError

from app.infrastructure.db.repositories.bill_repository import (
    BillNotFoundError,
    BillRepository,
    bill_to_record,
    missing_columns,
)

BILL_ID = uuid.UUID("5f0c1d9e-8a59-4d3b-9b0e-0d7a6e1a2b3c")


def _record(**extra) -> dict:
    return {
        "company_id": "c1",
        "type": "Purchase",
        "vendor_name": "Kisan Agro",
        "bill_number": "PB-1",
        "market_fee": Decimal("5"),
        "grand_total": Decimal("255"),
        **extra,
    }


def _db_error(message: str) -> DBAPIError:
    return DBAPIError("INSERT INTO bills ...", {}, Exception(message))


def _scalar_result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


# ---------------------------------------------------------------------------
# Error parsing
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "message, expected",
    [
        ('column "market_fee" of relation "bills" does not exist', ["market_fee"]),
        ("Could not find the 'labor_charges' column of 'bills' in the schema cache", ["labor_charges"]),
        ("Unconsumed column names: market_fee, commission_rate", ["market_fee", "commission_rate"]),
        ('null value in column "vendor_name" violates not-null constraint', []),
        ("connection refused", []),
    ],
)
def test_missing_columns(message, expected):
    assert missing_columns(message) == expected


# ---------------------------------------------------------------------------
# save()
# ---------------------------------------------------------------------------

class TestSave:

    def test_insert_first_try(self, event_loop):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_scalar_result(BILL_ID))

        saved = event_loop.run_until_complete(BillRepository(db).save(_record()))
        assert saved == BILL_ID
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

    def test_strips_missing_column_and_retries(self, event_loop):
        db = AsyncMock()
        repo = BillRepository(db)
        seen = []

        async def fake_write(payload, bill_id):
            seen.append(dict(payload))
            if "market_fee" in payload:
                raise _db_error('column "market_fee" of relation "bills" does not exist')
            return BILL_ID

        with patch.object(repo, "_write", side_effect=fake_write):
            saved = event_loop.run_until_complete(repo.save(_record()))

        assert saved == BILL_ID
        assert len(seen) == 2
        assert "market_fee" not in seen[1]
        assert seen[1]["grand_total"] == Decimal("255")
        db.rollback.assert_awaited_once()

    def test_strips_several_columns_across_attempts(self, event_loop):
        db = AsyncMock()
        repo = BillRepository(db)
        errors = [
            CompileError("Unconsumed column names: market_fee"),
            _db_error("Could not find the 'labor_charges' column of 'bills' in the schema cache"),
        ]

        async def fake_write(payload, bill_id):
            if errors:
                raise errors.pop(0)
            return BILL_ID

        with patch.object(repo, "_write", side_effect=fake_write):
            saved = event_loop.run_until_complete(repo.save(_record(labor_charges=Decimal("10"))))
        assert saved == BILL_ID
        assert db.rollback.await_count == 2

    def test_unrelated_error_propagates(self, event_loop):
        db = AsyncMock()
        repo = BillRepository(db)

        with patch.object(repo, "_write", side_effect=_db_error("connection refused")):
            with pytest.raises(DBAPIError):
                event_loop.run_until_complete(repo.save(_record()))

    def test_tenant_column_is_never_stripped(self, event_loop):
        db = AsyncMock()
        repo = BillRepository(db)
        error = _db_error('column "company_id" of relation "bills" does not exist')

        with patch.object(repo, "_write", side_effect=error) as write:
            with pytest.raises(DBAPIError):
                event_loop.run_until_complete(repo.save(_record()))
        assert write.await_count == 1

    def test_update_of_missing_bill(self, event_loop):
        db = AsyncMock()
        db.execute = AsyncMock(return_value=_scalar_result(None))

        with pytest.raises(BillNotFoundError):
            event_loop.run_until_complete(BillRepository(db).save(_record(), bill_id=BILL_ID))
        db.commit.assert_not_awaited()

    def test_update_with_malformed_id(self, event_loop):
        db = AsyncMock()
        with pytest.raises(BillNotFoundError):
            event_loop.run_until_complete(BillRepository(db).save(_record(), bill_id="not-a-uuid"))
        db.execute.assert_not_awaited()


# ---------------------------------------------------------------------------
# Reads and soft delete
# ---------------------------------------------------------------------------

def test_get_with_malformed_id(event_loop):
    db = AsyncMock()
    assert event_loop.run_until_complete(BillRepository(db).get("c1", "nope")) is None
    db.execute.assert_not_awaited()


def test_get_found(event_loop):
    bill = MagicMock()
    db = AsyncMock()
    db.execute = AsyncMock(return_value=_scalar_result(bill))
    assert event_loop.run_until_complete(BillRepository(db).get("c1", str(BILL_ID))) is bill


def test_list_for_company(event_loop):
    bill = MagicMock()
    count_result = MagicMock()
    count_result.scalar.return_value = 1
    rows_result = MagicMock()
    rows_result.scalars.return_value.all.return_value = [bill]

    db = AsyncMock()
    db.execute = AsyncMock(side_effect=[count_result, rows_result])

    rows, total = event_loop.run_until_complete(
        BillRepository(db).list_for_company("c1", doc_type="Sale", search="sharma")
    )
    assert rows == [bill]
    assert total == 1


@pytest.mark.parametrize("found, expected", [(BILL_ID, True), (None, False)])
def test_soft_delete(event_loop, found, expected):
    db = AsyncMock()
    db.execute = AsyncMock(return_value=_scalar_result(found))
    assert event_loop.run_until_complete(BillRepository(db).soft_delete("c1", BILL_ID)) is expected
    db.commit.assert_awaited_once()


def test_bill_to_record_uses_column_names():
    bill = MagicMock()
    bill.vendor_name = "Kisan Agro"
    bill.market_fee = Decimal("5")
    record = bill_to_record(bill)
    assert record["vendor_name"] == "Kisan Agro"
    assert record["market_fee"] == Decimal("5")
    assert "duties_and_taxes" in record
