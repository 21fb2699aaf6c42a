# app/infrastructure/db/repositories/bill_repository.py
"""Repository for the shared ``bills`` table (sales invoices + purchase bills)."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from typing import Any

from sqlalchemy import and_, func, insert, or_, select, update
from sqlalchemy.exc import CompileError, DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import Bill

logger = logging.getLogger("bill_repository")

# Error texts that name a column the destination table does not have:
#   postgres:   column "foo" of relation "bills" does not exist
#   postgrest:  Could not find the 'foo' column of 'bills' in the schema cache
#   sqlalchemy: Unconsumed column names: foo, bar
_MISSING_COLUMN_PATTERNS = (
    re.compile(r"column [\"'](.+?)[\"'] of relation [\"'].+?[\"'] does not exist", re.IGNORECASE),
    re.compile(r"find the [\"'](.+?)[\"'] column", re.IGNORECASE),
)
_UNCONSUMED = re.compile(r"Unconsumed column names: ([\w, ]+)")

# Never stripped: without these the write would land on the wrong row/tenant
_PROTECTED_FIELDS = frozenset({"id", "company_id"})


def missing_columns(message: str) -> list[str]:
    """Column names reported as missing by the database error ``message``."""
    unconsumed = _UNCONSUMED.search(message)
    if unconsumed:
        return [name.strip() for name in unconsumed.group(1).split(",") if name.strip()]
    for pattern in _MISSING_COLUMN_PATTERNS:
        match = pattern.search(message)
        if match:
            return [match.group(1)]
    return []


def _as_uuid(value: Any) -> uuid.UUID | None:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def bill_to_record(bill: Bill) -> dict[str, Any]:
    """ORM row -> plain dict keyed by column name."""
    return {column.key: getattr(bill, column.key) for column in Bill.__table__.columns}


class BillNotFoundError(Exception):
    """Raised when an update targets a bill the tenant does not own."""


class BillRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------- writes ----------

    async def _write(self, payload: dict[str, Any], bill_id: uuid.UUID | None) -> uuid.UUID:
        if bill_id is None:
            stmt = insert(Bill).values(**payload).returning(Bill.id)
        else:
            values = {key: value for key, value in payload.items() if key != "id"}
            stmt = (
                update(Bill)
                .where(
                    and_(
                        Bill.id == bill_id,
                        Bill.company_id == payload["company_id"],
                        Bill.is_deleted.is_(False),
                    )
                )
                .values(**values)
                .returning(Bill.id)
            )
        result = await self.db.execute(stmt)
        saved_id = result.scalar_one_or_none()
        if saved_id is None:
            raise BillNotFoundError(f"Bill {bill_id} not found")
        await self.db.commit()
        return saved_id

    async def save(self, record: dict[str, Any], bill_id: Any = None) -> uuid.UUID:
        """
        Insert a new bill, or update ``bill_id`` within the record's tenant.

        If the table lacks a column the record carries, that field is dropped
        and the same write is retried, until it succeeds or the error no longer
        names a removable field.
        """
        target = None
        if bill_id is not None:
            target = _as_uuid(bill_id)
            if target is None:
                raise BillNotFoundError(f"Bill {bill_id} not found")

        payload = dict(record)
        if target is None and "id" in payload:
            payload["id"] = _as_uuid(payload["id"]) or uuid.uuid4()

        while True:
            try:
                saved_id = await self._write(payload, target)
            except (CompileError, DBAPIError) as exc:
                await self.db.rollback()
                offending = [
                    name
                    for name in missing_columns(str(exc))
                    if name in payload and name not in _PROTECTED_FIELDS
                ]
                if not offending:
                    raise
                logger.warning(
                    "bills table has no column(s) %s, retrying without them", offending
                )
                for name in offending:
                    payload.pop(name)
                continue

            logger.info(
                "Saved %s %s (%s) for company %s",
                payload.get("type", "bill"),
                payload.get("bill_number"),
                saved_id,
                payload.get("company_id"),
            )
            return saved_id

    async def soft_delete(self, company_id: str, bill_id: Any) -> bool:
        """Flag a bill as deleted. Returns False if it does not exist."""
        target = _as_uuid(bill_id)
        if target is None:
            return False
        stmt = (
            update(Bill)
            .where(
                and_(
                    Bill.id == target,
                    Bill.company_id == company_id,
                    Bill.is_deleted.is_(False),
                )
            )
            .values(is_deleted=True)
            .returning(Bill.id)
        )
        result = await self.db.execute(stmt)
        deleted = result.scalar_one_or_none() is not None
        await self.db.commit()
        return deleted

    # ---------- reads ----------

    async def get(self, company_id: str, bill_id: Any) -> Bill | None:
        target = _as_uuid(bill_id)
        if target is None:
            return None
        stmt = select(Bill).where(
            and_(
                Bill.id == target,
                Bill.company_id == company_id,
                Bill.is_deleted.is_(False),
            )
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_company(
        self,
        company_id: str,
        *,
        doc_type: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Bill], int]:
        """
        Live (not deleted) bills for a tenant, newest first.
        ``search`` matches party name, bill number or GSTIN.
        """
        conditions = [Bill.company_id == company_id, Bill.is_deleted.is_(False)]
        if doc_type:
            conditions.append(Bill.type == doc_type)
        if date_from:
            conditions.append(Bill.date >= date_from)
        if date_to:
            conditions.append(Bill.date <= date_to)
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    Bill.vendor_name.ilike(pattern),
                    Bill.bill_number.ilike(pattern),
                    Bill.gstin.ilike(pattern),
                )
            )

        q = select(Bill).where(and_(*conditions))
        count_q = select(func.count()).select_from(q.subquery())
        total = (await self.db.execute(count_q)).scalar() or 0

        q = q.order_by(Bill.date.desc(), Bill.created_at.desc()).offset(offset).limit(limit)
        result = await self.db.execute(q)
        return list(result.scalars().all()), total
