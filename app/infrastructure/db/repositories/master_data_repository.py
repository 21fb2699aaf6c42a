# app/infrastructure/db/repositories/master_data_repository.py
"""
Tenant-scoped master data used while editing documents: the party
directory, the stock item catalog, and the duties & taxes ledger.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import and_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models.billing import AdjustmentLedgerEntry, CatalogItem, Party
from app.domain.services.document_records import adjustment_from_record
from app.infrastructure.db.models import DutyTax, StockItem, Vendor

DUTY_FIELDS = ("name", "type", "calc_method", "rate", "fixed_amount", "apply_on")


def duty_to_entry(duty: DutyTax) -> AdjustmentLedgerEntry:
    return adjustment_from_record(
        {"id": str(duty.id), **{field: getattr(duty, field) for field in DUTY_FIELDS}}
    )


class MasterDataRepository:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ---------- lookups ----------

    async def list_parties(self, company_id: str) -> list[Party]:
        stmt = (
            select(Vendor)
            .where(and_(Vendor.company_id == company_id, Vendor.is_deleted.is_(False)))
            .order_by(Vendor.name)
        )
        result = await self.db.execute(stmt)
        return [
            Party(name=v.name, tax_id=v.gstin, address=v.address)
            for v in result.scalars().all()
        ]

    async def list_catalog(self, company_id: str) -> list[CatalogItem]:
        stmt = (
            select(StockItem)
            .where(and_(StockItem.company_id == company_id, StockItem.is_deleted.is_(False)))
            .order_by(StockItem.name)
        )
        result = await self.db.execute(stmt)
        return [
            CatalogItem(
                name=s.name,
                code=s.hsn,
                unit_rate=s.rate,
                tax_rate_percent=s.tax_rate,
                unit_label=s.unit or "PCS",
            )
            for s in result.scalars().all()
        ]

    # ---------- duties & taxes ----------

    async def list_duties(self, company_id: str) -> list[DutyTax]:
        stmt = (
            select(DutyTax)
            .where(and_(DutyTax.company_id == company_id, DutyTax.is_deleted.is_(False)))
            .order_by(DutyTax.name)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def master_ledger(self, company_id: str) -> list[AdjustmentLedgerEntry]:
        """The tenant's duties & taxes as ledger entries, in name order."""
        return [duty_to_entry(duty) for duty in await self.list_duties(company_id)]

    async def create_duty(
        self,
        company_id: str,
        data: dict[str, Any],
        user_id: str | None = None,
    ) -> DutyTax:
        duty = DutyTax(
            id=uuid.uuid4(),
            company_id=company_id,
            user_id=user_id,
            **{field: data[field] for field in DUTY_FIELDS if field in data},
        )
        duty.name = (duty.name or "").strip()
        self.db.add(duty)
        await self.db.commit()
        await self.db.refresh(duty)
        return duty

    async def update_duty(
        self,
        company_id: str,
        duty_id: uuid.UUID,
        data: dict[str, Any],
    ) -> DutyTax | None:
        stmt = select(DutyTax).where(
            and_(
                DutyTax.id == duty_id,
                DutyTax.company_id == company_id,
                DutyTax.is_deleted.is_(False),
            )
        )
        result = await self.db.execute(stmt)
        duty = result.scalar_one_or_none()
        if not duty:
            return None

        for field in DUTY_FIELDS:
            if field in data:
                setattr(duty, field, data[field])
        duty.name = (duty.name or "").strip()
        await self.db.commit()
        await self.db.refresh(duty)
        return duty

    async def soft_delete_duty(self, company_id: str, duty_id: uuid.UUID) -> bool:
        stmt = (
            update(DutyTax)
            .where(
                and_(
                    DutyTax.id == duty_id,
                    DutyTax.company_id == company_id,
                    DutyTax.is_deleted.is_(False),
                )
            )
            .values(is_deleted=True)
            .returning(DutyTax.id)
        )
        result = await self.db.execute(stmt)
        deleted = result.scalar_one_or_none() is not None
        await self.db.commit()
        return deleted
