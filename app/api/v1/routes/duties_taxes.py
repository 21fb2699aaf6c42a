# app/api/v1/routes/duties_taxes.py
"""
Duties & taxes masters. New sales invoices start with a copy of the
tenant's entries; editing a master never touches saved invoices.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_company_id, get_user_id
from app.api.v1.envelope import ok
from app.api.v1.schemas.documents import DutyTaxDetail, DutyTaxIn
from app.core.db import get_db
from app.infrastructure.db.models import DutyTax
from app.infrastructure.db.repositories import MasterDataRepository

logger = logging.getLogger("api.v1.duties_taxes")

router = APIRouter(prefix="/duties-taxes", tags=["Duties & Taxes"])


def _duty_to_detail(duty: DutyTax) -> DutyTaxDetail:
    return DutyTaxDetail(
        id=str(duty.id),
        name=duty.name,
        type=duty.type,
        calc_method=duty.calc_method,
        rate=duty.rate,
        fixed_amount=duty.fixed_amount,
        apply_on=duty.apply_on,
    )


def _duty_data(body: DutyTaxIn) -> dict:
    return {
        "name": body.name,
        "type": body.type.value,
        "calc_method": body.calc_method.value,
        "rate": body.rate,
        "fixed_amount": body.fixed_amount,
        "apply_on": body.apply_on.value,
    }


def _parse_id(duty_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(duty_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Duty not found")


@router.get("", response_model=dict)
async def list_duties(
    company_id: str = Depends(get_company_id),
    db: AsyncSession = Depends(get_db),
):
    duties = await MasterDataRepository(db).list_duties(company_id)
    return ok(data=[_duty_to_detail(d).model_dump(mode="json") for d in duties])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_duty(
    body: DutyTaxIn,
    company_id: str = Depends(get_company_id),
    user_id: str | None = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    duty = await MasterDataRepository(db).create_duty(company_id, _duty_data(body), user_id)
    logger.info("Created duty %s (%s) for company %s", duty.name, duty.id, company_id)
    return ok(data=_duty_to_detail(duty).model_dump(mode="json"), message="Duty created")


@router.put("/{duty_id}", response_model=dict)
async def update_duty(
    duty_id: str,
    body: DutyTaxIn,
    company_id: str = Depends(get_company_id),
    db: AsyncSession = Depends(get_db),
):
    duty = await MasterDataRepository(db).update_duty(company_id, _parse_id(duty_id), _duty_data(body))
    if not duty:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Duty not found")
    return ok(data=_duty_to_detail(duty).model_dump(mode="json"), message="Duty updated")


@router.delete("/{duty_id}", response_model=dict)
async def delete_duty(
    duty_id: str,
    company_id: str = Depends(get_company_id),
    db: AsyncSession = Depends(get_db),
):
    if not await MasterDataRepository(db).soft_delete_duty(company_id, _parse_id(duty_id)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Duty not found")
    return ok(message="Duty deleted")
