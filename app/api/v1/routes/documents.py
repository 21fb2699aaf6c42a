# app/api/v1/routes/documents.py
"""
Sales invoice and purchase bill endpoints: recalculation, form edits,
save (insert / update), listing, soft delete and PDF download.
"""

from __future__ import annotations

import io
import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.deps import get_company_id, get_display_settings, get_user_id
from app.api.v1.envelope import ok, paginated
from app.api.v1.schemas.documents import DocumentBody, EditRequest
from app.core.db import get_db
from app.domain.models.billing import PurchaseBill, SalesInvoice
from app.domain.services.document_editor import DocumentEditor
from app.domain.services.document_records import SALE, DocumentValidationError
from app.domain.services.formatting import DisplaySettings
from app.domain.services.recalculation import recalculate
from app.infrastructure.db.repositories import (
    BillNotFoundError,
    BillRepository,
    MasterDataRepository,
)
from app.infrastructure.db.repositories.bill_repository import bill_to_record

logger = logging.getLogger("api.v1.documents")

router = APIRouter(prefix="/documents", tags=["Documents"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _document_json(document: PurchaseBill | SalesInvoice) -> dict:
    return document.model_dump(mode="json")


async def _load(
    repo: BillRepository,
    company_id: str,
    document_id: str,
    display: DisplaySettings,
) -> PurchaseBill | SalesInvoice:
    bill = await repo.get(company_id, document_id)
    if not bill:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentEditor.load(bill_to_record(bill), display=display).document


async def _save(
    document: PurchaseBill | SalesInvoice,
    company_id: str,
    user_id: str | None,
    db: AsyncSession,
    document_id: str | None = None,
) -> PurchaseBill | SalesInvoice:
    editor = DocumentEditor(document)
    try:
        record = editor.submit(company_id=company_id, user_id=user_id)
    except DocumentValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))

    record.pop("id", None)
    try:
        saved_id = await BillRepository(db).save(record, bill_id=document_id)
    except BillNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return editor.document.model_copy(update={"id": str(saved_id)})


# ---------------------------------------------------------------------------
# Computation
# ---------------------------------------------------------------------------

@router.post("/recalculate", response_model=dict)
async def recalculate_document(body: DocumentBody):
    """Recompute line totals, GST split, charges, round-off and grand total."""
    return ok(data=_document_json(recalculate(body.root)))


@router.post("/blank", response_model=dict)
async def blank_document(
    doc_type: Literal["Sale", "Purchase"] = Query(default="Sale"),
    company_id: str = Depends(get_company_id),
    display: DisplaySettings = Depends(get_display_settings),
    db: AsyncSession = Depends(get_db),
):
    """A new document dated today; sales invoices carry the tenant's duties & taxes."""
    master_ledger = []
    if doc_type == SALE:
        master_ledger = await MasterDataRepository(db).master_ledger(company_id)
    editor = DocumentEditor.blank(doc_type, master_ledger=master_ledger, display=display)
    return ok(data=_document_json(editor.document))


@router.post("/edits", response_model=dict)
async def apply_edits(
    body: EditRequest,
    company_id: str = Depends(get_company_id),
    display: DisplaySettings = Depends(get_display_settings),
    db: AsyncSession = Depends(get_db),
):
    """
    Apply form edits in order, recalculating after each one. Item and party
    names are matched against the tenant's stock items and parties.
    """
    masters = MasterDataRepository(db)
    editor = DocumentEditor(
        body.document,
        catalog=await masters.list_catalog(company_id),
        parties=await masters.list_parties(company_id),
        display=display,
    )
    for n, edit in enumerate(body.edits):
        try:
            getattr(editor, edit.op)(**edit.args)
        except (TypeError, ValueError, IndexError) as exc:
            logger.warning("Rejected edit %s on %s: %s", edit.op, body.document.doc_type, exc)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Edit #{n} ({edit.op}) failed: {exc}",
            )
    return ok(data=_document_json(editor.document))


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def create_document(
    body: DocumentBody,
    company_id: str = Depends(get_company_id),
    user_id: str | None = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Validate, recalculate and store a new bill or invoice."""
    saved = await _save(body.root, company_id, user_id, db)
    return ok(data=_document_json(saved), message="Document saved")


@router.put("/{document_id}", response_model=dict)
async def update_document(
    document_id: str,
    body: DocumentBody,
    company_id: str = Depends(get_company_id),
    user_id: str | None = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    saved = await _save(body.root, company_id, user_id, db, document_id=document_id)
    return ok(data=_document_json(saved), message="Document updated")


@router.get("", response_model=dict)
async def list_documents(
    doc_type: Literal["Sale", "Purchase"] | None = Query(default=None),
    date_from: date | None = Query(default=None, description="Filter: date >= this"),
    date_to: date | None = Query(default=None, description="Filter: date <= this"),
    q: str | None = Query(default=None, description="Search party, number or GSTIN"),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    company_id: str = Depends(get_company_id),
    display: DisplaySettings = Depends(get_display_settings),
    db: AsyncSession = Depends(get_db),
):
    """List the tenant's live bills and invoices, newest first."""
    rows, total = await BillRepository(db).list_for_company(
        company_id,
        doc_type=doc_type,
        date_from=date_from,
        date_to=date_to,
        search=q,
        limit=limit,
        offset=offset,
    )
    items = [
        _document_json(DocumentEditor.load(bill_to_record(row), display=display).document)
        for row in rows
    ]
    return paginated(items=items, total=total, limit=limit, offset=offset)


@router.get("/{document_id}", response_model=dict)
async def get_document(
    document_id: str,
    company_id: str = Depends(get_company_id),
    display: DisplaySettings = Depends(get_display_settings),
    db: AsyncSession = Depends(get_db),
):
    document = await _load(BillRepository(db), company_id, document_id, display)
    return ok(data=_document_json(document))


@router.delete("/{document_id}", response_model=dict)
async def delete_document(
    document_id: str,
    company_id: str = Depends(get_company_id),
    db: AsyncSession = Depends(get_db),
):
    """Soft delete: the row is flagged, never removed."""
    if not await BillRepository(db).soft_delete(company_id, document_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return ok(message="Document deleted")


@router.get("/{document_id}/pdf")
async def download_pdf(
    document_id: str,
    company_id: str = Depends(get_company_id),
    display: DisplaySettings = Depends(get_display_settings),
    db: AsyncSession = Depends(get_db),
):
    document = await _load(BillRepository(db), company_id, document_id, display)

    from app.domain.services.document_pdf import generate_document_pdf

    pdf_bytes = generate_document_pdf(document, display)
    filename = f"{document.doc_type.lower()}_{document.document_number or document.id}.pdf"
    return StreamingResponse(
        io.BytesIO(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
