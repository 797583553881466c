"""Invoice routes: drafting, finalizing and cancelling."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.invoice import Invoice
from backend.app.schemas.invoice import InvoiceCancel, InvoiceCreate, InvoiceFinalized, InvoiceRead, InvoiceUpdate
from backend.app.services.cancellation import cancel_invoice
from backend.app.services.finalization import finalize_invoice
from backend.app.services.invoices import (
    create_draft_invoice,
    delete_draft_invoice,
    get_invoice,
    mark_overdue_invoices,
    update_draft_invoice,
)
from backend.app.services.reports import get_invoice_summary

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("/summary")
async def invoice_summary(project_id: int | None = None, db: Session = Depends(get_db)):
    return get_invoice_summary(db, project_id=project_id)


@router.get("/", response_model=List[InvoiceRead])
async def list_invoices(
    status: str | None = None,
    project_id: int | None = None,
    skip: int = 0,
    limit: int = 50,
    sort_by: str = "created_at",
    sort_order: str = "desc",
    db: Session = Depends(get_db),
):
    query = db.query(Invoice)
    if status:
        query = query.filter(Invoice.status == status)
    if project_id:
        query = query.filter(Invoice.project_id == project_id)

    supported_sort_fields = {
        "created_at": Invoice.created_at,
        "status": Invoice.status,
        "final_amount": Invoice.final_amount,
        "due_date": Invoice.due_date,
    }
    if sort_by not in supported_sort_fields:
        raise HTTPException(status_code=400, detail="Invalid sort_by value")
    sort_order_normalized = (sort_order or "desc").lower()
    if sort_order_normalized not in {"asc", "desc"}:
        raise HTTPException(status_code=400, detail="Invalid sort_order value")
    sort_column = supported_sort_fields[sort_by]
    if sort_order_normalized == "asc":
        order_by_clause = [sort_column.asc(), Invoice.id.asc()]
    else:
        order_by_clause = [sort_column.desc(), Invoice.id.desc()]

    query = query.order_by(*order_by_clause).offset(skip).limit(limit)
    return query.all()


@router.post("/", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
async def create_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)):
    return create_draft_invoice(
        db,
        project_id=payload.project_id,
        task_ids=payload.task_ids,
        recipient_email=payload.recipient_email,
        recipient_name=payload.recipient_name,
        tax_amount=payload.tax_amount,
        discount_amount=payload.discount_amount,
        due_date=payload.due_date,
        notes=payload.notes,
    )


@router.post("/mark-overdue", response_model=List[InvoiceRead])
async def mark_overdue(db: Session = Depends(get_db)):
    return mark_overdue_invoices(db)


@router.get("/{invoice_id}", response_model=InvoiceRead)
async def read_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return get_invoice(db, invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
async def update_invoice(invoice_id: int, payload: InvoiceUpdate, db: Session = Depends(get_db)):
    return update_draft_invoice(db, invoice_id, payload.model_dump(exclude_unset=True))


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: int, db: Session = Depends(get_db)):
    delete_draft_invoice(db, invoice_id)
    return {"status": "deleted", "id": invoice_id}


@router.post("/{invoice_id}/finalize", response_model=InvoiceFinalized)
async def finalize(invoice_id: int, db: Session = Depends(get_db)):
    invoice, receivables = finalize_invoice(db, invoice_id)
    return {"invoice": invoice, "receivables": receivables}


@router.post("/{invoice_id}/cancel", response_model=InvoiceRead)
async def cancel(invoice_id: int, payload: InvoiceCancel, db: Session = Depends(get_db)):
    return cancel_invoice(db, invoice_id, payload.reason)
