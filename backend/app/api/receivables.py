"""Receivable routes and payment recording."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.db.session import get_db
from backend.app.models.receivable import Receivable
from backend.app.models.revenue_record import RevenueRecord
from backend.app.schemas.payment import PaymentCreate, RevenueRecordRead
from backend.app.schemas.receivable import ReceivableRead, ReceivableWithRevenue
from backend.app.services.payments import get_receivable, record_payment, remaining_amount, total_paid

router = APIRouter(prefix="/receivables", tags=["receivables"])


def _with_revenue(db: Session, receivable: Receivable) -> dict:
    data = ReceivableRead.model_validate(receivable).model_dump()
    data["total_revenue"] = total_paid(db, receivable.id)
    data["remaining_amount"] = remaining_amount(db, receivable)
    return data


@router.get("/", response_model=List[ReceivableWithRevenue])
async def list_receivables(
    status: str | None = None,
    project_id: int | None = None,
    db: Session = Depends(get_db),
):
    query = db.query(Receivable)
    if status:
        query = query.filter(Receivable.status == status)
    if project_id is not None:
        query = query.filter(Receivable.project_id == project_id)
    return [_with_revenue(db, receivable) for receivable in query.order_by(Receivable.created_at.desc()).all()]


@router.get("/{receivable_id}", response_model=ReceivableWithRevenue)
async def read_receivable(receivable_id: int, db: Session = Depends(get_db)):
    return _with_revenue(db, get_receivable(db, receivable_id))


@router.get("/{receivable_id}/payments", response_model=List[RevenueRecordRead])
async def list_payments(receivable_id: int, db: Session = Depends(get_db)):
    get_receivable(db, receivable_id)
    return (
        db.query(RevenueRecord)
        .filter(RevenueRecord.receivable_id == receivable_id)
        .order_by(RevenueRecord.recorded_at.asc(), RevenueRecord.id.asc())
        .all()
    )


@router.post("/{receivable_id}/payments", response_model=RevenueRecordRead, status_code=status.HTTP_201_CREATED)
async def create_payment(receivable_id: int, payload: PaymentCreate, db: Session = Depends(get_db)):
    return record_payment(db, receivable_id, payload.amount, notes=payload.notes)
