"""Tax liability endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backend.app.core.time import utc_today
from backend.app.db.session import get_db
from backend.app.models.tax_payment import TaxPayment
from backend.app.schemas.tax import TaxPaymentCreate, TaxPaymentRead
from backend.app.services.reports import get_tax_summary

router = APIRouter(prefix="/tax", tags=["tax"])


@router.get("/summary")
async def tax_summary(db: Session = Depends(get_db)):
    return get_tax_summary(db)


@router.get("/payments", response_model=List[TaxPaymentRead])
async def list_tax_payments(db: Session = Depends(get_db)):
    return db.query(TaxPayment).order_by(TaxPayment.payment_date.desc(), TaxPayment.id.desc()).all()


@router.post("/payments", response_model=TaxPaymentRead, status_code=status.HTTP_201_CREATED)
async def create_tax_payment(payload: TaxPaymentCreate, db: Session = Depends(get_db)):
    payment = TaxPayment(
        amount=payload.amount,
        payment_date=payload.payment_date or utc_today(),
        notes=(payload.notes or "").strip() or None,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment
