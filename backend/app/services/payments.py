"""Payment recorder: applies payments to receivables and cascades paid status."""

import logging
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from backend.app.core.exceptions import NotFoundError, OverpaymentError, StateConflictError, ValidationError
from backend.app.core.time import utc_now
from backend.app.models.invoice import Invoice
from backend.app.models.invoice_item import InvoiceItem
from backend.app.models.receivable import Receivable
from backend.app.models.revenue_record import RevenueRecord
from backend.app.models.task import Task
from backend.app.services.money import ZERO, quantize_money, to_decimal
from backend.app.services.tasks import advance_invoice_status

logger = logging.getLogger(__name__)

PAYABLE_INVOICE_STATUSES = ("sent", "overdue")


def get_receivable(db: Session, receivable_id: int, for_update: bool = False) -> Receivable:
    query = db.query(Receivable).filter(Receivable.id == receivable_id)
    if for_update:
        query = query.with_for_update()
    receivable = query.first()
    if receivable is None:
        raise NotFoundError("Receivable", receivable_id)
    return receivable


def total_paid(db: Session, receivable_id: int) -> Decimal:
    total = (
        db.query(func.coalesce(func.sum(RevenueRecord.amount), 0))
        .filter(RevenueRecord.receivable_id == receivable_id)
        .scalar()
    )
    return quantize_money(total)


def remaining_amount(db: Session, receivable: Receivable) -> Decimal:
    remaining = to_decimal(receivable.amount) - total_paid(db, receivable.id)
    return max(quantize_money(remaining), ZERO)


def _invoices_fully_paid(db: Session, task_id: int) -> list[Invoice]:
    invoice_ids = [row[0] for row in db.query(InvoiceItem.invoice_id).filter(InvoiceItem.task_id == task_id).all()]
    settled = []
    for invoice in db.query(Invoice).filter(Invoice.id.in_(invoice_ids)).all():
        if invoice.status not in PAYABLE_INVOICE_STATUSES:
            continue
        statuses = (
            db.query(Task.invoice_status)
            .join(InvoiceItem, InvoiceItem.task_id == Task.id)
            .filter(InvoiceItem.invoice_id == invoice.id)
            .all()
        )
        if statuses and all(status == "paid" for (status,) in statuses):
            settled.append(invoice)
    return settled


def record_payment(db: Session, receivable_id: int, amount, notes: str | None = None) -> RevenueRecord:
    """Append a revenue record, closing the receivable (and invoice) once covered."""
    payment_amount = quantize_money(amount)
    if payment_amount <= ZERO:
        raise ValidationError("Payment amount must be greater than zero")

    try:
        receivable = get_receivable(db, receivable_id, for_update=True)
        if receivable.status != "open":
            raise StateConflictError(f"Receivable {receivable.id} is {receivable.status}")

        already_paid = total_paid(db, receivable.id)
        remaining = quantize_money(to_decimal(receivable.amount) - already_paid)
        if payment_amount > remaining:
            raise OverpaymentError(
                f"Payment of {payment_amount} exceeds remaining amount {remaining} on receivable {receivable.id}"
            )

        record = RevenueRecord(receivable_id=receivable.id, amount=payment_amount, notes=notes)
        db.add(record)

        if already_paid + payment_amount >= to_decimal(receivable.amount):
            now = utc_now()
            receivable.status = "paid"
            receivable.paid_at = now
            advance_invoice_status(receivable.task, "paid")
            db.flush()
            for invoice in _invoices_fully_paid(db, receivable.task_id):
                invoice.status = "paid"
                invoice.paid_at = now
                logger.info("Invoice %s (%s) fully paid", invoice.id, invoice.invoice_number)
            logger.info("Receivable %s closed", receivable.id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(record)
    logger.info("Recorded payment %s of %s on receivable %s", record.id, payment_amount, receivable_id)
    return record
