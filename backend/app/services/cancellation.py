"""Cancellation handler: reverses a paid invoice while keeping the audit trail.

Revenue records are never touched here; they remain the history of what was
actually received even though the invoice and receivables read as cancelled.
"""

import logging

from sqlalchemy.orm import Session

from backend.app.core.exceptions import StateConflictError, ValidationError
from backend.app.core.time import utc_now
from backend.app.models.invoice import Invoice
from backend.app.models.receivable import Receivable
from backend.app.services.invoices import get_invoice
from backend.app.services.money import ZERO, quantize_money
from backend.app.services.tasks import advance_invoice_status, mark_rebill_blocked

logger = logging.getLogger(__name__)


def _append_note(existing: str | None, note: str) -> str:
    return f"{existing}\n\n{note}" if existing else note


def cancel_invoice(db: Session, invoice_id: int, reason: str) -> Invoice:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A cancellation reason is required")

    invoice = get_invoice(db, invoice_id)
    if invoice.status != "paid":
        raise StateConflictError(f"Invoice {invoice.id} is {invoice.status}; only paid invoices can be cancelled")

    now = utc_now()
    stamp = now.date().isoformat()
    try:
        task_ids = []
        for item in invoice.items:
            task = item.task
            advance_invoice_status(task, "cancelled")
            mark_rebill_blocked(task)
            task_ids.append(task.id)

        receivables = db.query(Receivable).filter(Receivable.task_id.in_(task_ids)).all() if task_ids else []
        for receivable in receivables:
            original = quantize_money(receivable.amount)
            receivable.original_amount = original
            receivable.status = "cancelled"
            receivable.cancelled_at = now
            receivable.notes = _append_note(
                receivable.notes,
                f"Cancelled due to invoice {invoice.invoice_number} cancellation on {stamp}. "
                f"Original amount: {original}",
            )

        original_total = quantize_money(invoice.total_amount)
        original_final = quantize_money(invoice.final_amount)
        invoice.original_total_amount = original_total
        invoice.original_final_amount = original_final
        invoice.cancellation_reason = reason
        invoice.cancelled_at = now
        invoice.notes = _append_note(
            invoice.notes,
            f"CANCELLED: {reason}\n"
            f"Original total amount: {original_total}\n"
            f"Original final amount: {original_final}\n"
            f"Cancelled on: {stamp}",
        )
        invoice.total_amount = ZERO
        invoice.final_amount = ZERO
        invoice.status = "cancelled"
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    logger.info(
        "Cancelled invoice %s (%s): %s tasks, %s receivables, original final %s",
        invoice.id,
        invoice.invoice_number,
        len(task_ids),
        len(receivables),
        original_final,
    )
    return invoice
