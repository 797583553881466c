"""Invoice finalizer: the only place receivables are created."""

import logging

from sqlalchemy.orm import Session

from backend.app.core.exceptions import StateConflictError
from backend.app.core.time import utc_now
from backend.app.models.invoice import Invoice
from backend.app.models.receivable import Receivable
from backend.app.services.invoices import get_invoice
from backend.app.services.tasks import advance_invoice_status

logger = logging.getLogger(__name__)


def _upsert_receivable(db: Session, invoice: Invoice, item) -> Receivable:
    receivable = db.query(Receivable).filter(Receivable.task_id == item.task_id).first()
    if receivable is None:
        receivable = Receivable(task_id=item.task_id)
        db.add(receivable)
    receivable.project_id = invoice.project_id
    receivable.invoice_id = invoice.id
    receivable.amount = item.amount
    receivable.hours_billed = item.hours_billed
    receivable.rate_used = item.rate
    receivable.status = "open"
    receivable.paid_at = None
    return receivable


def finalize_invoice(db: Session, invoice_id: int) -> tuple[Invoice, list[Receivable]]:
    """Move a draft to sent and open one receivable per invoiced task."""
    invoice = get_invoice(db, invoice_id)
    if invoice.status != "draft":
        raise StateConflictError(f"Invoice {invoice.id} is {invoice.status}; only drafts can be finalized")

    try:
        receivables = []
        for item in invoice.items:
            receivables.append(_upsert_receivable(db, invoice, item))
            advance_invoice_status(item.task, "invoiced")
        invoice.status = "sent"
        invoice.sent_at = utc_now()
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(invoice)
    for receivable in receivables:
        db.refresh(receivable)
    logger.info(
        "Finalized invoice %s (%s): %s receivables opened",
        invoice.id,
        invoice.invoice_number,
        len(receivables),
    )
    return invoice, receivables
