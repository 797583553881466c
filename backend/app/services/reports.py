"""Read-side summaries: invoice totals by status and tax liability."""

from decimal import Decimal

from sqlalchemy.orm import Session

from backend.app.core.settings import get_settings
from backend.app.models.invoice import INVOICE_DOCUMENT_STATUSES, Invoice
from backend.app.models.receivable import Receivable
from backend.app.models.revenue_record import RevenueRecord
from backend.app.models.tax_payment import TaxPayment
from backend.app.services.money import ZERO, quantize_money, to_decimal


def get_invoice_summary(db: Session, project_id: int | None = None) -> dict:
    query = db.query(Invoice)
    if project_id is not None:
        query = query.filter(Invoice.project_id == project_id)

    by_status = {status: {"count": 0, "amount": ZERO} for status in INVOICE_DOCUMENT_STATUSES}
    cancelled_total = ZERO
    for invoice in query.all():
        bucket = by_status.setdefault(invoice.status, {"count": 0, "amount": ZERO})
        bucket["count"] += 1
        if invoice.status == "cancelled":
            original = invoice.original_final_amount
            amount = to_decimal(original if original is not None else invoice.final_amount)
            cancelled_total += amount
        else:
            amount = to_decimal(invoice.final_amount)
        bucket["amount"] += amount

    active_total = sum((data["amount"] for status, data in by_status.items() if status != "cancelled"), ZERO)
    paid_total = by_status["paid"]["amount"]
    outstanding_total = by_status["sent"]["amount"] + by_status["overdue"]["amount"]

    return {
        "by_status": {
            status: {"count": data["count"], "amount": str(quantize_money(data["amount"]))}
            for status, data in by_status.items()
        },
        "active_total": str(quantize_money(active_total)),
        "paid_total": str(quantize_money(paid_total)),
        "outstanding_total": str(quantize_money(outstanding_total)),
        "cancelled_total": str(quantize_money(cancelled_total)),
    }


def get_tax_summary(db: Session, tax_rate: Decimal | None = None) -> dict:
    """Tax owed on revenue from settled receivables, grouped by month."""
    rate = to_decimal(tax_rate if tax_rate is not None else get_settings().tax_rate)
    records = (
        db.query(RevenueRecord)
        .join(Receivable, RevenueRecord.receivable_id == Receivable.id)
        .filter(Receivable.status == "paid")
        .order_by(RevenueRecord.recorded_at.desc())
        .all()
    )

    revenue_by_period: dict[str, Decimal] = {}
    for record in records:
        period = record.recorded_at.strftime("%Y-%m")
        revenue_by_period[period] = revenue_by_period.get(period, ZERO) + to_decimal(record.amount)

    periods = []
    total_tax = ZERO
    for period in sorted(revenue_by_period, reverse=True):
        revenue = quantize_money(revenue_by_period[period])
        tax = quantize_money(revenue * rate)
        total_tax += tax
        periods.append({"period": period, "total_revenue": str(revenue), "tax_amount": str(tax)})

    total_paid = sum((to_decimal(p.amount) for p in db.query(TaxPayment).all()), ZERO)
    remaining = max(total_tax - total_paid, ZERO)
    return {
        "tax_rate": str(rate),
        "periods": periods,
        "total_tax": str(quantize_money(total_tax)),
        "total_tax_paid": str(quantize_money(total_paid)),
        "remaining_liability": str(quantize_money(remaining)),
    }
