"""Receivable model: the amount owed for one invoiced task."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

RECEIVABLE_STATUSES = ("open", "paid", "cancelled")


class Receivable(Base):
    __tablename__ = "receivables"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id"), nullable=False, unique=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    hours_billed = Column(Numeric(8, 2), nullable=False)
    rate_used = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="open", index=True)
    paid_at = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)
    original_amount = Column(Numeric(10, 2), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    task = relationship("Task", back_populates="receivable")
    project = relationship("Project", back_populates="receivables")
    invoice = relationship("Invoice", back_populates="receivables")
    revenue_records = relationship("RevenueRecord", back_populates="receivable", order_by="RevenueRecord.id")
