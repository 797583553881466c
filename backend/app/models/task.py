"""Task model: the unit of billable work."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now, utc_today

TASK_STATUSES = ("todo", "in_progress", "review", "completed", "hold", "archived")
INVOICE_STATUSES = ("not_invoiced", "created", "invoiced", "paid", "cancelled")


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="todo", index=True)
    priority = Column(String(20), nullable=False, default="medium")
    hours_worked = Column(Numeric(8, 2), nullable=False, default=Decimal("0.00"))
    estimated_hours = Column(Numeric(8, 2), nullable=True)
    progress_percentage = Column(Integer, nullable=False, default=0)
    invoice_status = Column(String(20), nullable=False, default="not_invoiced", index=True)
    rebill_blocked = Column(Boolean, nullable=False, default=False)
    created_on = Column(Date, nullable=False, default=utc_today)
    completed_on = Column(Date, nullable=True)
    previous_status = Column(String(20), nullable=True)
    archived_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    project = relationship("Project", back_populates="tasks")
    invoice_items = relationship("InvoiceItem", back_populates="task")
    receivable = relationship("Receivable", back_populates="task", uselist=False)
