"""Project model: the billing contract a task belongs to."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now

PROJECT_STATUSES = ("active", "completed", "on_hold")
PRIORITIES = ("low", "medium", "high")
RATE_TYPES = ("hourly", "fixed")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="active")
    priority = Column(String(20), nullable=False, default="medium")
    rate_type = Column(String(20), nullable=False, default="hourly")
    hourly_rate = Column(Numeric(10, 2), nullable=True)
    fixed_rate = Column(Numeric(10, 2), nullable=True)
    conversion_factor = Column(Numeric(10, 4), nullable=False, default=Decimal("1.0000"))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)

    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="project")
    receivables = relationship("Receivable", back_populates="project")
