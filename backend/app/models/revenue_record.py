"""Revenue record model: one payment applied to a receivable. Append-only."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class RevenueRecord(Base):
    __tablename__ = "revenue_records"

    id = Column(Integer, primary_key=True, index=True)
    receivable_id = Column(Integer, ForeignKey("receivables.id"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    notes = Column(Text, nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    receivable = relationship("Receivable", back_populates="revenue_records")
