"""Tax payment model."""

from sqlalchemy import Column, Date, DateTime, Integer, Numeric, Text

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now, utc_today


class TaxPayment(Base):
    __tablename__ = "tax_payments"

    id = Column(Integer, primary_key=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(Date, nullable=False, default=utc_today)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
