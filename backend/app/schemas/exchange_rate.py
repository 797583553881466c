from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class ExchangeRateRead(BaseModel):
    base: str = "USD"
    currency: str
    rate: Decimal
    source: str
    fetched_at: datetime
