"""Exchange rate endpoint."""

from fastapi import APIRouter, Depends

from backend.app.schemas.exchange_rate import ExchangeRateRead
from backend.app.services.exchange_rates import ExchangeRateProvider, get_exchange_rate_provider

router = APIRouter(prefix="/exchange-rate", tags=["exchange-rate"])


@router.get("/", response_model=ExchangeRateRead)
def current_rate(refresh: bool = False, provider: ExchangeRateProvider = Depends(get_exchange_rate_provider)):
    rate = provider.get_rate(force_refresh=refresh)
    return ExchangeRateRead(currency=rate.currency, rate=rate.rate, source=rate.source, fetched_at=rate.fetched_at)
