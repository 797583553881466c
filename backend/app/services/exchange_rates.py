"""USD exchange-rate lookups for display-only conversion.

Rates are cached in-process. When the upstream service is unreachable the
last good rate is served, and if none was ever fetched the configured
fallback rate is used so display conversion never blocks billing. A failed
fetch is remembered for the same TTL, so a down upstream is retried once per
window rather than on every request.
"""

import logging
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation

import requests

from backend.app.core.settings import get_settings
from backend.app.core.time import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExchangeRate:
    currency: str
    rate: Decimal
    source: str
    fetched_at: datetime


class ExchangeRateProvider:
    def __init__(
        self,
        url: str,
        currency: str,
        fallback_rate: Decimal,
        ttl_seconds: int = 3600,
        timeout: float = 5,
        api_key: str | None = None,
        clock=time.monotonic,
    ):
        self.url = url
        self.currency = currency
        self.fallback_rate = fallback_rate
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self.api_key = api_key
        self._cached: ExchangeRate | None = None
        self._cached_monotonic = 0.0
        self._clock = clock
        self._lock = threading.Lock()

    def _fetch(self) -> Decimal:
        headers = {"apikey": self.api_key} if self.api_key else None
        response = requests.get(self.url, headers=headers, timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        rates = payload.get("rates") or {}
        if self.currency not in rates:
            raise ValueError(f"Response has no {self.currency} rate")
        try:
            rate = Decimal(str(rates[self.currency]))
        except InvalidOperation as exc:
            raise ValueError(f"Unparseable {self.currency} rate") from exc
        if rate <= 0:
            raise ValueError(f"Non-positive {self.currency} rate")
        return rate

    def _served(self) -> ExchangeRate:
        cached = self._cached
        if cached.source == "fallback":
            return cached
        return ExchangeRate(self.currency, cached.rate, "cached", cached.fetched_at)

    def get_rate(self, force_refresh: bool = False) -> ExchangeRate:
        with self._lock:
            fresh = self._cached is not None and self._clock() - self._cached_monotonic < self.ttl_seconds
            if fresh and not force_refresh:
                return self._served()
            try:
                rate = self._fetch()
            except (requests.RequestException, ValueError) as exc:
                if self._cached is not None and self._cached.source != "fallback":
                    logger.warning("Exchange rate refresh failed (%s); serving cached rate", exc)
                else:
                    logger.warning("Exchange rate fetch failed (%s); using fallback %s", exc, self.fallback_rate)
                    self._cached = ExchangeRate(self.currency, self.fallback_rate, "fallback", utc_now())
                self._cached_monotonic = self._clock()
                return self._served()
            self._cached = ExchangeRate(self.currency, rate, "live", utc_now())
            self._cached_monotonic = self._clock()
            return self._cached


_provider: ExchangeRateProvider | None = None


def get_exchange_rate_provider() -> ExchangeRateProvider:
    global _provider
    if _provider is None:
        settings = get_settings()
        api_key = settings.exchange_rate_api_key or None
        _provider = ExchangeRateProvider(
            url=settings.exchange_rate_premium_url if api_key else settings.exchange_rate_url,
            currency=settings.exchange_rate_currency,
            fallback_rate=settings.fallback_exchange_rate,
            ttl_seconds=settings.exchange_rate_ttl_seconds,
            timeout=settings.exchange_rate_timeout_seconds,
            api_key=api_key,
        )
    return _provider
