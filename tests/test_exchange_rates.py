from decimal import Decimal

import pytest
import requests
from fastapi.testclient import TestClient

from backend.app.main import app
from backend.app.services import exchange_rates
from backend.app.services.exchange_rates import ExchangeRateProvider, get_exchange_rate_provider


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def calls(monkeypatch):
    recorded = []
    responses = []

    def fake_get(url, headers=None, timeout=None):
        recorded.append({"url": url, "headers": headers, "timeout": timeout})
        result = responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(exchange_rates.requests, "get", fake_get)
    return recorded, responses


def make_provider(**overrides):
    options = {"url": "https://rates.test/latest", "currency": "INR", "fallback_rate": Decimal("83.5")}
    options.update(overrides)
    return ExchangeRateProvider(**options)


def test_live_rate_is_fetched_then_cached(calls):
    recorded, responses = calls
    responses.append(FakeResponse({"rates": {"INR": 84.12}}))
    provider = make_provider(timeout=3)

    live = provider.get_rate()
    assert live.rate == Decimal("84.12")
    assert live.source == "live"
    assert recorded[0]["timeout"] == 3

    cached = provider.get_rate()
    assert cached.rate == Decimal("84.12")
    assert cached.source == "cached"
    assert len(recorded) == 1


def test_fallback_when_nothing_was_ever_fetched(calls):
    _, responses = calls
    responses.append(requests.ConnectionError("offline"))

    rate = make_provider().get_rate()
    assert rate.rate == Decimal("83.5")
    assert rate.source == "fallback"


def test_last_good_rate_served_when_refresh_fails(calls):
    _, responses = calls
    responses.extend([FakeResponse({"rates": {"INR": 82}}), FakeResponse({}, status_code=503)])
    provider = make_provider()
    provider.get_rate()

    rate = provider.get_rate(force_refresh=True)
    assert rate.rate == Decimal("82")
    assert rate.source == "cached"


def test_response_without_currency_uses_fallback(calls):
    _, responses = calls
    responses.append(FakeResponse({"rates": {"EUR": 0.9}}))

    assert make_provider().get_rate().source == "fallback"


def test_api_key_sent_as_header(calls):
    recorded, responses = calls
    responses.append(FakeResponse({"rates": {"INR": 83}}))

    make_provider(api_key="secret").get_rate()
    assert recorded[0]["headers"] == {"apikey": "secret"}


def test_exchange_rate_endpoint(calls):
    _, responses = calls
    responses.append(FakeResponse({"rates": {"INR": 83.25}}))
    app.dependency_overrides[get_exchange_rate_provider] = lambda: make_provider()
    try:
        resp = TestClient(app).get("/exchange-rate/")
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 200
    data = resp.json()
    assert data["base"] == "USD"
    assert data["currency"] == "INR"
    assert Decimal(data["rate"]) == Decimal("83.25")
    assert data["source"] == "live"


def test_failing_upstream_is_retried_once_per_ttl(calls):
    recorded, responses = calls
    responses.extend([requests.ConnectionError("offline"), requests.ConnectionError("offline")])
    now = [1000.0]
    provider = make_provider(ttl_seconds=60, clock=lambda: now[0])

    results = [provider.get_rate() for _ in range(3)]
    assert [r.source for r in results] == ["fallback", "fallback", "fallback"]
    assert all(r.rate == Decimal("83.5") for r in results)
    assert len(recorded) == 1

    now[0] += 61
    provider.get_rate()
    assert len(recorded) == 2


def test_failed_refresh_keeps_cached_rate_for_window(calls):
    recorded, responses = calls
    responses.extend([FakeResponse({"rates": {"INR": 82}}), requests.Timeout("slow")])
    now = [0.0]
    provider = make_provider(ttl_seconds=10, clock=lambda: now[0])
    provider.get_rate()

    now[0] = 11
    assert provider.get_rate().source == "cached"
    assert provider.get_rate().rate == Decimal("82")
    assert len(recorded) == 2
