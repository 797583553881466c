from decimal import Decimal

from backend.app.core.settings import Settings, get_settings


def test_settings_defaults():
    settings = get_settings()
    assert settings.app_name == "LedgerDesk"
    assert settings.environment == "development"
    assert isinstance(settings.database_url, str) and settings.database_url
    assert settings.invoice_number_prefix == "INV"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("TAX_RATE", "0.20")
    monkeypatch.setenv("FALLBACK_EXCHANGE_RATE", "90")
    monkeypatch.setenv("EXCHANGE_RATE_CURRENCY", "EUR")
    monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")

    settings = Settings()

    assert settings.tax_rate == Decimal("0.20")
    assert settings.fallback_exchange_rate == Decimal("90")
    assert settings.exchange_rate_url.endswith("to=EUR")
    assert settings.cors_origins == ["https://a.example", "https://b.example"]
