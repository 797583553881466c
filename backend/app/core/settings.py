import os
from decimal import Decimal


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    def __init__(self):
        self.app_name = "LedgerDesk"
        self.api_version = "1.0.0"
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./ledgerdesk.db")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins = _env_list("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")

        self.exchange_rate_currency = os.getenv("EXCHANGE_RATE_CURRENCY", "INR")
        self.exchange_rate_api_key = os.getenv("EXCHANGE_RATE_API_KEY", "")
        self.exchange_rate_url = os.getenv(
            "EXCHANGE_RATE_URL",
            f"https://api.frankfurter.app/latest?from=USD&to={self.exchange_rate_currency}",
        )
        self.exchange_rate_premium_url = (
            "https://api.apilayer.com/exchangerates_data/latest"
            f"?base=USD&symbols={self.exchange_rate_currency}"
        )
        self.fallback_exchange_rate = Decimal(os.getenv("FALLBACK_EXCHANGE_RATE", "83.5"))
        self.exchange_rate_ttl_seconds = int(os.getenv("EXCHANGE_RATE_TTL_SECONDS", "3600"))
        self.exchange_rate_timeout_seconds = float(os.getenv("EXCHANGE_RATE_TIMEOUT_SECONDS", "5"))

        self.tax_rate = Decimal(os.getenv("TAX_RATE", "0.15"))
        self.invoice_number_prefix = os.getenv("INVOICE_NUMBER_PREFIX", "INV")


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
