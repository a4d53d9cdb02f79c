from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

ALLOWED_RATE_PROVIDERS = {"static", "external-http"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, RATES_CACHE_TTL_SECONDS, EXCHANGE_RATE_PROVIDER, STRICT_CONVERSION).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Budgetwise Currency Service"
    debug: bool = True
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")

    # Exchange rates / caching
    base_currency: str = "USD"
    exchange_api_base_url: AnyHttpUrl = "https://api.exchangerate-api.com/v4/latest"  # base currency appended as last path segment
    exchange_rate_provider: str = "external-http"
    rates_cache_ttl_seconds: int = 86400  # 24 hours

    # Outbound HTTP
    http_timeout_seconds: float = 5.0
    http_retries: int = 1
    http_backoff_seconds: float = 0.5

    # Client side (conversion facade)
    client_cache_filename: str = "currency_rates_cache.json"
    client_cache_path: Optional[Path] = None  # derived if not provided
    client_cache_ttl_seconds: int = 86400
    conversion_api_url: AnyHttpUrl = "http://127.0.0.1:8000/api/currency/convert"
    strict_conversion: bool = False
    zero_decimal_currencies: List[str] = ["JPY", "PKR", "KRW", "VND", "IDR"]

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        self.base_currency = self.base_currency.strip().upper()
        self.zero_decimal_currencies = [
            c.strip().upper() for c in self.zero_decimal_currencies
        ]
        if self.client_cache_path is None:
            self.client_cache_path = self.data_dir / self.client_cache_filename
        self.client_cache_path.parent.mkdir(parents=True, exist_ok=True)
        if self.exchange_rate_provider not in ALLOWED_RATE_PROVIDERS:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {ALLOWED_RATE_PROVIDERS}"
            )
        if self.rates_cache_ttl_seconds <= 0 or self.client_cache_ttl_seconds <= 0:
            raise ValueError("cache TTLs must be positive seconds")
        if self.http_retries < 0:
            raise ValueError("http_retries cannot be negative")


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
