from __future__ import annotations

"""Concrete rate sources and factory.

'external-http' talks to exchangerate-api.com (free tier, no key required).
'static' returns fixed placeholder rates so the service can run offline.
"""
import logging
from typing import Any, Dict, Optional

from budgetwise.core.config import Settings
from budgetwise.services.http_client import get_json
from .base import RateSource
from .errors import FetchError, ParseError

logger = logging.getLogger("budgetwise.rates.providers")

# Units per 1 USD; rough placeholders only
_STATIC_USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.5,
    "PKR": 283.5,
    "INR": 83.2,
    "CAD": 1.36,
    "AUD": 1.52,
    "CHF": 0.88,
    "CNY": 7.24,
}


def _parse_rates(data: Dict[str, Any], base_currency: str) -> Dict[str, float]:
    raw = data.get("rates")
    if not isinstance(raw, dict) or not raw:
        raise ParseError("rate provider response has no 'rates' mapping")
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"non-numeric rate for {code!r}: {value!r}")
        if value <= 0:
            raise ParseError(f"non-positive rate for {code!r}: {value!r}")
        rates[str(code).upper()] = float(value)
    rates.setdefault(base_currency, 1.0)
    return rates


class StaticRateSource(RateSource):
    def __init__(self, rates: Optional[Dict[str, float]] = None):
        self._rates = dict(rates or _STATIC_USD_RATES)

    def fetch_rates(self, base_currency: str) -> Dict[str, float]:  # type: ignore[override]
        base_currency = base_currency.upper()
        pivot = self._rates.get(base_currency)
        if pivot is None:
            raise FetchError(f"static rates do not cover base {base_currency}")
        return {c: v / pivot for c, v in self._rates.items()}


class ExternalHTTPRateSource(RateSource):
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    def url_for(self, base_currency: str) -> str:
        return f"{self._base_url}/{base_currency.upper()}"

    def fetch_rates(self, base_currency: str) -> Dict[str, float]:  # type: ignore[override]
        base_currency = base_currency.upper()
        url = self.url_for(base_currency)
        logger.info("fetching exchange rates for base %s", base_currency)
        data = get_json(
            url, timeout=self._timeout, retries=self._retries, backoff=self._backoff
        )
        rates = _parse_rates(data, base_currency)
        logger.debug("fetched %d rates for base %s", len(rates), base_currency)
        return rates


def make_rate_source(kind: str, settings: Settings) -> RateSource:
    if kind == "static":
        return StaticRateSource()
    if kind == "external-http":
        return ExternalHTTPRateSource(
            str(settings.exchange_api_base_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    raise ValueError(f"Unknown rate provider kind '{kind}'")
