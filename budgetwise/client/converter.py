from __future__ import annotations

"""Conversion facade used by presentation code.

Decision procedure for convert():
    1. Same currency -> amount unchanged.
    2. Valid client-cached rate for the non-base side -> convert locally
       (divide going to base, multiply going from base). No network.
    3. force_refresh -> ask the conversion endpoint and cache the returned rate
       under the non-base currency.
    4. Otherwise -> lenient mode returns the amount unconverted, strict mode
       raises CacheMiss.

Endpoint failures follow the same lenient/strict split, except during an
explicit change_currency() where failure always raises CurrencyChangeError
so the caller can notify the user.

Rounding: display values are rounded per target currency (0 places for
zero-decimal currencies, 2 otherwise); amount_for_storage() keeps full
precision so edit/convert cycles do not drift.
"""
import logging
from typing import Iterable, Optional, Protocol

from budgetwise.core.config import Settings
from budgetwise.services.money import display_round, format_amount
from budgetwise.services.rates.conversion import ConversionResult, normalize_code
from budgetwise.services.rates.errors import (
    CacheMiss,
    CurrencyChangeError,
    RateError,
)
from .api_client import ConversionApiClient
from .rate_store import ClientRateCache, JsonFileStorage

logger = logging.getLogger("budgetwise.client.converter")


class SupportsConvert(Protocol):
    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        force_refresh: bool = False,
    ) -> ConversionResult: ...


class CurrencyConverter:
    def __init__(
        self,
        endpoint: SupportsConvert,
        store: ClientRateCache,
        *,
        base_currency: str = "USD",
        strict: bool = False,
        zero_decimal_currencies: Optional[Iterable[str]] = None,
    ):
        self._endpoint = endpoint
        self._store = store
        self.base_currency = normalize_code(base_currency)
        self.strict = strict
        self._zero_decimal = (
            frozenset(c.upper() for c in zero_decimal_currencies)
            if zero_decimal_currencies is not None
            else None
        )

    # Internal --------------------------------------------------
    def _cached_rate(self, currency: str) -> Optional[float]:
        rates = self._store.read(currency)
        if not rates:
            return None
        return rates.get(currency)

    def _finish(self, value: float, to_currency: str, round_for_display: bool) -> float:
        if round_for_display:
            return display_round(value, to_currency, self._zero_decimal)
        return value

    def _fail_open(self, amount: float, err: RateError) -> float:
        if self.strict:
            raise err
        logger.warning("currency conversion unavailable, showing raw amount: %s", err)
        return amount

    # Public API -----------------------------------------------
    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        *,
        force_refresh: bool = False,
        round_for_display: bool = True,
    ) -> float:
        from_currency = normalize_code(from_currency)
        to_currency = normalize_code(to_currency)
        if from_currency == to_currency:
            return amount

        base = self.base_currency
        # Only pairs touching the base currency can be served from one cached rate
        local_key: Optional[str] = None
        if from_currency == base:
            local_key = to_currency
        elif to_currency == base:
            local_key = from_currency

        if local_key is not None and not force_refresh:
            rate = self._cached_rate(local_key)
            if rate:
                value = amount / rate if to_currency == base else amount * rate
                logger.debug(
                    "client cache hit %s -> %s (rate %s)", from_currency, to_currency, rate
                )
                return self._finish(value, to_currency, round_for_display)

        if not force_refresh:
            return self._fail_open(amount, CacheMiss(local_key or to_currency))

        try:
            result = self._endpoint.convert(
                amount, from_currency, to_currency, force_refresh=True
            )
        except RateError as e:
            return self._fail_open(amount, e)

        # Cross pairs have no non-base side to key by; the active record stays
        if local_key is not None:
            self._store.write({local_key: result.rate}, local_key)
        return self._finish(result.converted_amount, to_currency, round_for_display)

    def display_amount(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        force_refresh: bool = False,
    ) -> float:
        return self.convert(
            amount,
            from_currency,
            to_currency,
            force_refresh=force_refresh,
            round_for_display=True,
        )

    def amount_for_storage(self, amount: float, from_currency: str) -> float:
        """Convert user input back to the base currency at full precision."""
        return self.convert(
            amount, from_currency, self.base_currency, round_for_display=False
        )

    def change_currency(self, new_currency: str) -> float:
        """Switch the active preferred currency and return its fresh rate."""
        new_currency = normalize_code(new_currency)
        self._store.clear()
        if new_currency == self.base_currency:
            return 1.0
        try:
            result = self._endpoint.convert(
                1.0, self.base_currency, new_currency, force_refresh=True
            )
        except RateError as e:
            logger.error("rate refresh for %s failed: %s", new_currency, e)
            raise CurrencyChangeError(new_currency, e) from e
        self._store.write({new_currency: result.rate}, new_currency)
        logger.info("active currency changed to %s (rate %s)", new_currency, result.rate)
        return result.rate

    def format_amount(self, amount: float, currency: str) -> str:
        return format_amount(amount, normalize_code(currency), self._zero_decimal)


def build_converter(
    settings: Settings, endpoint: Optional[SupportsConvert] = None
) -> CurrencyConverter:
    if endpoint is None:
        endpoint = ConversionApiClient(
            str(settings.conversion_api_url),
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
            backoff=settings.http_backoff_seconds,
        )
    store = ClientRateCache(
        JsonFileStorage(settings.client_cache_path),
        ttl_seconds=settings.client_cache_ttl_seconds,
    )
    return CurrencyConverter(
        endpoint,
        store,
        base_currency=settings.base_currency,
        strict=settings.strict_conversion,
        zero_decimal_currencies=settings.zero_decimal_currencies,
    )
