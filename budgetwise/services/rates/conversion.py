from __future__ import annotations

from dataclasses import dataclass
import logging
import math

from budgetwise.services.money import precise
from .base import SupportsRatesLookup
from .errors import UnsupportedCurrencyError

"""Currency conversion through the base currency.

Every conversion is normalised through the base currency using one
base-relative rate set from the server cache:

    base_amount = amount / rates[from]     (skipped when from == base)
    converted   = base_amount * rates[to]  (skipped when to == base)

Rate contract:
    The returned `rate` is always "units of the non-base currency per 1 unit
    of base" so a caller can keep ONE number per currency and reuse it in
    both directions: divide when converting to base, multiply when
    converting from base.
        X -> base : rate = rates[X]
        base -> Y : rate = rates[Y]
        X -> Y    : rate = rates[Y] (the `to` leg)
        X -> X    : rate = 1

Amounts and rates are rounded to 15 decimal places, far beyond display
precision, so A -> B -> A recovers A to within float noise.
"""

logger = logging.getLogger("budgetwise.rates.conversion")


@dataclass(frozen=True)
class ConversionResult:
    converted_amount: float
    rate: float
    from_currency: str
    to_currency: str

    def as_payload(self) -> dict:
        return {
            "convertedAmount": self.converted_amount,
            "rate": self.rate,
            "from": self.from_currency,
            "to": self.to_currency,
        }


def _rate_of(rates: dict, currency: str) -> float:
    rate = rates.get(currency)
    if not rate:
        raise UnsupportedCurrencyError(currency)
    return rate


def normalize_code(code: str) -> str:
    code = (code or "").strip().upper()
    if not code:
        raise ValueError("currency code must not be empty")
    return code


class RateConversionService:
    def __init__(self, rates: SupportsRatesLookup, base_currency: str = "USD"):
        self._rates = rates
        self.base_currency = normalize_code(base_currency)

    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        force_refresh: bool = False,
    ) -> ConversionResult:
        if not math.isfinite(amount) or amount < 0:
            raise ValueError("amount must be a finite, non-negative number")
        from_currency = normalize_code(from_currency)
        to_currency = normalize_code(to_currency)
        if from_currency == to_currency:
            return ConversionResult(amount, 1.0, from_currency, to_currency)

        base = self.base_currency
        rates = self._rates.get_rates(base, force_refresh=force_refresh)

        if from_currency == base:
            base_amount = amount
        else:
            base_amount = amount / _rate_of(rates, from_currency)

        if to_currency == base:
            converted = base_amount
            returned_rate = _rate_of(rates, from_currency)
        else:
            returned_rate = _rate_of(rates, to_currency)
            converted = base_amount * returned_rate

        logger.debug(
            "converted %s %s -> %s %s (rate %s)",
            amount,
            from_currency,
            converted,
            to_currency,
            returned_rate,
        )
        return ConversionResult(
            converted_amount=precise(converted),
            rate=precise(returned_rate),
            from_currency=from_currency,
            to_currency=to_currency,
        )
