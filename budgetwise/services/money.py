"""Money / rounding helpers.

Centralized so the conversion endpoint, the client facade and any template
code use identical rounding semantics:

- precise(): 15 decimal places, applied to every converted amount and rate
  so repeated round trips do not drift.
- display_round(): 0 places for zero-decimal currencies, 2 otherwise. Only
  for presentation, never for values headed to storage.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

STORAGE_PRECISION = 15
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "PKR", "KRW", "VND", "IDR"})

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "CHF": "Fr",
    "CNY": "¥",
    "INR": "₹",
    "PKR": "₨",
}


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def precise(value: float) -> float:
    return round(value, STORAGE_PRECISION)


def decimals_for(currency: str, zero_decimal: Optional[Iterable[str]] = None) -> int:
    codes = ZERO_DECIMAL_CURRENCIES if zero_decimal is None else zero_decimal
    return 0 if currency.upper() in codes else 2


def display_round(
    value: float, currency: str, zero_decimal: Optional[Iterable[str]] = None
) -> float:
    if decimals_for(currency, zero_decimal) == 0:
        return float(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return round2(value)


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())


def format_amount(
    value: float, currency: str, zero_decimal: Optional[Iterable[str]] = None
) -> str:
    """Symbol, thousands separators and currency precision, e.g. '₨28,350'."""
    places = decimals_for(currency, zero_decimal)
    rounded = display_round(value, currency, zero_decimal)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{currency_symbol(currency)}{abs(rounded):,.{places}f}"
