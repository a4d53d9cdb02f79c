from __future__ import annotations

"""Error taxonomy for rate fetching and currency conversion.

FetchError / ParseError originate at the rate source and propagate unchanged
through the server cache. UnsupportedCurrencyError is raised by conversion
when a code is absent from the fetched rate set. CacheMiss is a control-flow
signal used by the client facade; it only escapes in strict mode.
"""
from typing import Optional


class RateError(Exception):
    pass


class FetchError(RateError):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ParseError(RateError):
    pass


class UnsupportedCurrencyError(RateError):
    def __init__(self, currency: str):
        super().__init__(f"Unsupported currency: {currency}")
        self.currency = currency


class CacheMiss(RateError):
    def __init__(self, currency: str):
        super().__init__(f"No cached rate for {currency}")
        self.currency = currency


class CurrencyChangeError(RateError):
    """Refreshing rates after an explicit currency change failed."""

    def __init__(self, currency: str, cause: Exception):
        super().__init__(f"Could not load exchange rates for {currency}: {cause}")
        self.currency = currency
