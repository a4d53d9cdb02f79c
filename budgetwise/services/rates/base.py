from __future__ import annotations

"""Rate source abstraction.

A rate source is a pure I/O boundary: it returns the full rate mapping for a
base currency and performs no caching. Retries belong to the HTTP layer.
"""
from abc import ABC, abstractmethod
from typing import Dict, Protocol


class RateSource(ABC):
    @abstractmethod
    def fetch_rates(self, base_currency: str) -> Dict[str, float]:
        """Return units of each currency per 1 unit of base_currency."""
        raise NotImplementedError


class SupportsRatesLookup(Protocol):
    def get_rates(
        self, base_currency: str, force_refresh: bool = False
    ) -> Dict[str, float]: ...
