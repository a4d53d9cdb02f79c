from __future__ import annotations

"""Server-side rate cache.

Purpose:
    Keep one snapshot of base-relative rates per base currency for a
    configurable TTL (settings.rates_cache_ttl_seconds, 24h by default) so
    conversion requests do not hit the rate provider each time.

Design:
    - Wraps a RateSource (selected via settings.exchange_rate_provider).
    - Snapshots are replaced wholesale on refresh, never merged.
    - Expired snapshots are evicted on lookup and never served.
    - A failed fetch leaves the entry unset and propagates the error.
    - No locking: two concurrent refreshes both fetch and the last write wins.
      Both writes carry the same upstream data.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from budgetwise.core.config import Settings
from .base import RateSource
from .providers import make_rate_source

logger = logging.getLogger("budgetwise.rates.cache")

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RateSnapshot:
    base_currency: str
    rates: Dict[str, float] = field(repr=False)
    fetched_at: datetime

    def expires_at(self, ttl: timedelta) -> datetime:
        return self.fetched_at + ttl

    def is_valid(self, now: datetime, ttl: timedelta) -> bool:
        return now - self.fetched_at < ttl


class ServerRateCache:
    """Process-wide rate cache keyed by base currency."""

    def __init__(
        self,
        source: RateSource,
        ttl: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
    ):
        if ttl <= timedelta(0):
            raise ValueError("cache ttl must be positive")
        self._source = source
        self._ttl = ttl
        self._clock = clock
        self._snapshots: Dict[str, RateSnapshot] = {}

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    # Internal --------------------------------------------------
    def _lookup(self, base_currency: str) -> Optional[RateSnapshot]:
        snap = self._snapshots.get(base_currency)
        if snap is None:
            return None
        if snap.is_valid(self._clock(), self._ttl):
            return snap
        logger.debug("evicting expired rates for base %s", base_currency)
        self._snapshots.pop(base_currency, None)
        return None

    def _refresh(self, base_currency: str) -> RateSnapshot:
        # Drop the old entry first so a failed fetch leaves nothing behind
        self._snapshots.pop(base_currency, None)
        rates = self._source.fetch_rates(base_currency)
        snap = RateSnapshot(
            base_currency=base_currency, rates=dict(rates), fetched_at=self._clock()
        )
        self._snapshots[base_currency] = snap
        logger.info(
            "cached %d rates for base %s",
            len(snap.rates),
            base_currency,
            extra={"base_currency": base_currency},
        )
        return snap

    # Public API -----------------------------------------------
    def get_snapshot(
        self, base_currency: str, force_refresh: bool = False
    ) -> RateSnapshot:
        base_currency = base_currency.strip().upper()
        if not force_refresh:
            snap = self._lookup(base_currency)
            if snap is not None:
                logger.debug("rate cache hit for base %s", base_currency)
                return snap
        logger.debug(
            "rate cache %s for base %s",
            "bypass" if force_refresh else "miss",
            base_currency,
        )
        return self._refresh(base_currency)

    def get_rates(
        self, base_currency: str, force_refresh: bool = False
    ) -> Dict[str, float]:
        return dict(self.get_snapshot(base_currency, force_refresh).rates)

    def snapshot(self, base_currency: str) -> Optional[RateSnapshot]:
        """Return the valid snapshot for base_currency without fetching."""
        return self._lookup(base_currency.strip().upper())

    def invalidate(self, base_currency: Optional[str] = None) -> None:
        if base_currency is None:
            self._snapshots.clear()
        else:
            self._snapshots.pop(base_currency.strip().upper(), None)


def build_server_rate_cache(settings: Settings) -> ServerRateCache:
    """One cache per application, built from that application's settings."""
    source = make_rate_source(settings.exchange_rate_provider, settings)
    return ServerRateCache(source, ttl=timedelta(seconds=settings.rates_cache_ttl_seconds))
