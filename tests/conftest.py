"""Shared fixtures.

Test strategy:
1. Unit tests for the cache, conversion and rounding components
2. API tests through FastAPI's TestClient, mostly with the rate cache overridden
3. No real network access (rate sources are faked, urlopen is monkeypatched)
"""

import io
import os
import tempfile
import urllib.request
from datetime import datetime, timedelta, timezone
from typing import Dict, List

# Isolated data dir BEFORE importing settings (budgetwise.main builds an app on import)
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="budgetwise_test_"))

import pytest

from budgetwise.client.converter import CurrencyConverter
from budgetwise.client.rate_store import ClientRateCache, JsonFileStorage
from budgetwise.core.config import Settings
from budgetwise.services.rates.base import RateSource
from budgetwise.services.rates.cache_service import ServerRateCache
from budgetwise.services.rates.conversion import RateConversionService
from budgetwise.services.rates.errors import FetchError

USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "PKR": 283.5,
    "EUR": 0.92,
    "JPY": 149.5,
    "GBP": 0.79,
}


class FakeClock:
    """Manually advanced clock usable as datetime or epoch-seconds source."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def epoch(self) -> float:
        return self.now.timestamp()

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeRateSource(RateSource):
    def __init__(self, rates: Dict[str, float] = None):
        self.rates = dict(rates or USD_RATES)
        self.calls: List[str] = []
        self.fail = False

    def fetch_rates(self, base_currency: str) -> Dict[str, float]:
        self.calls.append(base_currency)
        if self.fail:
            raise FetchError("provider down", status=503)
        return dict(self.rates)


class RecordingEndpoint:
    """Wraps a conversion service and records each call."""

    def __init__(self, service: RateConversionService):
        self.service = service
        self.calls = []
        self.fail = False

    def convert(self, amount, from_currency, to_currency, force_refresh=False):
        self.calls.append((amount, from_currency, to_currency, force_refresh))
        if self.fail:
            raise FetchError("endpoint unreachable")
        return self.service.convert(amount, from_currency, to_currency, force_refresh)


class FakeResponse(io.BytesIO):
    """Stand-in for the object urlopen returns."""

    def __init__(self, body: bytes, status: int = 200):
        super().__init__(body)
        self.status = status


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Queue of canned responses / exceptions returned by urlopen in order."""
    queue = []
    seen = []

    def _urlopen(url, timeout=None):
        seen.append((url, timeout))
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(urllib.request, "urlopen", _urlopen)
    monkeypatch.setattr("budgetwise.services.http_client.time.sleep", lambda s: None)
    return queue, seen


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> FakeRateSource:
    return FakeRateSource()


@pytest.fixture
def server_cache(source, clock) -> ServerRateCache:
    return ServerRateCache(source, ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def conversion_service(server_cache) -> RateConversionService:
    return RateConversionService(server_cache, base_currency="USD")


@pytest.fixture
def client_store(tmp_path, clock) -> ClientRateCache:
    return ClientRateCache(
        JsonFileStorage(tmp_path / "rates.json"), ttl_seconds=86400, clock=clock.epoch
    )


@pytest.fixture
def endpoint(conversion_service) -> RecordingEndpoint:
    return RecordingEndpoint(conversion_service)


@pytest.fixture
def converter(endpoint, client_store) -> CurrencyConverter:
    return CurrencyConverter(endpoint, client_store, base_currency="USD")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path, exchange_rate_provider="static", debug=False)
