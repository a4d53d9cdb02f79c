from __future__ import annotations

"""Client-side persistent rate cache.

Single-slot cache: only the rates for one target currency (the user's active
preferred currency) are retained. Persisted under one key of a JSON-file
key/value store so it survives restarts, the way browser local storage would.

Stored payload:
    {"rates": {"PKR": 283.5}, "timestamp": <epoch ms>, "currency": "PKR"}
"""
import json
import logging
import time
from pathlib import Path
from typing import Callable, Dict, Optional

logger = logging.getLogger("budgetwise.client.rate_store")

CACHE_KEY = "currency_rates_cache"
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class JsonFileStorage:
    """Minimal persistent string key/value store backed by one JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("ignoring unreadable storage file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


class ClientRateCache:
    def __init__(
        self,
        storage: JsonFileStorage,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
        key: str = CACHE_KEY,
    ):
        if ttl_seconds <= 0:
            raise ValueError("client cache ttl must be positive")
        self._storage = storage
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock
        self._key = key

    def _now_ms(self) -> float:
        return self._clock() * 1000

    def read(self, currency: str) -> Optional[Dict[str, float]]:
        raw = self._storage.get_item(self._key)
        if raw is None:
            return None
        try:
            record = json.loads(raw)
            rates = {str(k): float(v) for k, v in record["rates"].items()}
            timestamp = float(record["timestamp"])
            cached_currency = record["currency"]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.debug("discarding malformed client rate record: %s", e)
            return None
        if not rates:
            return None
        if cached_currency != currency.upper():
            return None
        if self._now_ms() - timestamp >= self._ttl_ms:
            return None
        return rates

    def write(self, rates: Dict[str, float], currency: str) -> None:
        record = {
            "rates": dict(rates),
            "timestamp": self._now_ms(),
            "currency": currency.upper(),
        }
        try:
            self._storage.set_item(self._key, json.dumps(record))
        except OSError as e:
            logger.warning("could not persist client rate cache: %s", e)
            return
        logger.debug("cached client rates for %s", currency.upper())

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._key)
        except OSError as e:
            logger.warning("could not clear client rate cache: %s", e)
