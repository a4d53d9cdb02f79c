from __future__ import annotations

"""Lightweight HTTP client util with bounded retry.

Uses stdlib urllib; the only outbound calls are small JSON GETs to the rate
provider and to the conversion endpoint. Focus: GET JSON with an explicit
timeout and limited retries on transient failures (network errors, 5xx).
Client errors (4xx) and undecodable bodies fail immediately.
"""
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict

from budgetwise.services.rates.errors import FetchError, ParseError

logger = logging.getLogger("budgetwise.http")


def _is_transient(err: FetchError) -> bool:
    return err.status is None or err.status >= 500


def _fetch_once(url: str, timeout: float) -> Dict[str, Any]:
    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:  # nosec B310
            if resp.status >= 400:
                raise FetchError(f"HTTP {resp.status} for {url}", status=resp.status)
            data = resp.read()
    except urllib.error.HTTPError as e:
        raise FetchError(f"HTTP {e.code} for {url}", status=e.code) from e
    except (urllib.error.URLError, TimeoutError, OSError) as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ParseError(f"Invalid JSON from {url}: {e}") from e
    if not isinstance(payload, dict):
        raise ParseError(f"Expected a JSON object from {url}")
    return payload


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 1, backoff: float = 0.5
) -> Dict[str, Any]:
    attempt = 0
    while True:
        try:
            return _fetch_once(url, timeout)
        except FetchError as e:
            if not _is_transient(e) or attempt >= retries:
                raise
            delay = backoff * (2**attempt)
            logger.warning(
                "GET %s failed (attempt %d/%d), retrying in %.2fs: %s",
                url,
                attempt + 1,
                retries + 1,
                delay,
                e,
            )
        time.sleep(delay)
        attempt += 1
