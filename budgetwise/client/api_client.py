from __future__ import annotations

"""HTTP client for the conversion endpoint (GET /api/currency/convert)."""
from typing import Any, Dict
from urllib.parse import urlencode

from budgetwise.services.http_client import get_json
from budgetwise.services.rates.conversion import ConversionResult
from budgetwise.services.rates.errors import ParseError


class ConversionApiClient:
    def __init__(
        self,
        url: str,
        *,
        timeout: float = 5.0,
        retries: int = 1,
        backoff: float = 0.5,
    ):
        self._url = url
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff

    def convert(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        force_refresh: bool = False,
    ) -> ConversionResult:
        query = urlencode(
            {
                "from": from_currency,
                "to": to_currency,
                "amount": repr(float(amount)),
                "refresh": "true" if force_refresh else "false",
            }
        )
        data = get_json(
            f"{self._url}?{query}",
            timeout=self._timeout,
            retries=self._retries,
            backoff=self._backoff,
        )
        return _result_from_payload(data)


def _result_from_payload(data: Dict[str, Any]) -> ConversionResult:
    try:
        return ConversionResult(
            converted_amount=float(data["convertedAmount"]),
            rate=float(data["rate"]),
            from_currency=str(data["from"]),
            to_currency=str(data["to"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ParseError(f"unexpected conversion payload: {data!r}") from e
