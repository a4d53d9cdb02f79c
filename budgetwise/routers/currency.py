from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from budgetwise.core.config import Settings, get_settings
from budgetwise.models.currency import ConversionOut, ErrorOut, RatesOut
from budgetwise.services.rates.cache_service import ServerRateCache
from budgetwise.services.rates.conversion import (
    RateConversionService,
    normalize_code,
)
from budgetwise.services.rates.errors import UnsupportedCurrencyError

"""Currency router.

Endpoints:
    - GET /api/currency/convert -> convert an amount between two codes
    - GET /api/currency/rates   -> current base-relative rates (optionally one code)

Domain errors are mapped to JSON by the handlers in core.errors:
unsupported codes -> 400, upstream fetch/parse failures -> 502.
Routes are sync so blocking provider calls run in the threadpool.
"""

router = APIRouter(prefix="/api/currency", tags=["currency"])

_ERROR_RESPONSES = {400: {"model": ErrorOut}, 502: {"model": ErrorOut}}


def get_cache_service(request: Request) -> ServerRateCache:
    return request.app.state.rate_cache


def get_conversion_service(
    cache: ServerRateCache = Depends(get_cache_service),
    settings: Settings = Depends(get_settings),
) -> RateConversionService:
    return RateConversionService(cache, base_currency=settings.base_currency)


@router.get(
    "/convert",
    response_model=ConversionOut,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
    summary="Convert an amount between two currencies",
)
def convert(
    from_currency: str = Query("USD", alias="from", min_length=1, max_length=10),
    to_currency: str = Query("USD", alias="to", min_length=1, max_length=10),
    amount: float = Query(1.0, ge=0),
    refresh: str = Query("false", description="'true' bypasses the server rate cache"),
    svc: RateConversionService = Depends(get_conversion_service),
):
    try:
        result = svc.convert(
            amount, from_currency, to_currency, force_refresh=refresh == "true"
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return ConversionOut(**result.as_payload())


@router.get(
    "/rates",
    response_model=RatesOut,
    response_model_by_alias=True,
    responses=_ERROR_RESPONSES,
    summary="Current exchange rates relative to the base currency",
)
def rates(
    currency: Optional[str] = Query(None, min_length=1, max_length=10),
    refresh: str = Query("false"),
    cache: ServerRateCache = Depends(get_cache_service),
    settings: Settings = Depends(get_settings),
):
    base = settings.base_currency
    snap = cache.get_snapshot(base, force_refresh=refresh == "true")
    mapping = snap.rates
    if currency is not None:
        try:
            code = normalize_code(currency)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        if code not in mapping:
            raise UnsupportedCurrencyError(code)
        mapping = {code: mapping[code]}
    return RatesOut(
        base=snap.base_currency,
        rates=mapping,
        fetched_at=snap.fetched_at,
        expires_at=snap.expires_at(cache.ttl),
    )
