from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

from budgetwise.services.rates.errors import (
    FetchError,
    ParseError,
    UnsupportedCurrencyError,
)

logger = logging.getLogger("budgetwise.errors")

CONVERSION_FAILED_MESSAGE = "Failed to convert currency"


def http_exception_handler(request: Request, exc):  # type: ignore
    if getattr(exc, "status_code", 404) != 404:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
        )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={
            "error": "not_found",
            "detail": f"No route for {request.method} {request.url.path}",
        },
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def unsupported_currency_handler(request: Request, exc: UnsupportedCurrencyError):  # type: ignore
    logger.info(
        "rejected unsupported currency %s",
        exc.currency,
        extra={"currency": exc.currency, "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": str(exc), "currency": exc.currency},
    )


def upstream_error_handler(request: Request, exc: Exception):  # type: ignore
    # Upstream detail is logged only; the body carries a fixed message.
    logger.error("exchange rate upstream failure: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"error": CONVERSION_FAILED_MESSAGE},
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )


UPSTREAM_ERRORS = (FetchError, ParseError)
