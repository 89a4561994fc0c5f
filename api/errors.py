"""Global exception handlers for FastAPI."""

import logging

import psycopg2
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from api.middleware import request_id_of
from core.exceptions import (
    NotFoundError,
    InvalidReferenceError,
    OverlappingIntervalError,
    PricingUnavailableError,
    InvalidStatusTransitionError,
    InvalidPriceRangeError,
)

logger = logging.getLogger(__name__)

# Most specific first: lookup walks this in order
_DOMAIN_ERRORS: list[tuple[type[Exception], int, str]] = [
    (NotFoundError, 404, ErrorCodes.NOT_FOUND),
    (InvalidReferenceError, 400, ErrorCodes.INVALID_REFERENCE),
    (OverlappingIntervalError, 409, ErrorCodes.OVERLAPPING_INTERVAL),
    (PricingUnavailableError, 422, ErrorCodes.PRICING_UNAVAILABLE),
    (InvalidStatusTransitionError, 409, ErrorCodes.INVALID_STATUS_TRANSITION),
    (InvalidPriceRangeError, 422, ErrorCodes.VALIDATION_ERROR),
]


def _json_error(request: Request, status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_response(code, message, request_id_of(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        for exc_type, status_code, code in _DOMAIN_ERRORS:
            if isinstance(exc, exc_type):
                return _json_error(request, status_code, code, message)

        if "not found" in message.lower():
            return _json_error(request, 404, ErrorCodes.NOT_FOUND, message)
        return _json_error(request, 400, ErrorCodes.INVALID_REQUEST, message)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _json_error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(psycopg2.Error)
    async def storage_error_handler(request: Request, exc: psycopg2.Error):
        # Surfaced verbatim; no retry
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
        return _json_error(request, 500, ErrorCodes.STORAGE_ERROR, str(exc).strip())

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _json_error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
