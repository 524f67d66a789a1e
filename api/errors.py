"""
Exception handlers.

Maps domain errors onto HTTP status codes using the ErrorResponse shape.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.models import ErrorResponse
from domain.errors import (
    CannotDeleteSelf,
    DeliveryInsufficientFunds,
    DistributorNotFound,
    EntityNotFound,
    InsufficientBalance,
    InsufficientFunds,
    OrderNotEditable,
    OrderNotFound,
    PermissionDenied,
    PlatformError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (DistributorNotFound, 404),
    (OrderNotFound, 404),
    (EntityNotFound, 404),
    (PermissionDenied, 403),
    (InsufficientBalance, 409),
    (InsufficientFunds, 409),
    (DeliveryInsufficientFunds, 409),
    (OrderNotEditable, 409),
    (CannotDeleteSelf, 409),
)


def _status_for(exc: PlatformError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _error_response(error: str, detail: str, status_code: int) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, status_code=status_code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def platform_error_handler(request: Request, exc: PlatformError) -> JSONResponse:
    return _error_response(type(exc).__name__, exc.message, _status_for(exc))


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    return _error_response("InvalidRequest", str(exc), 400)


async def runtime_error_handler(request: Request, exc: RuntimeError) -> JSONResponse:
    logger.exception("Unhandled storage error on %s %s", request.method, request.url.path)
    return _error_response("StorageError", str(exc), 500)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PlatformError, platform_error_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(RuntimeError, runtime_error_handler)
