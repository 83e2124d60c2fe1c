import logging
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from sheetrates.services.rates.base import ConversionError, RateFetchError

logger = logging.getLogger("sheetrates.errors")

_RATE_FETCH_STATUS = {
    RateFetchError.INVALID_CURRENCY: status.HTTP_400_BAD_REQUEST,
    RateFetchError.NETWORK_ERROR: status.HTTP_502_BAD_GATEWAY,
    RateFetchError.PARSE_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def _error(status_code: int, error: str, detail: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "detail": detail})


def http_exception_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _error(
            exc.status_code,
            "not_found",
            f"No route for {request.method} {request.url.path}",
        )
    return _error(exc.status_code, "http_error", exc.detail)


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return _error(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "validation_error", jsonable_encoder(exc.errors())
    )


def rate_fetch_error_handler(request: Request, exc: RateFetchError):  # type: ignore
    code = _RATE_FETCH_STATUS.get(exc.kind, status.HTTP_502_BAD_GATEWAY)
    if code >= 500:
        logger.warning("upstream rate failure on %s: %s", request.url.path, exc)
    return _error(code, exc.kind, str(exc))


def conversion_error_handler(request: Request, exc: ConversionError):  # type: ignore
    return _error(status.HTTP_404_NOT_FOUND, exc.kind, str(exc))


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    # Called outside the except block; pass the exception for the traceback
    logger.error(
        "unhandled exception on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred.",
    )
