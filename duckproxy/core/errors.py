"""Map gateway failures to HTTP status codes and JSON error payloads."""

from typing import Any

from fastapi.responses import JSONResponse

from .exceptions import (
    AuthError,
    BackendRequestError,
    InvalidRequestError,
    TokenAcquisitionError,
)

TOKEN_ERROR_MESSAGE = "x-vqd-4 get error"
BACKEND_ERROR_MESSAGE = "api request error"


def map_exception(exc: BaseException) -> tuple[int, dict[str, Any]]:
    """Pick the status code and payload reported to the caller."""
    if isinstance(exc, AuthError):
        return 401, {"error": exc.message}
    if isinstance(exc, InvalidRequestError):
        return 400, {"error": exc.message}
    if isinstance(exc, TokenAcquisitionError):
        return 400, {"error": TOKEN_ERROR_MESSAGE}
    if isinstance(exc, BackendRequestError):
        return 400, {"error": BACKEND_ERROR_MESSAGE, "message": exc.body}
    return 400, {"error": str(exc) or exc.__class__.__name__}


def error_response(exc: BaseException) -> JSONResponse:
    status_code, payload = map_exception(exc)
    return JSONResponse(status_code=status_code, content=payload)
