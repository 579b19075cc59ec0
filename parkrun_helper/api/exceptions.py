"""HTTP errors and the JSON error envelope."""

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from .._utils import logger, to_iso, utc_now
from .middleware import CORRELATION_HEADER


class AppError(HTTPException):
    """Base exception for Parkrun Helper API errors."""
    pass


class UnauthorizedError(AppError):
    def __init__(self, reason: str):
        super().__init__(HTTP_401_UNAUTHORIZED, reason, headers={"WWW-Authenticate": "Bearer"})


class NotFoundError(AppError):
    def __init__(self, message: str):
        super().__init__(HTTP_404_NOT_FOUND, message)


class BackupNotFoundError(NotFoundError):
    def __init__(self, message: str):
        super().__init__(message)


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(HTTP_409_CONFLICT, message)


class InvalidDateError(AppError):
    def __init__(self, value=None):
        super().__init__(
            HTTP_400_BAD_REQUEST,
            "Invalid date format. Please provide a valid ISO date string.",
        )
        self.value = value


def _envelope(request: Request, status_code: int, message: str) -> dict:
    return {
        "statusCode": status_code,
        "timestamp": to_iso(utc_now()),
        "path": request.url.path,
        "method": request.method,
        "message": message,
        "correlationId": getattr(request.state, "correlation_id", None)
        or request.headers.get(CORRELATION_HEADER),
    }


def _log(request: Request, status_code: int, message: str) -> None:
    correlation_id = getattr(request.state, "correlation_id", None)
    user = getattr(request.state, "user", None)
    user_id = user.user_id if user is not None else None
    line = f"HTTP {status_code} {request.method} {request.url.path}: {message} (correlationId={correlation_id}, userId={user_id})"
    if status_code >= 500:
        logger.error(line)
    elif status_code >= 400:
        logger.warning(line)


def error_response(request: Request, status_code: int, message: str, headers=None) -> JSONResponse:
    _log(request, status_code, message)
    response = JSONResponse(status_code=status_code, content=_envelope(request, status_code, message), headers=headers)
    correlation_id = getattr(request.state, "correlation_id", None)
    if correlation_id:
        response.headers[CORRELATION_HEADER] = correlation_id
    return response


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(request, exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(request, 422, "; ".join(messages) or "Validation failed")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(request, HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
