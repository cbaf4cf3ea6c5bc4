"""Error types raised by the ledger and their HTTP rendering.

Every error body has the same shape: ``{error, detail, status_code,
retryable}``. Clients re-submit only when ``retryable`` is true.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    status_code: int
    retryable: bool = False


class AppError(Exception):
    """Base for errors that map onto an HTTP status."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    retryable = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """Malformed input, rejected before any mutation."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidAdjustment(ValidationError):
    """A manual adjustment that would drive allocated days below zero."""


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidTransition(AppError):
    """Leave application status change not allowed by the state machine."""

    status_code = status.HTTP_409_CONFLICT


class OverlapConflict(AppError):
    """A new application shares dates with a pending or approved one."""

    status_code = status.HTTP_409_CONFLICT


class ConcurrencyConflict(AppError):
    """Another transaction modified the same balance row first."""

    status_code = status.HTTP_409_CONFLICT
    retryable = True

    def __init__(self, message: str = "Balance was modified concurrently, please retry") -> None:
        super().__init__(message)


class DownstreamNotificationFailure(Exception):
    """Raised by notification backends. Logged by the dispatcher, never propagated."""


class InsufficientBalanceWarning(UserWarning):
    """A restore would have driven used days below zero and was floored."""


def _error_body(error: str, detail: str | None, status_code: int, retryable: bool = False) -> JSONResponse:
    payload = ErrorResponse(error=error, detail=detail, status_code=status_code, retryable=retryable)
    return JSONResponse(status_code=status_code, content=payload.model_dump())


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    elif exc.retryable:
        logger.warning("%s %s hit a retryable conflict: %s", request.method, request.url.path, exc.message)
    return _error_body(type(exc).__name__, exc.message, exc.status_code, exc.retryable)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid')}" if location else str(error.get("msg")))
    return "; ".join(parts)


async def _handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_body(
        "ValidationError",
        _describe_validation_errors(exc),
        status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _handle_app_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_request_validation)  # type: ignore[arg-type]
