from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str
    code: str
    detail: str | None = None
    details: dict[str, Any] | None = None
    status_code: int


class AppError(Exception):
    """Base application exception."""

    code = "UNKNOWN"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-range input. Raised before any mutation."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, {"errors": self.errors})


class NotFoundError(AppError):
    """The referenced request does not exist."""

    code = "NOT_FOUND"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class ConflictError(AppError):
    """Stale version or an invalid state transition."""

    code = "CONFLICT"

    def __init__(
        self,
        message: str,
        expected_version: int | None = None,
        current_version: int | None = None,
    ) -> None:
        self.expected_version = expected_version
        self.current_version = current_version
        details = None
        if expected_version is not None:
            details = {"expected_version": expected_version, "current_version": current_version}
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class UnauthorizedError(AppError):
    """The current actor could not be resolved."""

    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Could not resolve the current user") -> None:
        super().__init__(message, status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(AppError):
    """The current actor may not perform the operation."""

    code = "FORBIDDEN"

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_403_FORBIDDEN)


class UnknownError(AppError):
    """Unexpected internal failure."""

    code = "UNKNOWN"

    def __init__(self, message: str = "Unexpected internal error") -> None:
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)


def field_errors(errors: Iterable[Mapping[str, Any]]) -> dict[str, str]:
    """Collapse pydantic error dicts to one message per dotted field path."""
    result: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "form"
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        result.setdefault(key, message)
    return result


def classify_store_error(exc: SQLAlchemyError) -> AppError:
    """Map a persistence exception to the application error taxonomy by type."""
    if isinstance(exc, IntegrityError):
        return ConflictError("Concurrent modification or constraint violation")
    if isinstance(exc, (OperationalError, DBAPIError)):
        return UnknownError("Data store unavailable")
    return UnknownError()


async def _app_exception_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=type(exc).__name__,
            code=exc.code,
            detail=exc.message,
            details=exc.details,
            status_code=exc.status_code,
        ).model_dump(),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="ValidationError",
            code=ValidationError.code,
            detail="Request payload failed validation",
            details={"errors": field_errors(exc.errors())},
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        ).model_dump(),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="UnknownError",
            code=UnknownError.code,
            detail="Unexpected internal error",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers on the application."""
    app.add_exception_handler(AppError, _app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_exception_handler)
