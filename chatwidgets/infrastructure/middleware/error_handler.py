"""Global error handlers and the shared error response shape."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from chatwidgets.domain.errors import (
    AppError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from chatwidgets.infrastructure.telemetry.logging import get_logger

logger = get_logger(__name__)


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    retryable: bool = False,
) -> JSONResponse:
    """Build the ``{"error": {...}}`` body every failing endpoint returns."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": {
                "code": code,
                "message": message,
                "details": details or {},
                "retryable": retryable,
            }
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        status_code = _get_status_code(exc)

        log = logger.warning if status_code < 500 else logger.error
        log(
            f"Application error: {exc.message}",
            extra={
                "error_code": exc.code,
                "error_details": exc.details,
                "path": request.url.path,
            },
        )
        return error_response(status_code, exc.code, exc.message, exc.details, exc.retryable)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            f"Unhandled exception: {exc}",
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


def _get_status_code(error: AppError) -> int:
    """Map error type to HTTP status code."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, ValidationError):
        return 400
    if isinstance(error, ProviderError):
        return 502
    return 500
