"""
Global error handling for the FastAPI application.

Catches SignSproutError subclasses, Pydantic validation errors, and
unhandled exceptions, converting them into a consistent JSON envelope
``{error, detail, code, timestamp}``. ``error`` is the learner-facing
message; ``detail`` is for logs and developers.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.core.exceptions import SignSproutError
from src.core.models import ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: str, detail: str, code: str, timestamp: str) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail, code=code, timestamp=timestamp)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def register_error_handlers(app: FastAPI) -> None:
    """Attach exception handlers to the FastAPI application.

    Registers three handlers in priority order:
    1. ``SignSproutError`` - maps domain errors to structured JSON responses.
    2. ``RequestValidationError`` - Pydantic validation failures (422).
    3. ``Exception`` - catch-all for unexpected server errors (500).
    """

    @app.exception_handler(SignSproutError)
    async def signsprout_error_handler(request: Request, exc: SignSproutError) -> JSONResponse:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.detail)
        return _envelope(exc.status_code, exc.user_message, exc.detail, exc.code, exc.timestamp)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _envelope(
            422,
            "The request was not understood.",
            str(exc),
            "VALIDATION_ERROR",
            datetime.now(UTC).isoformat(),
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, _exc: Exception) -> JSONResponse:
        """Catch-all handler; prevents stack traces from leaking to clients."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _envelope(
            500,
            "Something went wrong. Please try again.",
            "Internal server error",
            "INTERNAL_ERROR",
            datetime.now(UTC).isoformat(),
        )
