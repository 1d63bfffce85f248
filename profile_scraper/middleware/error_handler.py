"""Global error hierarchy and FastAPI exception handlers.

All scraper-specific errors extend ScraperError. Transport-level errors
(RateLimitedError, HttpError, TransportError) are recovered inside the
orchestrator's retry loop; ingestion and config errors surface to the caller
of the control operation. The FastAPI exception handlers render any error
that escapes a route into the JSON envelope: { success, data, error, meta }.
"""

from __future__ import annotations

import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Error hierarchy
# ---------------------------------------------------------------------------


class ScraperError(Exception):
    """Base error for all scraper-specific errors."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, **kwargs: object) -> None:
        self.message = message or self.__class__.message
        self.details = kwargs
        super().__init__(self.message)


class RateLimitedError(ScraperError):
    """Target API answered HTTP 429."""

    status_code = 429
    message = "Rate limited"


class HttpError(ScraperError):
    """Target API answered with a non-2xx status other than 429."""

    status_code = 502
    message = "Upstream HTTP error"


class TransportError(ScraperError):
    """Network-level failure before any HTTP status was received."""

    status_code = 502
    message = "Transport error"


class InvalidResponseShapeError(ScraperError):
    """Response carried no extractable person payload."""

    status_code = 502
    message = "Invalid response structure"


class RequestBuildError(ScraperError):
    """Outgoing request could not be built from the person record."""

    status_code = 422
    message = "Could not resolve a user id from the profile record"


class MalformedProfileInputError(ScraperError):
    """Profile upload is in an unrecognized format."""

    status_code = 422
    message = "Invalid profile data format. Expected array or object with profiles property."


class InvalidConfigJSONError(ScraperError):
    """User-supplied dynamic params or custom headers are not valid JSON."""

    status_code = 422
    message = "Invalid JSON in API configuration"


class InvalidSettingsError(ScraperError):
    """Settings update carried a value of the wrong type or range."""

    status_code = 422
    message = "Invalid settings: delay must be a non-negative integer"


class ScrapeAlreadyRunningError(ScraperError):
    """A scrape loop is already active."""

    status_code = 409
    message = "Scraping is already running"


# Errors that consume the per-item retry budget
RETRYABLE_ERRORS: tuple[type[ScraperError], ...] = (
    RateLimitedError,
    HttpError,
    TransportError,
)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------


def _envelope(
    status_code: int,
    error: str,
    meta: dict | None = None,
) -> JSONResponse:
    """Build a JSON envelope error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "data": None,
            "error": error,
            "meta": meta,
        },
    )


async def _scraper_error_handler(_request: Request, exc: ScraperError) -> JSONResponse:
    meta = exc.details if exc.details else None
    return _envelope(exc.status_code, exc.message, meta=meta)


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle FastAPI / Pydantic RequestValidationError (422)."""
    field_errors = [
        {
            "field": " -> ".join(str(loc) for loc in err["loc"]),
            "message": err["msg"],
            "type": err["type"],
        }
        for err in exc.errors()
    ]
    return _envelope(
        status_code=422,
        error="Validation error",
        meta={"fields": field_errors},
    )


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log traceback, return generic 500."""
    logger.error(
        "Unhandled exception: %s\n%s",
        exc,
        traceback.format_exc(),
    )
    return _envelope(status_code=500, error="Internal server error")


def register_error_handlers(app: FastAPI) -> None:
    """Wire up all exception handlers on the FastAPI application."""
    app.add_exception_handler(ScraperError, _scraper_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _unhandled_error_handler)  # type: ignore[arg-type]
