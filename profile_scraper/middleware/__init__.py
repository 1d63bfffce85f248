"""Middleware package — error hierarchy and request ID."""

from profile_scraper.middleware.error_handler import (
    RETRYABLE_ERRORS,
    HttpError,
    InvalidConfigJSONError,
    InvalidResponseShapeError,
    InvalidSettingsError,
    MalformedProfileInputError,
    RateLimitedError,
    RequestBuildError,
    ScrapeAlreadyRunningError,
    ScraperError,
    TransportError,
    register_error_handlers,
)
from profile_scraper.middleware.request_id import RequestIdMiddleware

__all__ = [
    "RETRYABLE_ERRORS",
    "HttpError",
    "InvalidConfigJSONError",
    "InvalidResponseShapeError",
    "InvalidSettingsError",
    "MalformedProfileInputError",
    "RateLimitedError",
    "RequestBuildError",
    "RequestIdMiddleware",
    "ScrapeAlreadyRunningError",
    "ScraperError",
    "TransportError",
    "register_error_handlers",
]
