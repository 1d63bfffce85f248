"""Request building and HTTP transport."""

from profile_scraper.dispatch.request_builder import (
    BuiltRequest,
    build_graphql_variables,
    build_request,
    resolve_user_id,
)
from profile_scraper.dispatch.transport import HttpTransport, HttpxTransport, TransportOutcome

__all__ = [
    "BuiltRequest",
    "HttpTransport",
    "HttpxTransport",
    "TransportOutcome",
    "build_graphql_variables",
    "build_request",
    "resolve_user_id",
]
