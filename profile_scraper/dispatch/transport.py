"""HTTP transport for built requests.

The orchestrator talks to the network only through the :class:`HttpTransport`
protocol, so tests can substitute a fake. :class:`HttpxTransport` is the
real implementation: a single ``httpx.AsyncClient`` bound to the target
origin and its session cookies.

Outcome contract:

- 2xx with a JSON body → ``TransportOutcome(success=True, response=...)``
- 429 → ``rate_limited=True``
- anything else (other status, bad JSON, network failure) → ``error=...``

No retries happen here.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from profile_scraper.dispatch.request_builder import BuiltRequest, origin_headers
from profile_scraper.middleware.error_handler import (
    HttpError,
    RateLimitedError,
    TransportError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportOutcome:
    """Result of sending one request."""

    success: bool
    response: Any = None
    rate_limited: bool = False
    error: str | None = None

    def raise_for_failure(self) -> Any:
        """Return the JSON response, or raise the matching scraper error."""
        if self.success:
            return self.response
        if self.rate_limited:
            raise RateLimitedError(self.error or RateLimitedError.message)
        if self.error and self.error.startswith("HTTP_"):
            raise HttpError(self.error)
        raise TransportError(self.error or "Unknown error")


class HttpTransport(Protocol):
    async def send(self, request: BuiltRequest) -> TransportOutcome: ...


class HttpxTransport:
    """Sends built requests with httpx.

    Parameters
    ----------
    target_domain:
        Domain the session was opened on; sets the default ``origin``/``referer``.
        Built requests carry their own, so a domain switch wins per request.
    cookies:
        Session cookies for the target domain.
    timeout_seconds:
        Per-request timeout.
    client:
        Pre-built client (tests pass one backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        target_domain: str | None = None,
        cookies: dict[str, str] | None = None,
        timeout_seconds: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            headers=origin_headers(target_domain),
            cookies=cookies,
            timeout=timeout_seconds,
        )

    async def send(self, request: BuiltRequest) -> TransportOutcome:
        content = None
        if request.body is not None:
            content = json.dumps(request.body).encode("utf-8")

        start = time.monotonic()
        try:
            response = await self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=content,
            )
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", request.url, exc)
            return TransportOutcome(success=False, error=str(exc) or type(exc).__name__)

        duration_ms = (time.monotonic() - start) * 1000
        logger.debug(
            "%s %s -> %d",
            request.method,
            request.url,
            response.status_code,
            extra={"duration_ms": round(duration_ms)},
        )

        if response.status_code == 429:
            return TransportOutcome(success=False, rate_limited=True, error="Rate limited")
        if not response.is_success:
            return TransportOutcome(success=False, error=f"HTTP_{response.status_code}")

        try:
            return TransportOutcome(success=True, response=response.json())
        except ValueError:
            return TransportOutcome(success=False, error="Invalid JSON response")

    async def aclose(self) -> None:
        await self._client.aclose()
