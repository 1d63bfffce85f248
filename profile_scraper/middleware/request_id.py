"""Request ID middleware.

Tags every control-API call with an ID so log lines emitted while handling
it (config updates, profile loads) can be correlated. The ID is reused from
``X-Request-ID`` when the caller sends one.
"""

from __future__ import annotations

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Assigns ``request.state.request_id`` and echoes it in ``X-Request-ID``."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id

        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response
