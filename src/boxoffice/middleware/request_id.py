"""Request ID middleware shared by the inventory API and the broadcast hub.

Learn: The API's notifier forwards the current request ID to the hub in
X-Request-ID, so the purchase that caused a push and the hub's fan-out of
it log under the same ID. An incoming ID is only trusted if it looks like
one (short, no whitespace or control characters); anything else is replaced
so a caller cannot smuggle text into the logs.

Each request ends with one "http.request" log line carrying method, path,
status and duration.
"""

import re
import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

logger = structlog.get_logger()


def resolve_request_id(incoming: str | None) -> str:
    """Keep a well-formed incoming ID, otherwise mint a new one."""
    if incoming and _REQUEST_ID.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request ID into structlog and echo it on the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        started = time.perf_counter()
        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id

        logger.info(
            "http.request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
