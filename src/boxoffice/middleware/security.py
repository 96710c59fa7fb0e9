"""Response headers for a JSON-only API.

Nothing the inventory API returns is meant to be rendered, framed or
cached: every body is JSON describing live inventory. The one exception
is FastAPI's interactive docs, which need scripts and styles to load.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

API_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Lock responses down to data-only use."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update({
            k: v
            for k, v in API_HEADERS.items()
            if k != "Content-Security-Policy" or not request.url.path.startswith(DOCS_PATHS)
        })
        # Availability changes with every purchase
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
