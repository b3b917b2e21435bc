"""Security headers middleware for the static host.

Runs for every request before static delivery:

  1. Classifies the raw request target (path + query string) and stores the
     result on ``request.state.classification`` — set exactly once, read by
     :class:`webhost.host.static.SiteFiles`.
  2. Delegates to the rest of the stack inside a request logging context.
  3. Applies the header policy to whatever response came back: files,
     redirects, 304s, 404s and 500s all carry the security headers.

An exception escaping the inner stack is answered here with the JSON 500,
so the client sees the header policy on errors too. BaseHTTPMiddleware
still re-raises the exception once the response is sent; the server logs
it and ServerErrorMiddleware leaves the already-started response alone.

Registration (in create_app() in webhost/main.py):
    application.add_middleware(SecurityHeadersMiddleware, match_mode=...)
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from webhost.constants import MATCH_MODE_CONTAINS
from webhost.host.classifier import classify
from webhost.host.headers import apply_headers
from webhost.utils.logger import get_logger, request_context

logger = get_logger(__name__)


def request_target(request: Request) -> str:
    """Return the path plus query string, as the client sent it."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Classify each request and attach security/cache headers to its response."""

    def __init__(self, app: ASGIApp, match_mode: str = MATCH_MODE_CONTAINS) -> None:
        super().__init__(app)
        self.match_mode = match_mode

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        classification = classify(request_target(request), self.match_mode)
        request.state.classification = classification

        with request_context(request.method, request.url.path, classification.value):
            logger.debug("Request classified")
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    "Unhandled exception",
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                response = JSONResponse(
                    status_code=500, content={"error": "Internal server error"}
                )

        apply_headers(classification, response.headers)
        return response
