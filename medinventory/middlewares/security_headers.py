from __future__ import annotations

from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CSP_DIRECTIVES = {
    "default-src": "'self'",
    # Device photos are served from /uploads on this origin.
    "img-src": "'self' data:",
    "base-uri": "'self'",
    "form-action": "'self'",
    "frame-ancestors": "'none'",
    "object-src": "'none'",
}
CONTENT_SECURITY_POLICY = "; ".join(f"{name} {value}" for name, value in CSP_DIRECTIVES.items()) + ";"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach browser security headers and keep inventory data out of caches.

    Only responses under ``cacheable_prefixes`` (stylesheets, scripts and
    device photos) may be cached; pages and API bodies carry ``no-store``.
    """

    def __init__(self, app, cacheable_prefixes: Iterable[str] = ("/static/", "/uploads/")):
        super().__init__(app)
        self.cacheable_prefixes = tuple(cacheable_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        if not request.url.path.startswith(self.cacheable_prefixes):
            response.headers.setdefault("Cache-Control", "no-store")
        return response
