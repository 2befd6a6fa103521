"""Security headers middleware for adding common security headers to responses."""

from collections.abc import Awaitable, Callable, Iterable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses.

    This middleware adds the following security headers:
    - X-Content-Type-Options: nosniff - Prevents MIME type sniffing
    - X-Frame-Options: DENY - Prevents clickjacking attacks
    - X-XSS-Protection: 0 - Disables the legacy, exploitable XSS auditor
    - Referrer-Policy: no-referrer
    - Strict-Transport-Security (if HSTS enabled)
    - Content-Security-Policy (if configured, except on the API docs pages,
      which load their assets from a CDN)

    Args:
        app: The ASGI application to wrap.
        hsts_enabled: Whether to include HSTS header (defaults to True).
        hsts_max_age: Max age for HSTS in seconds (defaults to 1 year).
        content_security_policy: CSP header value, or None to omit it.
        csp_exempt_paths: Path prefixes served without the CSP header.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        hsts_enabled: bool = True,
        hsts_max_age: int = 31536000,
        content_security_policy: str | None = None,
        csp_exempt_paths: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self.hsts_enabled = hsts_enabled
        self.hsts_max_age = hsts_max_age
        self.content_security_policy = content_security_policy
        self.csp_exempt_paths = tuple(csp_exempt_paths)

    def _applies_csp(self, path: str) -> bool:
        if not self.content_security_policy:
            return False
        return not any(path.startswith(prefix) for prefix in self.csp_exempt_paths)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Add security headers to the response.

        Args:
            request: The incoming HTTP request.
            call_next: The next middleware or route handler.

        Returns:
            Response: The HTTP response with security headers added.
        """
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "0"
        response.headers["Referrer-Policy"] = "no-referrer"

        if self.hsts_enabled:
            response.headers["Strict-Transport-Security"] = (
                f"max-age={self.hsts_max_age}; includeSubDomains"
            )

        if self._applies_csp(request.url.path):
            response.headers["Content-Security-Policy"] = str(
                self.content_security_policy
            )

        return response
