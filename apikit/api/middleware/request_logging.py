"""HTTP request/response logging with performance monitoring.

Features:
- **Structured logging**: Consistent fields on every request record
- **Performance tracking**: Request duration and slow request detection
- **Client identification**: IP extraction with proxy header support
- **Exclusion patterns**: Configurable path exclusion (e.g., health checks)

Error responses are produced by the error handler middleware further in, so
they are logged here like any other completed request.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from apikit.core.config import LogConfig, RuntimeMode

REQUEST_ID_HEADER = "X-Request-ID"
MAX_USER_AGENT_LENGTH = 200


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses.

    Args:
        app: The ASGI application.
        log_config: Logging configuration.
        mode: Runtime mode; proxy headers are trusted only in production.
        path_prefix: Prefix the routes are mounted under. Excluded paths are
            matched both bare and with the prefix.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        log_config: LogConfig,
        mode: RuntimeMode,
        path_prefix: str = "",
    ) -> None:
        super().__init__(app)
        self.log_config = log_config
        self.excluded_paths = set(log_config.excluded_paths)
        if path_prefix:
            self.excluded_paths.update(
                f"{path_prefix}{path}" for path in log_config.excluded_paths
            )
        self.mode = mode

    def _get_client_ip(self, request: Request) -> str:
        """Extract real client IP considering proxy headers.

        Args:
            request: The incoming request.

        Returns:
            str: The client IP address.
        """
        if self.mode is RuntimeMode.PRODUCTION:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                # Take the first IP (original client)
                return forwarded_for.split(",")[0].strip()

            real_ip = request.headers.get("x-real-ip")
            if real_ip:
                return real_ip.strip()

        if request.client:
            return request.client.host
        return "unknown"

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Process the request and log details.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: The response from the application.

        Raises:
            Exception: Any exception raised by the application is re-raised
                after logging.
        """
        if request.url.path in self.excluded_paths:
            return await call_next(request)

        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        user_agent = request.headers.get("user-agent", "")[:MAX_USER_AGENT_LENGTH]

        with logger.contextualize(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=self._get_client_ip(request),
            user_agent=user_agent or "unknown",
        ):
            logger.debug("Request started")
            start_time = time.perf_counter()

            try:
                response = await call_next(request)
            except Exception as exc:
                duration_ms = (time.perf_counter() - start_time) * 1000
                logger.error(
                    "Request failed",
                    duration_ms=round(duration_ms, 2),
                    error_type=type(exc).__name__,
                )
                raise

            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=duration_ms,
            )
            response.headers[REQUEST_ID_HEADER] = request_id

            if duration_ms > self.log_config.slow_request_threshold_ms:
                logger.warning(
                    "Slow request detected",
                    duration_ms=duration_ms,
                    threshold_ms=self.log_config.slow_request_threshold_ms,
                )

            return response
