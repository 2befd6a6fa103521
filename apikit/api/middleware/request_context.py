"""Request context middleware for correlation IDs.

Each request gets a correlation ID, taken from the ``X-Correlation-ID``
header when the client sends one. The ID is stored in a context variable,
bound to every log record emitted while the request is processed, and echoed
back in the response headers.
"""

from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from apikit.core.context import (
    CORRELATION_ID_HEADER,
    RequestContext,
    generate_correlation_id,
)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to manage request context and correlation IDs."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Process the request with context management.

        Args:
            request: The incoming request.
            call_next: The next middleware/endpoint.

        Returns:
            Response: Response with correlation ID header.
        """
        correlation_id = (
            request.headers.get(CORRELATION_ID_HEADER) or generate_correlation_id()
        )
        RequestContext.set_correlation_id(correlation_id)

        # contextualize cleans the binding up when the request ends
        with logger.contextualize(correlation_id=correlation_id):
            try:
                response = await call_next(request)
            finally:
                RequestContext.clear()

            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
