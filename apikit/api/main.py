"""FastAPI application initialization and configuration module.

This module serves as the main entry point for the API application.
It handles:
- Application lifecycle management (startup/shutdown)
- Exception handler registration
- Middleware registration in the correct order
- Diagnostic routes and API documentation

Middleware are executed in reverse order of registration: the error handler
is registered first so it sits closest to the routes, and every other
middleware (security headers included) sees the error envelopes it produces.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from apikit.api.middleware.cors import setup_cors
from apikit.api.middleware.error_handler import (
    build_error_handler_chain,
    register_exception_handlers,
)
from apikit.api.middleware.rate_limiting import setup_rate_limiting
from apikit.api.middleware.request_context import RequestContextMiddleware
from apikit.api.middleware.request_logging import RequestLoggingMiddleware
from apikit.api.middleware.security_headers import SecurityHeadersMiddleware
from apikit.api.routes.server import router as server_router
from apikit.api.utils.responses import ORJSONResponse
from apikit.core.config import Settings, get_settings
from apikit.core.logging import setup_logging


def _make_lifespan(settings: Settings):  # noqa: ANN202
    @asynccontextmanager
    async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
        """Log application startup and shutdown.

        Args:
            app_instance: The FastAPI application instance.

        Yields:
            None: Nothing is yielded, this is just a lifespan context.
        """
        logger.info(
            "Application startup complete - {} v{} ({})",
            app_instance.title,
            app_instance.version,
            settings.environment.value,
        )
        if docs_location := settings.docs_location:
            logger.info("Swagger docs available at {}", docs_location)

        yield

        # Close connections to external services here
        logger.info("Application shutdown complete")

    return lifespan


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings instance. If not provided, will use get_settings().

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    # Left out of debug mode so server errors keep the JSON envelope
    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=_make_lifespan(settings),
    )

    # Exception handlers and the innermost error handler middleware
    register_exception_handlers(application, build_error_handler_chain(settings))

    # 5. Rate limiting (rejects requests over the per-client limit)
    setup_rate_limiting(application, settings.rate_limit_config)

    # 4. Request logging middleware (logs requests/responses)
    application.add_middleware(
        RequestLoggingMiddleware,
        log_config=settings.log_config,
        mode=settings.environment,
        path_prefix=settings.api_prefix,
    )

    # 3. Request context middleware (creates correlation ID)
    application.add_middleware(RequestContextMiddleware)

    # 2. CORS
    setup_cors(application, settings.security_config, settings.environment)

    # 1. Security headers middleware (adds security headers to all responses)
    security = settings.security_config
    application.add_middleware(
        SecurityHeadersMiddleware,
        hsts_enabled=security.hsts_enabled,
        hsts_max_age=security.hsts_max_age,
        content_security_policy=security.content_security_policy,
        csp_exempt_paths=[
            path for path in (settings.docs_url, settings.redoc_url) if path
        ],
    )

    application.include_router(server_router, prefix=settings.api_prefix)

    return application


app = create_app()
