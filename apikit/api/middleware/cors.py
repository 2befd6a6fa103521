"""Cross-Origin Resource Sharing configuration.

Requests without an Origin header (curl, mobile apps) are never affected.
Outside production, any localhost or 127.0.0.1 origin is accepted on top of
the configured allow list.
"""

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from apikit.core.config import RuntimeMode, SecurityConfig

LOCAL_ORIGIN_REGEX = r"https?://(localhost|127\.0\.0\.1)(:\d+)?"


def setup_cors(app: FastAPI, config: SecurityConfig, mode: RuntimeMode) -> None:
    """Add the CORS middleware to the application.

    Args:
        app: The FastAPI application instance.
        config: Security configuration holding the CORS settings.
        mode: Runtime mode; local origins are allowed outside production.
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allowed_origins,
        allow_origin_regex=(
            None if mode is RuntimeMode.PRODUCTION else LOCAL_ORIGIN_REGEX
        ),
        allow_methods=config.cors_allowed_methods,
        allow_headers=config.cors_allowed_headers,
        allow_credentials=config.cors_allow_credentials,
    )
