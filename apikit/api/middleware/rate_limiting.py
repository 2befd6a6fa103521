"""Rate limiting configuration and setup.

Uses slowapi to enforce a default per-client limit on every route.
Protects against denial-of-service and resource abuse. Rejected requests
raise RateLimitExceeded, which the error handler turns into a 429 envelope.
"""

from fastapi import FastAPI
from slowapi import Limiter
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from apikit.core.config import RateLimitConfig


def create_limiter(config: RateLimitConfig) -> Limiter:
    """Create a limiter keyed by client address.

    Each application gets its own limiter with in-memory storage.

    Args:
        config: Rate limiting configuration.

    Returns:
        Limiter: Limiter applying ``config.default_limit`` to every route.
    """
    return Limiter(
        key_func=get_remote_address,
        default_limits=[config.default_limit],
        enabled=config.enabled,
    )


def setup_rate_limiting(app: FastAPI, config: RateLimitConfig) -> Limiter:
    """Attach a limiter and its middleware to the application.

    Args:
        app: The FastAPI application instance.
        config: Rate limiting configuration.

    Returns:
        Limiter: The limiter stored on ``app.state.limiter``.
    """
    limiter = create_limiter(config)
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    return limiter
