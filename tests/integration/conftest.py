"""Shared fixtures for integration tests.

Every test gets a fresh application built by ``create_app`` so rate limit
counters and registered test routes never leak between tests.
"""

from collections.abc import AsyncGenerator, Callable, Generator
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from apikit.api.main import create_app
from apikit.core.config import RuntimeMode, Settings, get_settings
from apikit.core.context import RequestContext


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Clear the settings cache before and after each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Make sure no correlation ID leaks between tests."""
    RequestContext.clear()
    yield
    RequestContext.clear()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build settings for a runtime mode, ignoring any .env file.

    Returns:
        Callable: Factory accepting Settings field overrides.
    """

    def _make(
        environment: RuntimeMode = RuntimeMode.PRODUCTION, **overrides: Any  # noqa: ANN401
    ) -> Settings:
        return Settings(
            _env_file=None,  # type: ignore[call-arg]
            environment=environment,
            **overrides,
        )

    return _make


@pytest.fixture
def make_client() -> Callable[[FastAPI], AsyncClient]:
    """Build HTTP clients bound to an application."""

    def _make(application: FastAPI) -> AsyncClient:
        return AsyncClient(
            transport=ASGITransport(app=application), base_url="http://test"
        )

    return _make


@pytest.fixture
def app(make_settings: Callable[..., Settings]) -> FastAPI:
    """Application in production mode."""
    return create_app(make_settings(RuntimeMode.PRODUCTION))


@pytest.fixture
def dev_app(make_settings: Callable[..., Settings]) -> FastAPI:
    """Application in development mode."""
    return create_app(make_settings(RuntimeMode.DEVELOPMENT))


@pytest.fixture
async def client(
    app: FastAPI, make_client: Callable[[FastAPI], AsyncClient]
) -> AsyncGenerator[AsyncClient]:
    """HTTP client for the production application."""
    async with make_client(app) as test_client:
        yield test_client


@pytest.fixture
async def dev_client(
    dev_app: FastAPI, make_client: Callable[[FastAPI], AsyncClient]
) -> AsyncGenerator[AsyncClient]:
    """HTTP client for the development application."""
    async with make_client(dev_app) as test_client:
        yield test_client
