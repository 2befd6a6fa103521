"""Shared fixtures for unit tests."""

from collections.abc import Callable, Generator

import pytest
from pytest_mock import MockerFixture, MockType
from starlette.requests import Request

from apikit.core.config import RuntimeMode, Settings, get_settings
from apikit.core.context import RequestContext


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
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
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove configuration environment variables for a default Settings()."""
    for var in (
        "APP_NAME",
        "APP_VERSION",
        "ENVIRONMENT",
        "DEBUG",
        "API_HOST",
        "API_PORT",
        "API_PREFIX",
        "SERVICE_URL",
        "DOCS_URL",
        "REDOC_URL",
        "OPENAPI_URL",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def mock_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a development Settings object with test values.

    Returns:
        Settings: Real settings object built from test environment variables.
    """
    monkeypatch.setenv("APP_NAME", "TestApp")
    monkeypatch.setenv("APP_VERSION", "1.0.0")
    monkeypatch.setenv("ENVIRONMENT", "development")
    monkeypatch.setenv("DEBUG", "false")
    monkeypatch.setenv("API_HOST", "127.0.0.1")
    monkeypatch.setenv("API_PORT", "3000")

    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def production_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Provide a production Settings object."""
    monkeypatch.setenv("ENVIRONMENT", "production")
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build real Starlette requests from a minimal HTTP scope.

    Returns:
        Callable: Factory taking ``method``, ``path`` and ``query_string``.
    """

    def _make(
        method: str = "GET", path: str = "/test-endpoint", query_string: bytes = b""
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "raw_path": path.encode(),
            "root_path": "",
            "scheme": "http",
            "query_string": query_string,
            "headers": [(b"host", b"testserver")],
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 12345),
        }
        return Request(scope)

    return _make


@pytest.fixture
def mock_error_logger(mocker: MockerFixture) -> MockType:
    """Replace the error handler's logger.

    Returns:
        MockType: The mocked loguru logger.
    """
    return mocker.patch("apikit.api.middleware.error_handler.logger")


@pytest.fixture(params=[RuntimeMode.PRODUCTION, RuntimeMode.STAGING, RuntimeMode.TEST])
def non_development_mode(request: pytest.FixtureRequest) -> RuntimeMode:
    """Every runtime mode that must never expose stack traces."""
    mode: RuntimeMode = request.param
    return mode
