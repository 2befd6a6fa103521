"""Unit tests for application configuration."""

import pytest
from pydantic import ValidationError

from apikit.core.config import (
    LogConfig,
    RateLimitConfig,
    RuntimeMode,
    SecurityConfig,
    Settings,
    get_settings,
)


@pytest.mark.unit
class TestRuntimeMode:
    """Test the RuntimeMode enum."""

    def test_only_development_is_development(self) -> None:
        """Test the is_development flag for every mode."""
        assert RuntimeMode.DEVELOPMENT.is_development is True
        assert RuntimeMode.PRODUCTION.is_development is False
        assert RuntimeMode.STAGING.is_development is False
        assert RuntimeMode.TEST.is_development is False

    def test_values_are_lowercase_strings(self) -> None:
        """Test that modes compare equal to their environment values."""
        assert RuntimeMode("development") is RuntimeMode.DEVELOPMENT
        assert RuntimeMode.PRODUCTION == "production"


@pytest.mark.unit
@pytest.mark.usefixtures("clean_env")
class TestSettings:
    """Test the Settings class."""

    def test_default_settings(self) -> None:
        """Test default values of a Settings instance."""
        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.app_name == "ApiKit"
        assert settings.app_version == "1.0.0"
        assert settings.environment is RuntimeMode.PRODUCTION
        assert settings.debug is False
        assert settings.api_host == "0.0.0.0"  # noqa: S104
        assert settings.api_port == 5000
        assert settings.api_prefix == ""
        assert settings.docs_url == "/api-docs"
        assert settings.redoc_url == "/redoc"
        assert settings.openapi_url == "/openapi.json"

    def test_environment_variable_override(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that environment variables override defaults."""
        monkeypatch.setenv("APP_NAME", "Custom App")
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.setenv("API_PORT", "9000")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.app_name == "Custom App"
        assert settings.environment is RuntimeMode.DEVELOPMENT
        assert settings.api_port == 9000

    def test_invalid_environment_is_rejected(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that unknown runtime modes fail validation."""
        monkeypatch.setenv("ENVIRONMENT", "qa")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_development_log_defaults(self) -> None:
        """Test log level and formatter derived from development mode."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            environment=RuntimeMode.DEVELOPMENT,
        )

        assert settings.log_config.log_level == "DEBUG"
        assert settings.log_config.log_formatter_type == "console"

    @pytest.mark.parametrize(
        "mode", [RuntimeMode.PRODUCTION, RuntimeMode.STAGING, RuntimeMode.TEST]
    )
    def test_non_development_log_defaults(self, mode: RuntimeMode) -> None:
        """Test log level and formatter derived from other modes."""
        settings = Settings(_env_file=None, environment=mode)  # type: ignore[call-arg]

        assert settings.log_config.log_level == "INFO"
        assert settings.log_config.log_formatter_type == "json"

    def test_explicit_log_config_is_kept(self) -> None:
        """Test that explicit log settings win over runtime-mode defaults."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            environment=RuntimeMode.DEVELOPMENT,
            log_config=LogConfig(log_level="WARNING", log_formatter_type="json"),
        )

        assert settings.log_config.log_level == "WARNING"
        assert settings.log_config.log_formatter_type == "json"

    def test_nested_environment_variables(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test nested configuration through the __ delimiter."""
        monkeypatch.setenv("RATE_LIMIT_CONFIG__DEFAULT_LIMIT", "5 per minute")
        monkeypatch.setenv("SECURITY_CONFIG__HSTS_ENABLED", "false")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.rate_limit_config.default_limit == "5 per minute"
        assert settings.security_config.hsts_enabled is False

    @pytest.mark.parametrize("field", ["DOCS_URL", "REDOC_URL", "OPENAPI_URL"])
    def test_empty_urls_become_none(
        self, monkeypatch: pytest.MonkeyPatch, field: str
    ) -> None:
        """Test that empty URL variables disable the endpoint."""
        monkeypatch.setenv(field, "")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert getattr(settings, field.lower()) is None

    def test_docs_location_defaults_to_localhost(self) -> None:
        """Test the Swagger UI location without a service URL."""
        settings = Settings(_env_file=None, api_port=8080)  # type: ignore[call-arg]

        assert settings.docs_location == "http://localhost:8080/api-docs"

    def test_docs_location_uses_service_url(self) -> None:
        """Test the Swagger UI location behind a public URL."""
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            service_url="https://api.example.com/",
        )

        assert settings.docs_location == "https://api.example.com/api-docs"

    def test_docs_location_without_docs(self) -> None:
        """Test that no location is reported when docs are disabled."""
        settings = Settings(_env_file=None, docs_url="")  # type: ignore[call-arg]

        assert settings.docs_location is None


@pytest.mark.unit
class TestNestedConfigs:
    """Test nested configuration defaults."""

    def test_log_config_defaults(self) -> None:
        """Test LogConfig defaults."""
        config = LogConfig()

        assert config.log_level is None
        assert config.log_formatter_type is None
        assert config.excluded_paths == ["/health", "/ping"]
        assert config.slow_request_threshold_ms == 1000
        assert "password" in config.sensitive_fields

    def test_security_config_defaults(self) -> None:
        """Test SecurityConfig defaults."""
        config = SecurityConfig()

        assert config.cors_allowed_origins == ["http://localhost:5173"]
        assert config.cors_allow_credentials is True
        assert config.hsts_enabled is True
        assert config.hsts_max_age == 31536000
        assert config.content_security_policy is not None
        assert config.content_security_policy.startswith("default-src 'self'")

    def test_empty_csp_disables_header(self) -> None:
        """Test that an empty CSP is stored as None."""
        assert SecurityConfig(content_security_policy="").content_security_policy is None

    def test_rate_limit_config_defaults(self) -> None:
        """Test RateLimitConfig defaults."""
        config = RateLimitConfig()

        assert config.enabled is True
        assert config.default_limit == "100 per 15 minutes"

    def test_slow_request_threshold_must_be_positive(self) -> None:
        """Test LogConfig field validation."""
        with pytest.raises(ValidationError):
            LogConfig(slow_request_threshold_ms=0)


@pytest.mark.unit
@pytest.mark.usefixtures("clean_env")
class TestGetSettings:
    """Test the cached settings accessor."""

    def test_returns_cached_instance(self) -> None:
        """Test that get_settings returns the same object on each call."""
        assert get_settings() is get_settings()

    def test_cache_clear_reloads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that clearing the cache picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("APP_NAME", "Reloaded")
        get_settings.cache_clear()

        second = get_settings()

        assert second is not first
        assert second.app_name == "Reloaded"
