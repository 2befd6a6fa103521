"""Centralized configuration management with environment-aware defaults.

This module implements the configuration system using Pydantic Settings,
providing type-safe configuration with validation and environment variable
support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for complex config structures
- **Runtime mode**: A single RuntimeMode resolved once at startup
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
4. Runtime-mode based defaults (development vs everything else)
"""

from enum import StrEnum
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeMode(StrEnum):
    """Deployment context gating diagnostic verbosity.

    Only DEVELOPMENT exposes stack traces to clients and to the logs.
    """

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"
    TEST = "test"

    @property
    def is_development(self) -> bool:
        """Whether diagnostics such as stack traces may be exposed."""
        return self is RuntimeMode.DEVELOPMENT


type LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogConfig(BaseModel):
    """Logging configuration."""

    log_level: LogLevel | None = Field(
        default=None,
        description="Logging level. DEBUG in development, INFO otherwise.",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Derived from the runtime mode if unset.",
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: ["/health", "/ping"],
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class SecurityConfig(BaseModel):
    """CORS and security header configuration."""

    cors_allowed_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to make cross-origin requests",
    )
    cors_allowed_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        description="HTTP methods allowed for cross-origin requests",
    )
    cors_allowed_headers: list[str] = Field(
        default_factory=lambda: [
            "Content-Type",
            "Authorization",
            "X-Requested-With",
            "Accept",
            "Origin",
        ],
        description="Request headers allowed for cross-origin requests",
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Whether cross-origin requests may carry credentials",
    )
    hsts_enabled: bool = Field(default=True, description="Send HSTS header")
    hsts_max_age: int = Field(
        default=31536000,
        ge=0,
        description="HSTS max-age in seconds",
    )
    content_security_policy: str | None = Field(
        default=(
            "default-src 'self'; "
            "connect-src 'self' http://localhost:* https://localhost:*"
        ),
        description="Content-Security-Policy header value, empty to disable",
    )

    @field_validator("content_security_policy", mode="before")
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        if v == "":
            return None
        return v


class RateLimitConfig(BaseModel):
    """Rate limiting configuration."""

    enabled: bool = Field(default=True, description="Enable rate limiting")
    default_limit: str = Field(
        default="100 per 15 minutes",
        description="Default limit per client address (limits string notation)",
    )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="ApiKit", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: RuntimeMode = Field(
        default=RuntimeMode.PRODUCTION,
        description="Runtime mode the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")  # noqa: S104
    api_port: int = Field(default=5000, description="API port")
    api_prefix: str = Field(
        default="", description="Path prefix for the diagnostic routes"
    )
    service_url: str | None = Field(
        default=None, description="Public base URL of the service"
    )
    docs_url: str | None = Field(default="/api-docs", description="Swagger UI URL")
    redoc_url: str | None = Field(default="/redoc", description="ReDoc URL")
    openapi_url: str | None = Field(
        default="/openapi.json", description="OpenAPI schema URL"
    )

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    # Security configuration
    security_config: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )

    # Rate limiting configuration
    rate_limit_config: RateLimitConfig = Field(
        default_factory=RateLimitConfig, description="Rate limiting configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set runtime-mode based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_level is None:
            self.log_config.log_level = (
                "DEBUG" if self.environment.is_development else "INFO"
            )

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = (
                "console" if self.environment.is_development else "json"
            )

    @property
    def docs_location(self) -> str | None:
        """Absolute URL of the Swagger UI, or None when docs are disabled."""
        if self.docs_url is None:
            return None
        base_url = (self.service_url or "").strip().rstrip("/")
        if not base_url:
            base_url = f"http://localhost:{self.api_port}"
        return f"{base_url}{self.docs_url}"

    @field_validator(
        "docs_url", "redoc_url", "openapi_url", "service_url", mode="before"
    )
    @classmethod
    def empty_str_to_none(cls, v: str | None) -> str | None:
        """Convert empty strings to None for nullable fields."""
        _ = cls
        if v == "":
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
