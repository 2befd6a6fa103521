"""Structured logging built on Loguru.

Features:
- **Structured logging**: JSON output with a consistent schema
- **Context propagation**: Automatic inclusion of correlation IDs
- **Standard library integration**: Captures logs from all Python modules,
  uvicorn included
- **Rich console output**: Development-friendly formatting with context
- **Thread-safe sinks**: Records are enqueued so concurrent requests never
  interleave their output

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (every other runtime mode)

The formatter and level are resolved from Settings once, at startup.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False
        self.sensitive_fields: frozenset[str] = frozenset()


_state = _LoggingState()


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str | None:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...

    @property
    def sensitive_fields(self) -> list[str]:
        """Field names to redact."""
        ...


# Constants
DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
REDACTED: Final[str] = "[REDACTED]"

# Fields shown first, in this order
PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "request_id",
    "method",
    "path",
    "url",
    "status_code",
    "error_code",
    "duration_ms",
    "client_host",
)

# Fields printed in full on their own lines
BLOCK_FIELDS: Final[tuple[str, ...]] = ("stack_trace",)


def _escape(value: object) -> str:
    """Escape braces and markup tags so loguru prints the value verbatim."""
    return (
        str(value).replace("{", "{{").replace("}", "}}").replace("<", r"\<")
    )


def _format_priority_field(field: str, value: object) -> str | None:
    """Format a priority field for display.

    Args:
        field: The field name.
        value: The field value.

    Returns:
        str | None: Formatted value or None if formatting fails.
    """
    try:
        if (
            field == "correlation_id"
            and value
            and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH
        ):
            # Shorten correlation ID for readability
            value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
        elif field == "duration_ms":
            value = f"{value}ms"
        return _escape(value)
    except (AttributeError, TypeError, ValueError) as e:
        logger.trace(f"Failed to format priority field {field}: {e}")
        return None


def _format_extra_field(key: str, value: object) -> str | None:
    """Format an extra field for display.

    Args:
        key: The field name.
        value: The field value.

    Returns:
        str | None: Formatted field or None if formatting fails.
    """
    try:
        str_value = str(value)

        if key.lower() in _state.sensitive_fields:
            str_value = REDACTED
        elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
            # Limit length of field values to prevent huge logs
            str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    except (AttributeError, TypeError, ValueError) as e:
        logger.trace(f"Failed to format extra field {key}: {e}")
        return None
    else:
        return f"{_escape(key)}={_escape(str_value)}"


def _format_context_fields(extra: dict[str, Any]) -> list[str]:
    """Format all inline context fields from extra data.

    Args:
        extra: Extra fields from the log record.

    Returns:
        list[str]: List of formatted context parts.
    """
    context_parts = []

    for field in PRIORITY_FIELDS:
        if extra.get(field) is not None:
            formatted = _format_priority_field(field, extra[field])
            if formatted:
                context_parts.append(f"<yellow>{formatted}</yellow>")

    for key, value in extra.items():
        if (
            key in PRIORITY_FIELDS
            or key in BLOCK_FIELDS
            or key.startswith("_")
            or value is None
        ):
            continue
        formatted = _format_extra_field(key, value)
        if formatted:
            context_parts.append(f"<dim>{formatted}</dim>")

    return context_parts


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format log record for console with all context fields visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Formatted log string with context.
    """
    try:
        time_str = record["time"].strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level_name = record["level"].name
        location = f"{record['name']}:{record['function']}:{record['line']}"

        parts = [
            f"<green>{time_str}</green>",
            f"<level>{level_name: <8}</level>",
            f"<cyan>{location}</cyan>",
        ]

        extra = record.get("extra", {})
        context_parts = _format_context_fields(extra)
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        parts.append("{message}")

        line = " | ".join(parts)
        for field in BLOCK_FIELDS:
            if extra.get(field):
                line += f"\n{{extra[{field}]}}"

        if record.get("exception"):
            line += "\n{exception}"

        return line + "\n"
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        # Fallback to default format if anything goes wrong
        logger.trace(f"Failed to format log record: {e}")
        return DEFAULT_LOG_FORMAT + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as one line of JSON.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "module": record["module"],
        "line": record["line"],
    }

    # Add extra fields (includes correlation_id, request_id, etc.)
    if extra := record.get("extra", {}):
        log_entry.update({k: v for k, v in extra.items() if not k.startswith("_")})

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru.

    This handler captures logs from libraries using standard logging
    and forwards them to Loguru for consistent formatting.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _json_sink(message: object) -> None:
    """Write a structured record to stdout."""
    record = getattr(message, "record", None)
    if record is not None:
        sys.stdout.write(serialize_for_json(record))
        sys.stdout.flush()


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru once per process.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()

    log_config = settings.log_config
    level = log_config.log_level or "INFO"
    formatter_type = log_config.log_formatter_type or "json"
    _state.sensitive_fields = frozenset(
        field.lower() for field in log_config.sensitive_fields
    )

    if formatter_type == "console":
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:
        logger.add(
            _json_sink,
            level=level,
            enqueue=True,  # Thread-safe async logging
            diagnose=False,  # No variable values outside development
            backtrace=False,
        )

    # Route standard library logging through Loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=level,
    )

    _state.configured = True
