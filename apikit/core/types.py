"""Type aliases for dynamic data structures throughout the application.

All types defined here should be JSON-serializable to support logging
and API responses.
"""

from typing import Any

# Structured error details: a plain sentence or a JSON-like structure
type ErrorDetails = str | dict[str, Any] | list[Any]

# Context dictionary for logging additional information
# Values must be JSON-serializable for structured logging
type LogContext = dict[str, Any]

# JSON object sent as a response body
type Envelope = dict[str, Any]
