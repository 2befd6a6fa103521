"""Structured exception hierarchy for consistent error handling.

This module defines the error vocabulary application code uses to signal
failures that should reach the client as a structured error envelope.

Key components:
- **ErrorCode enum**: Standardized machine-readable error identifiers
- **ApiError**: Base exception carrying message, status, code and details
- **Named errors**: Subclasses with a fixed HTTP status and defaults
  (BadRequestError, NotFoundError, ConflictError, ...)
- **classify_error**: Tags any exception as a known ApiError or an
  unexpected failure so handlers can match on it exhaustively

Every ApiError captures the stack at creation time. Construction never
validates its inputs and never raises.
"""

import traceback
from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import ClassVar, Literal

from apikit.core.types import ErrorDetails


class ErrorCode(Enum):
    """Standardized error codes for the application.

    These error codes provide consistent identification of error types
    across the application, enabling proper error handling and monitoring.
    """

    # Client errors
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"
    UNPROCESSABLE_ENTITY = "UNPROCESSABLE_ENTITY"
    RATE_LIMITED = "RATE_LIMITED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    INVALID_REQUEST_DATA = "INVALID_REQUEST_DATA"
    """The request body, query or path parameters failed schema validation."""

    MALFORMED_JSON = "MALFORMED_JSON"
    """The request body could not be parsed as JSON."""

    # Server errors
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    BAD_GATEWAY = "BAD_GATEWAY"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    GATEWAY_TIMEOUT = "GATEWAY_TIMEOUT"

    UNHANDLED_ERROR = "UNHANDLED_ERROR"
    """An unexpected exception reached the error handler."""


class ApiError(Exception):
    """Base exception for errors that are reported to the client.

    Empty fields are filled in by the error handler from the ErrorKind
    registry entry of the resolved status.

    Args:
        message: Human-readable error message
        status: HTTP status code (defaults to the class's fixed status)
        code: Machine-readable identifier (string or ErrorCode enum)
        details: Additional information about the error
    """

    default_status: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message: ClassVar[str | None] = None
    default_code: ClassVar[ErrorCode | None] = None

    def __init__(
        self,
        message: str | None = None,
        status: int | None = None,
        code: str | ErrorCode | None = None,
        details: ErrorDetails | None = None,
    ) -> None:
        if message is None:
            message = self.default_message
        if status is None:
            status = self.default_status
        if code is None:
            code = self.default_code

        self.message = message
        self.status = status
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.details = details

        # Capture stack trace at creation time
        self.stack = "".join(traceback.format_stack()[:-1])  # Exclude this frame

        super().__init__(message or "")

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the status, code and message
        """
        return f"[{self.status} {self.code or '-'}] {self.message or ''}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name, message, status, code and details
        """
        class_name = self.__class__.__name__
        details_str = f", details={self.details!r}" if self.details else ""
        return (
            f"{class_name}(message={self.message!r}, status={self.status}, "
            f"code={self.code!r}{details_str})"
        )


class _FixedStatusError(ApiError):
    """ApiError whose status is fixed by the subclass."""

    def __init__(
        self,
        message: str | None = None,
        code: str | ErrorCode | None = None,
        details: ErrorDetails | None = None,
    ) -> None:
        super().__init__(message, self.default_status, code, details)


class BadRequestError(_FixedStatusError):
    """Exception raised when the request is malformed or cannot be understood."""

    default_status = HTTPStatus.BAD_REQUEST
    default_message = "Bad request"
    default_code = ErrorCode.BAD_REQUEST


class UnauthorizedError(_FixedStatusError):
    """Exception raised when authentication is missing or invalid."""

    default_status = HTTPStatus.UNAUTHORIZED
    default_message = "Unauthorized"
    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(_FixedStatusError):
    """Exception raised when the caller lacks permission for an action."""

    default_status = HTTPStatus.FORBIDDEN
    default_message = "Forbidden"
    default_code = ErrorCode.FORBIDDEN


class NotFoundError(_FixedStatusError):
    """Exception raised when a requested resource cannot be found.

    This exception should be used when attempting to access a resource
    (user, document, file, configuration, etc.) that doesn't exist.
    """

    default_status = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"
    default_code = ErrorCode.NOT_FOUND


class ConflictError(_FixedStatusError):
    """Exception raised when a resource conflicts with an existing one."""

    default_status = HTTPStatus.CONFLICT
    default_message = "Resource conflict"
    default_code = ErrorCode.RESOURCE_CONFLICT


class ValidationError(_FixedStatusError):
    """Exception raised when input validation fails.

    This exception should be used when user input or data doesn't meet
    the expected format, type, or validation rules.
    """

    default_status = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Validation failed"
    default_code = ErrorCode.VALIDATION_ERROR


class UnprocessableEntityError(_FixedStatusError):
    """Exception raised when a well-formed request cannot be processed."""

    default_status = HTTPStatus.UNPROCESSABLE_ENTITY
    default_message = "Unprocessable entity"
    default_code = ErrorCode.UNPROCESSABLE_ENTITY


class RateLimitedError(_FixedStatusError):
    """Exception raised when a client exceeds its request quota."""

    default_status = HTTPStatus.TOO_MANY_REQUESTS
    default_message = "Too many requests"
    default_code = ErrorCode.RATE_LIMITED


class InternalServerError(_FixedStatusError):
    """Exception raised for an internal failure that is safe to report."""

    default_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
    default_code = ErrorCode.INTERNAL_SERVER_ERROR


class DatabaseError(_FixedStatusError):
    """Exception raised when a storage backend fails."""

    default_status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Database error"
    default_code = ErrorCode.DATABASE_ERROR


class BadGatewayError(_FixedStatusError):
    """Exception raised when an upstream service returns an invalid response."""

    default_status = HTTPStatus.BAD_GATEWAY
    default_message = "Bad gateway"
    default_code = ErrorCode.BAD_GATEWAY


class ServiceUnavailableError(_FixedStatusError):
    """Exception raised when the service is temporarily unable to respond."""

    default_status = HTTPStatus.SERVICE_UNAVAILABLE
    default_message = "Service unavailable"
    default_code = ErrorCode.SERVICE_UNAVAILABLE


class GatewayTimeoutError(_FixedStatusError):
    """Exception raised when an upstream service does not answer in time."""

    default_status = HTTPStatus.GATEWAY_TIMEOUT
    default_message = "Gateway timeout"
    default_code = ErrorCode.GATEWAY_TIMEOUT


@dataclass(frozen=True, slots=True)
class KnownFailure:
    """An intentional, structured ApiError."""

    error: ApiError
    kind: Literal["api"] = field(default="api", init=False)


@dataclass(frozen=True, slots=True)
class UnexpectedFailure:
    """Any exception that is not an ApiError."""

    error: BaseException
    kind: Literal["unexpected"] = field(default="unexpected", init=False)


type Failure = KnownFailure | UnexpectedFailure


def classify_error(exc: BaseException) -> Failure:
    """Tag an exception as a known ApiError or an unexpected failure.

    Args:
        exc: The exception to classify

    Returns:
        Failure: KnownFailure for ApiError instances, UnexpectedFailure otherwise
    """
    if isinstance(exc, ApiError):
        return KnownFailure(exc)
    return UnexpectedFailure(exc)
