"""Default error fields keyed by HTTP status code.

When an ApiError leaves its message, code or details empty, the error handler
fills the gap from this registry. Statuses without an entry resolve to the
500 entry so the fallback path never produces an empty field.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from http import HTTPStatus
from types import MappingProxyType

from apikit.core.exceptions import ErrorCode


@dataclass(frozen=True, slots=True)
class ErrorKind:
    """Canonical message, code and details for one HTTP status."""

    message: str
    code: str
    details: str


class ErrorKindRegistry(Mapping[int, ErrorKind]):
    """Read-only table of ErrorKind entries keyed by status code.

    Args:
        kinds: Entries to register. The table must contain a 500 entry.

    Raises:
        ValueError: If no entry exists for 500.
    """

    def __init__(self, kinds: Mapping[int, ErrorKind]) -> None:
        if HTTPStatus.INTERNAL_SERVER_ERROR not in kinds:
            msg = "ErrorKindRegistry requires an entry for status 500"
            raise ValueError(msg)
        self._kinds: Mapping[int, ErrorKind] = MappingProxyType(dict(kinds))

    def __getitem__(self, status: int) -> ErrorKind:
        return self._kinds[status]

    def __iter__(self) -> Iterator[int]:
        return iter(self._kinds)

    def __len__(self) -> int:
        return len(self._kinds)

    def lookup(self, status: object) -> ErrorKind | None:
        """Return the entry for a status, or None when it is not registered.

        Never raises, whatever the type of ``status``.
        """
        try:
            return self._kinds.get(status)  # type: ignore[call-overload]
        except TypeError:
            # unhashable status values
            return None

    def resolve(self, status: object) -> ErrorKind:
        """Return the entry for a status, falling back to the 500 entry."""
        kind = self.lookup(status)
        if kind is None:
            return self._kinds[HTTPStatus.INTERNAL_SERVER_ERROR]
        return kind


DEFAULT_ERROR_KINDS = ErrorKindRegistry(
    {
        HTTPStatus.BAD_REQUEST: ErrorKind(
            message="Bad request",
            code=ErrorCode.BAD_REQUEST.value,
            details="The request was invalid",
        ),
        HTTPStatus.UNAUTHORIZED: ErrorKind(
            message="Authentication required or invalid credentials.",
            code=ErrorCode.UNAUTHORIZED.value,
            details="You are not authorized to access this resource.",
        ),
        HTTPStatus.FORBIDDEN: ErrorKind(
            message="Access denied.",
            code=ErrorCode.FORBIDDEN.value,
            details="You do not have permission to perform this action.",
        ),
        HTTPStatus.NOT_FOUND: ErrorKind(
            message="Resource not found.",
            code=ErrorCode.NOT_FOUND.value,
            details="The requested resource could not be found.",
        ),
        HTTPStatus.CONFLICT: ErrorKind(
            message="Conflict detected.",
            code=ErrorCode.RESOURCE_CONFLICT.value,
            details="A resource with this identifier already exists.",
        ),
        HTTPStatus.UNPROCESSABLE_ENTITY: ErrorKind(
            message="Unprocessable request.",
            code=ErrorCode.UNPROCESSABLE_ENTITY.value,
            details=(
                "The server understands the request but was unable to process it."
            ),
        ),
        HTTPStatus.TOO_MANY_REQUESTS: ErrorKind(
            message="Too many requests.",
            code=ErrorCode.RATE_LIMITED.value,
            details=(
                "You have exceeded the number of allowed requests. "
                "Please try again later."
            ),
        ),
        HTTPStatus.INTERNAL_SERVER_ERROR: ErrorKind(
            message="An internal server error occurred.",
            code=ErrorCode.INTERNAL_SERVER_ERROR.value,
            details="Something went wrong on our server.",
        ),
        HTTPStatus.BAD_GATEWAY: ErrorKind(
            message="Bad gateway.",
            code=ErrorCode.BAD_GATEWAY.value,
            details="The server received an invalid response from an upstream service.",
        ),
        HTTPStatus.SERVICE_UNAVAILABLE: ErrorKind(
            message="Service temporarily unavailable.",
            code=ErrorCode.SERVICE_UNAVAILABLE.value,
            details="The service is under maintenance or temporarily overloaded.",
        ),
        HTTPStatus.GATEWAY_TIMEOUT: ErrorKind(
            message="Gateway timeout.",
            code=ErrorCode.GATEWAY_TIMEOUT.value,
            details=(
                "The server did not receive a timely response from an upstream "
                "service."
            ),
        ),
    }
)
