"""Response envelope builders and orjson-backed delivery.

The builders are pure functions producing the JSON-ready envelope dicts;
``deliver_response`` turns an envelope into an HTTP response. Keeping the
stack trace rule inside ``build_error_envelope`` means no other code path
can leak a trace outside development.

The ORJSONResponse class is set as the default response class for the
entire FastAPI application, so every JSON body goes through orjson.
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from apikit.api.schemas.envelopes import ErrorBody, ErrorEnvelope, SuccessEnvelope
from apikit.core.config import RuntimeMode
from apikit.core.types import Envelope, ErrorDetails


class ORJSONResponse(JSONResponse):
    """FastAPI Response class using orjson for high-performance JSON serialization.

    Keys keep their insertion order, so envelopes are sent as built.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        # Handle Pydantic models by calling model_dump()
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", by_alias=True)

        return orjson.dumps(content, option=orjson.OPT_NON_STR_KEYS)


def build_success_envelope(message: str, data: Any = None) -> Envelope:  # noqa: ANN401
    """Shape a success payload.

    Args:
        message: Human-readable outcome message.
        data: Payload to include. Omitted only when None; empty containers
            are kept.

    Returns:
        Envelope: ``{"success": True, "message": ..., "data"?: ...}``
    """
    fields: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        fields["data"] = data

    envelope: SuccessEnvelope[Any] = SuccessEnvelope(**fields)
    return envelope.model_dump(mode="json", exclude_unset=True)


def build_error_envelope(
    message: str,
    code: str | None = None,
    details: ErrorDetails | None = None,
    stack_trace: str | None = None,
    mode: RuntimeMode = RuntimeMode.PRODUCTION,
) -> Envelope:
    """Shape an error payload.

    Args:
        message: Human-readable error message.
        code: Machine-readable error code, included only if truthy.
        details: Additional error details, included only if truthy.
        stack_trace: Diagnostic stack trace.
        mode: Runtime mode. The stack trace is included only in development.

    Returns:
        Envelope: ``{"success": False, "message": ..., "error": {...},
            "stackTrace"?: ...}``
    """
    error_fields: dict[str, Any] = {}
    if code:
        error_fields["code"] = code
    if details:
        error_fields["details"] = details

    fields: dict[str, Any] = {
        "success": False,
        "message": message,
        "error": ErrorBody(**error_fields),
    }
    if mode is RuntimeMode.DEVELOPMENT and stack_trace:
        fields["stack_trace"] = stack_trace

    envelope = ErrorEnvelope(**fields)
    return envelope.model_dump(mode="json", by_alias=True, exclude_unset=True)


def deliver_response(
    status_code: int,
    envelope: Envelope,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    """Set the status code and serialize an envelope as the response body.

    Args:
        status_code: HTTP status code.
        envelope: Envelope built by one of the builders.
        headers: Extra response headers.

    Returns:
        ORJSONResponse: The response to send.
    """
    return ORJSONResponse(status_code=status_code, content=envelope, headers=headers)


def send_success_response(
    status_code: int,
    message: str,
    data: Any = None,  # noqa: ANN401
) -> ORJSONResponse:
    """Build and deliver a success envelope."""
    return deliver_response(status_code, build_success_envelope(message, data))


def send_error_response(  # noqa: PLR0913
    status_code: int,
    message: str,
    code: str | None = None,
    details: ErrorDetails | None = None,
    stack_trace: str | None = None,
    mode: RuntimeMode = RuntimeMode.PRODUCTION,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    """Build and deliver an error envelope."""
    envelope = build_error_envelope(message, code, details, stack_trace, mode)
    return deliver_response(status_code, envelope, headers)
