"""Request validation against Pydantic schemas.

``validate_request(schema)`` builds a FastAPI dependency that validates the
combined ``{"body", "query", "params"}`` of a request. Only JSON bodies are
parsed; a body of any other content type counts as missing. Pydantic reports every
violation at once and ignores unknown fields unless the schema forbids them.
The validated values are not written back onto the request; endpoints keep
reading their own parameters.

Usage:
    class CreateUserRequest(BaseModel):
        body: UserBody
        params: dict[str, str] = {}

    @router.post("/users/{user_id}", dependencies=[Depends(validate_request(...))])
"""

from collections.abc import Awaitable, Callable, Iterable, Mapping
from typing import Any

import orjson
from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from apikit.core.exceptions import BadRequestError, ErrorCode, ValidationError

VIOLATION_SEPARATOR = ". "


def format_violations(errors: Iterable[Mapping[str, Any]]) -> str:
    """Join validation errors into a single readable message.

    Args:
        errors: Error dicts as produced by Pydantic (``loc`` and ``msg`` keys).

    Returns:
        str: Every violation as ``location: message``, in reported order.
    """
    violations = []
    for error in errors:
        location = ".".join(str(loc) for loc in error.get("loc", ()))
        message = error.get("msg", "Invalid value")
        violations.append(f"{location}: {message}" if location else message)
    return VIOLATION_SEPARATOR.join(violations)


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


async def _read_body(request: Request) -> Any:  # noqa: ANN401
    # Bodies of other media types are not parsed and validate as absent
    if not _is_json(request.headers.get("content-type", "")):
        return None
    raw_body = await request.body()
    if not raw_body:
        return None
    try:
        return orjson.loads(raw_body)
    except orjson.JSONDecodeError as exc:
        raise BadRequestError(
            "Malformed JSON request body",
            code=ErrorCode.MALFORMED_JSON,
            details=str(exc),
        ) from exc


def validate_request(
    schema: type[BaseModel],
) -> Callable[[Request], Awaitable[None]]:
    """Create a dependency validating a request against ``schema``.

    Args:
        schema: Pydantic model with any of the fields ``body``, ``query``
            and ``params``.

    Returns:
        Callable: Async dependency raising ValidationError (422,
            ``INVALID_REQUEST_DATA``) when the request does not match.
    """

    async def _validate(request: Request) -> None:
        payload = {
            "body": await _read_body(request),
            "query": dict(request.query_params),
            "params": dict(request.path_params),
        }

        try:
            schema.model_validate(payload)
        except SchemaValidationError as exc:
            raise ValidationError(
                "Request validation failed",
                code=ErrorCode.INVALID_REQUEST_DATA,
                details=format_violations(exc.errors()),
            ) from exc

    return _validate
