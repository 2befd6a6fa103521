"""Standardized response envelope schemas.

Every response the API returns is wrapped in one of two envelopes:

- **SuccessEnvelope**: ``{"success": true, "message": ..., "data"?: ...}``
- **ErrorEnvelope**: ``{"success": false, "message": ...,
  "error": {"code"?: ..., "details"?: ...}, "stackTrace"?: ...}``

Optional keys are omitted from the serialized body rather than sent as
null. The models are built with only the fields that are present and dumped
with ``exclude_unset``, which keeps that rule in one place. They also
document the envelopes in the OpenAPI schema.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field


class SuccessEnvelope[T](BaseModel):
    """Envelope for successful responses."""

    success: Literal[True] = Field(
        ...,
        description="Always true for successful responses",
    )

    message: str = Field(
        ...,
        description="Human-readable outcome message",
        examples=["Ping sent to the server successfully!"],
    )

    data: T | None = Field(
        default=None,
        description="Response payload, omitted when there is none",
    )


class ErrorBody(BaseModel):
    """Machine-readable part of an error envelope."""

    code: str | None = Field(
        default=None,
        description="Unique error code identifying the error type",
        examples=["NOT_FOUND", "INVALID_REQUEST_DATA", "UNHANDLED_ERROR"],
    )

    details: Any = Field(
        default=None,
        description="Additional error details (sentence or structured value)",
        examples=["The requested resource could not be found."],
    )


class ErrorEnvelope(BaseModel):
    """Envelope for error responses."""

    success: Literal[False] = Field(
        ...,
        description="Always false for error responses",
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Resource not found.", "Something went wrong"],
    )

    error: ErrorBody = Field(
        ...,
        description="Error code and details",
    )

    stack_trace: str | None = Field(
        default=None,
        serialization_alias="stackTrace",
        description="Stack trace (only populated in development)",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": False,
                    "message": "Invalid user input",
                    "error": {
                        "code": "INVALID_INPUT",
                        "details": "Email format is incorrect",
                    },
                },
                {
                    "success": False,
                    "message": "Something went wrong",
                    "error": {"code": "UNHANDLED_ERROR"},
                },
            ]
        }
    }
