"""Unit tests for request validation."""

from typing import Any

import pytest
from pydantic import BaseModel, ConfigDict, Field
from starlette.requests import Request

from apikit.api.validation import format_violations, validate_request
from apikit.core.exceptions import BadRequestError, ValidationError


class UserBody(BaseModel):
    name: str = Field(min_length=1)
    age: int


class CreateUserRequest(BaseModel):
    body: UserBody
    params: dict[str, str] = {}


class SearchQuery(BaseModel):
    q: str
    limit: int = 10


class SearchRequest(BaseModel):
    query: SearchQuery


class StrictQuery(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page: int = 1


class StrictRequest(BaseModel):
    query: StrictQuery


def _request(
    body: bytes = b"",
    query_string: bytes = b"",
    path_params: dict[str, Any] | None = None,
    content_type: bytes = b"application/json",
) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/users",
        "root_path": "",
        "scheme": "http",
        "query_string": query_string,
        "headers": [(b"content-type", content_type)],
        "server": ("testserver", 80),
        "path_params": path_params or {},
    }

    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)


@pytest.mark.unit
class TestFormatViolations:
    """Test joining of validation errors."""

    def test_joins_in_order(self) -> None:
        """Test that violations keep their reported order."""
        message = format_violations(
            [
                {"loc": ("body", "name"), "msg": "Field required"},
                {"loc": ("query", "limit"), "msg": "Input should be a valid integer"},
            ]
        )

        assert message == (
            "body.name: Field required. query.limit: Input should be a valid integer"
        )

    def test_nested_and_indexed_locations(self) -> None:
        """Test that list indexes appear in the location path."""
        message = format_violations(
            [{"loc": ("body", "items", 0, "price"), "msg": "Must be positive"}]
        )

        assert message == "body.items.0.price: Must be positive"

    def test_missing_location(self) -> None:
        """Test that violations without a location show only the message."""
        assert format_violations([{"loc": (), "msg": "Invalid"}]) == "Invalid"

    def test_no_errors(self) -> None:
        """Test that an empty error list yields an empty message."""
        assert format_violations([]) == ""


@pytest.mark.unit
class TestValidateRequest:
    """Test the validation dependency."""

    async def test_valid_request_passes(self) -> None:
        """Test that a matching request is accepted without side effects."""
        validate = validate_request(CreateUserRequest)
        request = _request(b'{"name": "Ada", "age": 36}', path_params={"id": "1"})

        assert await validate(request) is None
        assert request.path_params == {"id": "1"}

    async def test_reports_every_violation(self) -> None:
        """Test that all violations are reported together."""
        validate = validate_request(CreateUserRequest)

        with pytest.raises(ValidationError) as exc_info:
            await validate(_request(b'{"name": "", "age": "old"}'))

        error = exc_info.value
        assert error.status == 422
        assert error.code == "INVALID_REQUEST_DATA"
        assert error.message == "Request validation failed"
        assert isinstance(error.details, str)
        assert "body.name:" in error.details
        assert "body.age:" in error.details
        assert error.details.index("body.name") < error.details.index("body.age")

    async def test_missing_body(self) -> None:
        """Test that a required body cannot be omitted."""
        validate = validate_request(CreateUserRequest)

        with pytest.raises(ValidationError) as exc_info:
            await validate(_request())

        assert str(exc_info.value.details).startswith("body:")

    async def test_query_parameters(self) -> None:
        """Test validation of query parameters."""
        validate = validate_request(SearchRequest)

        await validate(_request(query_string=b"q=python&limit=5"))

        with pytest.raises(ValidationError) as exc_info:
            await validate(_request(query_string=b"limit=many"))

        details = str(exc_info.value.details)
        assert "query.q: Field required" in details
        assert "query.limit:" in details

    async def test_unknown_fields_are_ignored(self) -> None:
        """Test that extra fields pass unless the schema forbids them."""
        await validate_request(SearchRequest)(
            _request(query_string=b"q=x&unexpected=1")
        )

        with pytest.raises(ValidationError, match="Request validation failed"):
            await validate_request(StrictRequest)(
                _request(query_string=b"unexpected=1")
            )

    async def test_malformed_json(self) -> None:
        """Test that an unparsable body is a bad request."""
        validate = validate_request(CreateUserRequest)

        with pytest.raises(BadRequestError) as exc_info:
            await validate(_request(b'{"name": "Ada",'))

        assert exc_info.value.status == 400
        assert exc_info.value.code == "MALFORMED_JSON"

    @pytest.mark.parametrize(
        "content_type",
        [b"application/json; charset=utf-8", b"application/vnd.api+json"],
    )
    async def test_json_media_types_are_parsed(self, content_type: bytes) -> None:
        """Test that JSON variants and parameters are recognized."""
        validate = validate_request(CreateUserRequest)

        await validate(
            _request(b'{"name": "Ada", "age": 36}', content_type=content_type)
        )

    async def test_non_json_body_is_not_parsed(self) -> None:
        """Test that a form body is not reported as malformed JSON."""
        validate = validate_request(SearchRequest)
        request = _request(
            b"name=Ada&age=36",
            query_string=b"q=python",
            content_type=b"application/x-www-form-urlencoded",
        )

        assert await validate(request) is None

    async def test_non_json_body_counts_as_missing(self) -> None:
        """Test that a required body sent as plain text fails validation."""
        validate = validate_request(CreateUserRequest)

        with pytest.raises(ValidationError) as exc_info:
            await validate(_request(b"{}", content_type=b"text/plain"))

        assert str(exc_info.value.details).startswith("body:")
