"""Global error handling for the FastAPI application.

Errors raised anywhere in the request pipeline end up in a two-stage chain:

1. **ApiErrorHandler** handles structured ``ApiError`` exceptions precisely,
   resolving status, message, code and details against the ErrorKind
   registry.
2. **UnhandledErrorHandler** turns anything else into a uniform, non-leaky
   500 envelope.

Each stage either returns a response (the request is handled) or returns
None to forward the exception to the next stage. Once the response has
started, every stage forwards, so at most one envelope is ever written per
request. ``ErrorHandlerMiddleware`` runs the chain; errors raised by the
framework itself (HTTPException, request validation, rate limiting) are
translated to ApiError and funneled through the same chain.
"""

import traceback
from collections.abc import Sequence
from http import HTTPStatus
from typing import Protocol

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from apikit.api.utils.responses import send_error_response
from apikit.api.validation import format_violations
from apikit.core.config import RuntimeMode, Settings
from apikit.core.error_kinds import DEFAULT_ERROR_KINDS, ErrorKindRegistry
from apikit.core.exceptions import (
    ApiError,
    ErrorCode,
    KnownFailure,
    RateLimitedError,
    UnexpectedFailure,
    ValidationError,
    classify_error,
)
from apikit.core.types import LogContext

MIN_ERROR_STATUS = 400
MAX_ERROR_STATUS = 599
UNHANDLED_ERROR_MESSAGE = "Something went wrong"


class ErrorHandlerStage(Protocol):
    """One stage of the error handler chain."""

    def __call__(
        self, exc: BaseException, request: Request, *, headers_sent: bool
    ) -> Response | None:
        """Return a response to handle the error, or None to forward it."""
        ...


def resolve_status(status: object) -> int:
    """Return ``status`` if it is an HTTP error status, else 500.

    Args:
        status: Status value carried by the error.

    Returns:
        int: A status code in [400, 599].
    """
    if (
        isinstance(status, int)
        and not isinstance(status, bool)
        and MIN_ERROR_STATUS <= status <= MAX_ERROR_STATUS
    ):
        return int(status)
    return HTTPStatus.INTERNAL_SERVER_ERROR.value


def _request_fields(request: Request) -> dict[str, str]:
    url = request.url.path
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return {"url": url, "method": request.method}


class ApiErrorHandler:
    """Handle ApiError exceptions.

    Args:
        registry: Fallback fields keyed by status code.
        mode: Runtime mode; stack traces are exposed only in development.
    """

    def __init__(self, registry: ErrorKindRegistry, mode: RuntimeMode) -> None:
        self.registry = registry
        self.mode = mode

    def __call__(
        self, exc: BaseException, request: Request, *, headers_sent: bool
    ) -> Response | None:
        """Handle an ApiError or forward anything else.

        Args:
            exc: The exception raised in the pipeline.
            request: The request being processed.
            headers_sent: Whether the response has already started.

        Returns:
            Response | None: The error envelope response, or None to forward.
        """
        if headers_sent:
            return None

        match classify_error(exc):
            case KnownFailure(error=error):
                try:
                    return self._handle(error, request)
                except Exception:
                    logger.exception(
                        "Failed to handle {}, sending generic error response",
                        type(exc).__name__,
                    )
                    return self._generic_response()
            case UnexpectedFailure():
                return None

    def _handle(self, error: ApiError, request: Request) -> Response:
        status_code = resolve_status(error.status)
        fallback = self.registry.resolve(status_code)

        message = error.message or fallback.message
        code = error.code or fallback.code
        details = error.details or fallback.details
        stack_trace = getattr(error, "stack", None)

        log_context: LogContext = {
            "error_code": code,
            "details": details,
            "status_code": status_code,
            **_request_fields(request),
        }
        if self.mode.is_development and stack_trace:
            log_context["stack_trace"] = stack_trace

        logger.bind(**log_context).error("{}", message)

        return send_error_response(
            status_code, message, code, details, stack_trace, self.mode
        )

    def _generic_response(self) -> Response:
        fallback = self.registry.resolve(HTTPStatus.INTERNAL_SERVER_ERROR)
        return send_error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            fallback.message,
            fallback.code,
            fallback.details,
            mode=self.mode,
        )


class UnhandledErrorHandler:
    """Handle any exception that no earlier stage handled.

    Args:
        mode: Runtime mode; stack traces are exposed only in development.
    """

    def __init__(self, mode: RuntimeMode) -> None:
        self.mode = mode

    def __call__(
        self, exc: BaseException, request: Request, *, headers_sent: bool
    ) -> Response | None:
        """Convert any exception to a generic 500 error envelope.

        Args:
            exc: The exception raised in the pipeline.
            request: The request being processed.
            headers_sent: Whether the response has already started.

        Returns:
            Response | None: The error envelope response, or None when the
                response has already started.
        """
        if headers_sent:
            return None

        stack_trace: str | None = None
        try:
            stack_trace = "".join(traceback.format_exception(exc))
            logger.opt(exception=exc).bind(
                error_code=ErrorCode.UNHANDLED_ERROR.value,
                error_message=str(exc) or "Unhandled error",
                **_request_fields(request),
            ).error("Unhandled exception: {}", type(exc).__name__)
        except Exception:  # noqa: BLE001 - this stage must always answer
            logger.opt(exception=True).error("Failed to log unhandled exception")

        return send_error_response(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            UNHANDLED_ERROR_MESSAGE,
            ErrorCode.UNHANDLED_ERROR.value,
            stack_trace=stack_trace,
            mode=self.mode,
        )


class ErrorHandlerChain:
    """Run error handler stages in order until one produces a response.

    Args:
        stages: Stages to run, first to last.
    """

    def __init__(self, stages: Sequence[ErrorHandlerStage]) -> None:
        self.stages = tuple(stages)

    def handle(
        self, exc: BaseException, request: Request, *, headers_sent: bool = False
    ) -> Response | None:
        """Return the first response produced by a stage, or None.

        None means every stage forwarded the error (the request was
        bypassed) and the caller should let it propagate.
        """
        for stage in self.stages:
            response = stage(exc, request, headers_sent=headers_sent)
            if response is not None:
                return response
        return None


def build_error_handler_chain(
    settings: Settings,
    registry: ErrorKindRegistry = DEFAULT_ERROR_KINDS,
) -> ErrorHandlerChain:
    """Create the error handler chain for the application.

    Args:
        settings: Application settings providing the runtime mode.
        registry: Fallback fields keyed by status code.

    Returns:
        ErrorHandlerChain: ApiError stage followed by the unhandled stage.
    """
    mode = settings.environment
    return ErrorHandlerChain(
        [ApiErrorHandler(registry, mode), UnhandledErrorHandler(mode)]
    )


class ErrorHandlerMiddleware:
    """ASGI middleware running the error handler chain on raised exceptions.

    Tracks whether ``http.response.start`` has been sent so the chain can
    bypass requests whose response is already on the wire. Exceptions that
    every stage forwards are re-raised to the server.

    Args:
        app: The ASGI application to wrap.
        chain: Error handler chain to run.
    """

    def __init__(self, app: ASGIApp, *, chain: ErrorHandlerChain) -> None:
        self.app = app
        self.chain = chain

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Process the request, converting raised exceptions to responses."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_wrapper(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            response = self.chain.handle(
                exc, Request(scope), headers_sent=response_started
            )
            if response is None:
                raise
            await response(scope, receive, send)


def _chain_for(request: Request) -> ErrorHandlerChain:
    chain: ErrorHandlerChain = request.app.state.error_handler_chain
    return chain


def _handled(request: Request, error: ApiError) -> Response:
    response = _chain_for(request).handle(error, request)
    if response is None:
        # Only a started response makes the chain forward.
        raise error
    return response


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException through the error handler chain.

    The reason phrase of the status becomes the error code, e.g. 405 ->
    ``METHOD_NOT_ALLOWED``.

    Args:
        request: The request that caused the exception
        exc: The HTTPException to handle

    Returns:
        Response: Error envelope response

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    try:
        code = HTTPStatus(exc.status_code).phrase.upper().replace(" ", "_")
    except ValueError:
        code = None

    error = ApiError(
        message=str(exc.detail) if exc.detail else None,
        status=exc.status_code,
        code=code,
    )
    response = _handled(request, error)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError through the error handler chain.

    Args:
        request: The request that caused the exception
        exc: The RequestValidationError to handle

    Returns:
        Response: 422 error envelope listing every violation

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    error = ValidationError(
        "Request validation failed",
        code=ErrorCode.INVALID_REQUEST_DATA,
        details=format_violations(exc.errors()),
    )
    return _handled(request, error)


def rate_limit_exceeded_handler(request: Request, exc: Exception) -> Response:
    """Handle slowapi RateLimitExceeded through the error handler chain.

    Synchronous because slowapi's middleware calls the handler directly.

    Args:
        request: The request that exceeded the limit
        exc: The RateLimitExceeded exception

    Returns:
        Response: 429 error envelope

    Raises:
        TypeError: If exc is not a RateLimitExceeded instance
    """
    if not isinstance(exc, RateLimitExceeded):
        raise TypeError(f"Expected RateLimitExceeded, got {type(exc).__name__}")

    error = RateLimitedError(
        "Too many requests, please try again later.",
        details=f"Rate limit exceeded: {exc.detail}",
    )
    return _handled(request, error)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle exceptions raised outside ErrorHandlerMiddleware.

    Starlette calls this from its outermost server error middleware, so it
    covers failures in the middleware wrapped around the error handler
    middleware, such as rate limiting or request logging.

    Args:
        request: The request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: Error envelope response
    """
    response = _chain_for(request).handle(exc, request)
    if response is None:
        raise exc
    return response


def register_exception_handlers(app: FastAPI, chain: ErrorHandlerChain) -> None:
    """Register the error handler chain with the FastAPI application.

    Framework exceptions are handled by exception handlers; everything
    raised past them is caught by ErrorHandlerMiddleware, which must be
    added as the innermost middleware. Errors from the outer middleware
    reach the chain through the ``Exception`` handler.

    Args:
        app: The FastAPI application instance
        chain: The error handler chain
    """
    app.state.error_handler_chain = chain

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
    app.add_middleware(ErrorHandlerMiddleware, chain=chain)

    logger.info("Exception handlers registered")
