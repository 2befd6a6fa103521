"""Server diagnostic endpoints: ping, health, status and test-fail."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from loguru import logger
from pydantic import BaseModel

from apikit.api.schemas.envelopes import ErrorEnvelope, SuccessEnvelope
from apikit.api.schemas.server import HealthData, PingData, StatusData
from apikit.api.utils.responses import ORJSONResponse, send_success_response
from apikit.services.server_diagnostics import ServerDiagnostics

router = APIRouter(tags=["server"])

_diagnostics = ServerDiagnostics()


def get_diagnostics() -> ServerDiagnostics:
    """Provide the process-wide diagnostics service."""
    return _diagnostics


Diagnostics = Annotated[ServerDiagnostics, Depends(get_diagnostics)]


def _payload(model: BaseModel) -> dict[str, object]:
    return model.model_dump(mode="json", by_alias=True)


@router.get("/ping", response_model=SuccessEnvelope[PingData])
async def ping(diagnostics: Diagnostics) -> ORJSONResponse:
    """Check that the server answers requests."""
    response = send_success_response(
        status.HTTP_200_OK,
        "Ping sent to the server successfully!",
        _payload(diagnostics.ping()),
    )
    logger.debug("Ping sent")
    return response


@router.get("/health", response_model=SuccessEnvelope[HealthData])
async def health(diagnostics: Diagnostics) -> ORJSONResponse:
    """Report uptime, memory usage and host load.

    Used by container health checks, orchestrator probes and load balancers.
    """
    return send_success_response(
        status.HTTP_200_OK,
        "Health check returned successfully!",
        _payload(diagnostics.health()),
    )


@router.get("/status", response_model=SuccessEnvelope[StatusData])
async def server_status(diagnostics: Diagnostics) -> ORJSONResponse:
    """Report that the server is running and for how long."""
    return send_success_response(
        status.HTTP_200_OK,
        "Server status returned successfully!",
        _payload(diagnostics.status()),
    )


@router.get(
    "/test-fail",
    responses={
        code: {"model": ErrorEnvelope}
        for code in (
            status.HTTP_400_BAD_REQUEST,
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_404_NOT_FOUND,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    },
)
async def test_fail(diagnostics: Diagnostics) -> None:
    """Raise a random error to exercise the error handler."""
    diagnostics.test_fail()
    logger.error("test_fail returned without raising")
