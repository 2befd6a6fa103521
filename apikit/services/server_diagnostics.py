"""Server diagnostics: liveness, health and status data.

Memory and CPU figures come from psutil so they are available on every
platform the service runs on.
"""

import random
import sys
import time
from datetime import UTC, datetime

import psutil

from apikit.api.schemas.server import HealthData, MemoryUsage, PingData, StatusData
from apikit.core.exceptions import (
    ApiError,
    BadRequestError,
    InternalServerError,
    NotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
)

# One error per represented status family: 500, 401, 404, 503, 400
TEST_FAILURES: tuple[type[ApiError], ...] = (
    InternalServerError,
    UnauthorizedError,
    NotFoundError,
    ServiceUnavailableError,
    BadRequestError,
)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class ServerDiagnostics:
    """Diagnostic data about the running server process."""

    def __init__(self, process: psutil.Process | None = None) -> None:
        self.process = process or psutil.Process()

    def uptime(self) -> float:
        """Seconds since the process was started."""
        return max(0.0, time.time() - self.process.create_time())

    def ping(self) -> PingData:
        """Answer a ping with the current time."""
        return PingData(message="pong", timestamp=_now())

    def health(self) -> HealthData:
        """Collect uptime, memory usage and host load."""
        memory_info = self.process.memory_info()
        return HealthData(
            status="ok",
            uptime=self.uptime(),
            memory=MemoryUsage(
                rss=memory_info.rss,
                heap_used=memory_info.rss,
                heap_total=memory_info.vms,
            ),
            cpu_count=psutil.cpu_count() or 1,
            platform=sys.platform,
            load_average=list(psutil.getloadavg()),
            timestamp=_now(),
        )

    def status(self) -> StatusData:
        """Report that the server is running."""
        return StatusData(status="running", uptime=self.uptime(), timestamp=_now())

    def test_fail(self) -> None:
        """Raise a randomly chosen ApiError to exercise the error path.

        Raises:
            ApiError: One of TEST_FAILURES, with its default fields.
        """
        error_class = random.choice(TEST_FAILURES)  # noqa: S311
        raise error_class()
