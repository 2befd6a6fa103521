"""Payload schemas for the server diagnostic endpoints.

Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PingData(_CamelModel):
    """Ping payload."""

    message: str = Field(..., examples=["pong"])
    timestamp: str = Field(
        ...,
        description="ISO-8601 UTC time the ping was answered",
        examples=["2024-06-14T12:00:00.123456+00:00"],
    )


class MemoryUsage(_CamelModel):
    """Process memory usage in bytes."""

    rss: int = Field(..., description="Resident set size")
    heap_used: int = Field(..., description="Memory in use by the process")
    heap_total: int = Field(..., description="Memory reserved by the process")


class HealthData(_CamelModel):
    """Health check payload."""

    status: str = Field(..., examples=["ok"])
    uptime: float = Field(..., description="Process uptime in seconds")
    memory: MemoryUsage
    cpu_count: int = Field(..., description="Number of logical CPUs")
    platform: str = Field(..., examples=["linux", "darwin", "win32"])
    load_average: list[float] = Field(
        ...,
        min_length=3,
        max_length=3,
        description="System load over the last 1, 5 and 15 minutes",
    )
    timestamp: str


class StatusData(_CamelModel):
    """Server status payload."""

    status: str = Field(..., examples=["running"])
    uptime: float = Field(..., description="Process uptime in seconds")
    timestamp: str
