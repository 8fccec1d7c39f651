"""Core types shared across all simfleet subsystems."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ── ID Types ──────────────────────────────────────────────────────────────────

ServerId: TypeAlias = str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Usage dimensions ──────────────────────────────────────────────────────────


class Dimension(str, Enum):
    CPU = "cpu"
    MEMORY = "memory"
    DISK = "disk"

    @property
    def field(self) -> str:
        """Name of the sample/document field carrying this dimension."""
        return f"{self.value}_usage"


# ── Server identity ──────────────────────────────────────────────────────────


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str
    city: str
    latitude: float
    longitude: float


class ServerIdentity(BaseModel):
    """A simulated server. Created once by the registry, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: ServerId
    hostname: str
    ip_address: str
    location: Location


# ── Samples ──────────────────────────────────────────────────────────────────


class MetricSample(BaseModel):
    """One timestamped CPU/memory/disk reading for one server."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utcnow)
    server_id: ServerId
    hostname: str
    ip_address: str
    country: str
    city: str
    latitude: float
    longitude: float
    cpu_usage: float = Field(ge=0.0, le=100.0)
    memory_usage: float = Field(ge=0.0, le=100.0)
    disk_usage: float = Field(ge=0.0, le=100.0)

    @field_validator("timestamp")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @classmethod
    def for_server(
        cls,
        identity: ServerIdentity,
        timestamp: datetime,
        usage: dict[Dimension, float],
    ) -> MetricSample:
        """Denormalize a server's identity next to its usage readings."""
        return cls(
            timestamp=timestamp,
            server_id=identity.id,
            hostname=identity.hostname,
            ip_address=identity.ip_address,
            country=identity.location.country,
            city=identity.location.city,
            latitude=identity.location.latitude,
            longitude=identity.location.longitude,
            **{dim.field: value for dim, value in usage.items()},
        )

    def usage(self, dimension: Dimension) -> float:
        return getattr(self, dimension.field)

    @property
    def epoch_seconds(self) -> int:
        return int(self.timestamp.timestamp())

    @property
    def document_id(self) -> str:
        """Write key for the sink: server id plus emission epoch-seconds."""
        return f"{self.server_id}-{self.epoch_seconds}"

    def to_document(self) -> dict[str, Any]:
        """Render the sink payload (`@timestamp` plus flat fields)."""
        doc = self.model_dump(exclude={"timestamp"})
        return {
            "@timestamp": self.timestamp.isoformat().replace("+00:00", "Z"),
            **doc,
        }
