"""Shared test fixtures — fixed random draws and in-memory sinks."""

from __future__ import annotations

import random
from datetime import datetime, timezone

import pytest

from simfleet.exceptions import PublishError
from simfleet.fleet.registry import ServerRegistry
from simfleet.sink.base import BaseSink
from simfleet.types import Location, MetricSample, ServerIdentity


class FixedRandom:
    """Random source that replays ``values`` in a loop. No real randomness."""

    def __init__(self, *values: float):
        self._values = list(values) or [0.5]
        self._i = 0
        self.calls = 0

    def random(self) -> float:
        value = self._values[self._i % len(self._values)]
        self._i += 1
        self.calls += 1
        return value


class RecordingSink(BaseSink):
    """Sink that keeps every sample in memory."""

    name = "recording"

    def __init__(self):
        super().__init__()
        self.samples: list[MetricSample] = []
        self.opened = False
        self.closed = False

    async def _write(self, sample):
        self.samples.append(sample)

    async def open(self):
        self.opened = True

    async def aclose(self):
        self.closed = True


class FailingSink(BaseSink):
    """Sink that drops samples for the given server ids."""

    name = "failing"

    def __init__(self, fail_ids: set[str] | None = None):
        super().__init__()
        self._fail_ids = fail_ids
        self.samples: list[MetricSample] = []

    async def _write(self, sample):
        if self._fail_ids is None or sample.server_id in self._fail_ids:
            raise PublishError("sink unavailable")
        self.samples.append(sample)


# Epoch 0 puts every drift phase at 0: sin(0)=0, cos(0)=1, tan(0)=0.
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def make_identity(server_id: str = "server-001") -> ServerIdentity:
    return ServerIdentity(
        id=server_id,
        hostname=f"web-host-{server_id[-3:]}",
        ip_address="10.0.0.1",
        location=Location(
            country="Germany", city="Berlin", latitude=52.52, longitude=13.405,
        ),
    )


def make_sample(
    identity: ServerIdentity | None = None,
    cpu: float = 50.0,
    memory: float = 50.0,
    disk: float = 50.0,
    timestamp: datetime = EPOCH,
) -> MetricSample:
    identity = identity or make_identity()
    return MetricSample(
        timestamp=timestamp,
        server_id=identity.id,
        hostname=identity.hostname,
        ip_address=identity.ip_address,
        country=identity.location.country,
        city=identity.location.city,
        latitude=identity.location.latitude,
        longitude=identity.location.longitude,
        cpu_usage=cpu,
        memory_usage=memory,
        disk_usage=disk,
    )


@pytest.fixture
def identity():
    return make_identity()


@pytest.fixture
def registry():
    return ServerRegistry.generate(5, random.Random(42))


@pytest.fixture
def recording_sink():
    return RecordingSink()
