"""Server Registry — the static set of simulated servers.

Built once at startup. Each server gets a sequential id (``server-001``),
a role-based hostname, a private 10.x.x.x address, and a location
jittered around one of a handful of real city anchors. Read-only after
construction.
"""

from __future__ import annotations

import logging
import random
from typing import Iterator

from simfleet.types import Location, ServerId, ServerIdentity

_logger = logging.getLogger(__name__)

# (country, city, latitude, longitude)
CITY_ANCHORS: tuple[tuple[str, str, float, float], ...] = (
    ("United States", "New York", 40.7128, -74.0060),
    ("United States", "Los Angeles", 34.0522, -118.2437),
    ("United Kingdom", "London", 51.5074, -0.1278),
    ("Germany", "Berlin", 52.5200, 13.4050),
    ("Japan", "Tokyo", 35.6762, 139.6503),
)

HOST_ROLES: tuple[str, ...] = ("web", "db", "app", "cache", "worker")

LOCATION_JITTER_DEGREES = 0.25


def make_server(index: int, rng: random.Random) -> ServerIdentity:
    """Build the identity for the 1-based ``index``-th server."""
    country, city, lat, lon = rng.choice(CITY_ANCHORS)
    role = rng.choice(HOST_ROLES)
    octets = [rng.randrange(256) for _ in range(3)]

    return ServerIdentity(
        id=f"server-{index:03d}",
        hostname=f"{role}-host-{index:03d}",
        ip_address="10.{}.{}.{}".format(*octets),
        location=Location(
            country=country,
            city=city,
            latitude=lat + rng.uniform(-LOCATION_JITTER_DEGREES, LOCATION_JITTER_DEGREES),
            longitude=lon + rng.uniform(-LOCATION_JITTER_DEGREES, LOCATION_JITTER_DEGREES),
        ),
    )


class ServerRegistry:
    """Immutable, ordered collection of server identities keyed by id."""

    def __init__(self, servers: list[ServerIdentity]) -> None:
        self._servers: dict[ServerId, ServerIdentity] = {}
        for server in servers:
            if server.id in self._servers:
                raise ValueError(f"Duplicate server id: {server.id}")
            self._servers[server.id] = server

    @classmethod
    def generate(cls, count: int, rng: random.Random | None = None) -> ServerRegistry:
        """Create ``count`` servers named server-001 .. server-NNN."""
        if count < 0:
            raise ValueError(f"Server count must be non-negative, got {count}")
        rng = rng or random.Random()
        registry = cls([make_server(i, rng) for i in range(1, count + 1)])
        _logger.info("Generated %d simulated servers", count)
        return registry

    def get(self, server_id: ServerId) -> ServerIdentity | None:
        return self._servers.get(server_id)

    def ids(self) -> list[ServerId]:
        return list(self._servers)

    def __iter__(self) -> Iterator[ServerIdentity]:
        return iter(self._servers.values())

    def __len__(self) -> int:
        return len(self._servers)

    def __contains__(self, server_id: object) -> bool:
        return server_id in self._servers
