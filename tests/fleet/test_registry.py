"""Tests for the server registry."""

import ipaddress
import random

import pytest

from simfleet.fleet.registry import (
    CITY_ANCHORS,
    HOST_ROLES,
    LOCATION_JITTER_DEGREES,
    ServerRegistry,
    make_server,
)
from tests.conftest import make_identity


def test_generate_sequential_ids():
    registry = ServerRegistry.generate(12, random.Random(1))
    assert len(registry) == 12
    assert registry.ids()[0] == "server-001"
    assert registry.ids()[-1] == "server-012"
    assert len(set(registry.ids())) == 12


def test_generate_zero_servers():
    assert len(ServerRegistry.generate(0)) == 0


def test_generate_negative_count_rejected():
    with pytest.raises(ValueError):
        ServerRegistry.generate(-1)


def test_hostnames_are_role_based():
    for server in ServerRegistry.generate(20, random.Random(2)):
        role, _, suffix = server.hostname.partition("-host-")
        assert role in HOST_ROLES
        assert suffix == server.id.removeprefix("server-")


def test_addresses_are_private_ten_net():
    for server in ServerRegistry.generate(50, random.Random(3)):
        addr = ipaddress.IPv4Address(server.ip_address)
        assert addr in ipaddress.IPv4Network("10.0.0.0/8")


def test_locations_jitter_around_anchors():
    anchors = {(country, city): (lat, lon) for country, city, lat, lon in CITY_ANCHORS}
    for server in ServerRegistry.generate(100, random.Random(4)):
        loc = server.location
        lat, lon = anchors[(loc.country, loc.city)]
        assert abs(loc.latitude - lat) <= LOCATION_JITTER_DEGREES
        assert abs(loc.longitude - lon) <= LOCATION_JITTER_DEGREES


def test_same_seed_same_fleet():
    a = ServerRegistry.generate(10, random.Random(77))
    b = ServerRegistry.generate(10, random.Random(77))
    assert list(a) == list(b)


def test_lookup_and_contains():
    registry = ServerRegistry.generate(3, random.Random(5))
    assert "server-002" in registry
    assert registry.get("server-002").id == "server-002"
    assert registry.get("server-999") is None


def test_duplicate_ids_rejected():
    with pytest.raises(ValueError, match="Duplicate"):
        ServerRegistry([make_identity("server-001"), make_identity("server-001")])


def test_identities_are_frozen():
    server = make_server(1, random.Random(6))
    with pytest.raises(Exception):
        server.hostname = "changed"
