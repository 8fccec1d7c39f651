"""Simulated fleet — the servers that telemetry is generated for."""

from simfleet.fleet.registry import ServerRegistry

__all__ = ["ServerRegistry"]
