"""Emission — the periodic cycle loop that drives generation."""

from simfleet.emission.scheduler import CycleReport, EmissionScheduler

__all__ = ["CycleReport", "EmissionScheduler"]
