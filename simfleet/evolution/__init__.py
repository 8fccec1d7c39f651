"""Metric evolution — bounded random walk plus periodic drift per server."""

from simfleet.evolution.engine import MetricEvolutionEngine
from simfleet.evolution.model import MODELS, DimensionModel, next_sample
from simfleet.evolution.state import EvolutionState

__all__ = [
    "MODELS",
    "DimensionModel",
    "EvolutionState",
    "MetricEvolutionEngine",
    "next_sample",
]
