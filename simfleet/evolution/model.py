"""Metric evolution model — how one server's reading becomes the next.

Each usage dimension evolves independently:

* **bootstrap** (no previous reading): a uniform draw from a
  dimension-specific starting range.
* **continuation**: previous value + bounded random perturbation +
  periodic drift, clamped to [0, 100] and rounded to 2 decimals.

The drift term is ``amplitude * wave(epoch_seconds // period)``. The phase
advances by one radian per elapsed period, so each dimension moves along
its own wave at its own rate. Disk uses ``tan``, which spikes near its
asymptotes; the final clamp keeps those spikes inside the valid range.

Everything here is a pure function of its inputs. Randomness comes from
any object with a ``random()`` method returning a float in [0, 1).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Protocol

from simfleet.types import Dimension, MetricSample, ServerIdentity

USAGE_MIN = 0.0
USAGE_MAX = 100.0
PRECISION = 2


class RandomSource(Protocol):
    def random(self) -> float: ...


@dataclass(frozen=True)
class DimensionModel:
    """Constants that shape one dimension's walk."""

    dimension: Dimension
    bootstrap_low: float
    bootstrap_high: float
    jitter: float  # perturbation is uniform in [-jitter, jitter)
    amplitude: float
    period_seconds: int
    wave: Callable[[float], float]

    @property
    def max_step(self) -> float:
        """Largest unclamped move between consecutive readings (bounded waves only)."""
        return self.jitter + self.amplitude


MODELS: dict[Dimension, DimensionModel] = {
    Dimension.CPU: DimensionModel(
        Dimension.CPU, bootstrap_low=10.0, bootstrap_high=50.0,
        jitter=5.0, amplitude=5.0, period_seconds=60, wave=math.sin,
    ),
    Dimension.MEMORY: DimensionModel(
        Dimension.MEMORY, bootstrap_low=20.0, bootstrap_high=70.0,
        jitter=4.0, amplitude=3.0, period_seconds=120, wave=math.cos,
    ),
    Dimension.DISK: DimensionModel(
        Dimension.DISK, bootstrap_low=5.0, bootstrap_high=35.0,
        jitter=3.0, amplitude=2.0, period_seconds=180, wave=math.tan,
    ),
}


def clamp(value: float, low: float = USAGE_MIN, high: float = USAGE_MAX) -> float:
    # NaN sorts nowhere; pin it to the floor.
    if math.isnan(value):
        return low
    return max(low, min(high, value))


def evolve_value(previous: float, perturbation: float, drift: float) -> float:
    """Combine the three terms, clamp into range, round to 2 decimals."""
    return round(clamp(previous + perturbation + drift), PRECISION)


def drift(model: DimensionModel, now: datetime) -> float:
    """Periodic drift for ``model`` at wall-clock instant ``now``."""
    phase = int(now.timestamp()) // model.period_seconds
    return model.amplitude * model.wave(float(phase))


def perturbation(model: DimensionModel, rng: RandomSource) -> float:
    return rng.random() * 2 * model.jitter - model.jitter


def bootstrap_value(model: DimensionModel, rng: RandomSource) -> float:
    span = model.bootstrap_high - model.bootstrap_low
    return round(model.bootstrap_low + rng.random() * span, PRECISION)


def next_value(
    model: DimensionModel,
    previous: float | None,
    now: datetime,
    rng: RandomSource,
) -> float:
    if previous is None:
        return bootstrap_value(model, rng)
    return evolve_value(previous, perturbation(model, rng), drift(model, now))


def next_sample(
    identity: ServerIdentity,
    previous: MetricSample | None,
    now: datetime,
    rng: RandomSource,
    models: dict[Dimension, DimensionModel] = MODELS,
) -> MetricSample:
    """Produce the reading that follows ``previous`` for ``identity``.

    ``previous`` must belong to the same server (or be None for its first
    reading). Dimensions draw from ``rng`` in cpu, memory, disk order.
    A naive ``now`` is taken as UTC.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    usage = {
        dim: next_value(
            model,
            previous.usage(dim) if previous is not None else None,
            now,
            rng,
        )
        for dim, model in models.items()
    }
    return MetricSample.for_server(identity, now, usage)
