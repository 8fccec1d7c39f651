"""Metric Evolution Engine — owns per-server state and the random source.

``advance(identity)`` is the one write path: under the state lock it
reads the server's previous sample, computes the next one with
:func:`simfleet.evolution.model.next_sample`, and stores it. The shared
``random.Random`` is only ever touched inside that lock.
"""

from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Callable

from simfleet.evolution.model import MODELS, DimensionModel, next_sample
from simfleet.evolution.state import EvolutionState
from simfleet.types import Dimension, MetricSample, ServerId, ServerIdentity, utcnow

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class MetricEvolutionEngine:
    """Produces temporally-correlated samples, one server at a time."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Clock = utcnow,
        state: EvolutionState | None = None,
        models: dict[Dimension, DimensionModel] | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock
        self._state = state if state is not None else EvolutionState()
        self._models = models or MODELS

    @classmethod
    def seeded(cls, seed: int | None = None, **kwargs) -> MetricEvolutionEngine:
        """Engine with its own ``random.Random(seed)``."""
        return cls(rng=random.Random(seed), **kwargs)

    async def advance(
        self, identity: ServerIdentity, now: datetime | None = None,
    ) -> MetricSample:
        """Generate and commit the next sample for ``identity``."""
        async with self._state.lock:
            previous = self._state.get(identity.id)
            sample = next_sample(
                identity,
                previous,
                now or self._clock(),
                self._rng,
                self._models,
            )
            self._state.put(sample)

        if previous is None:
            _logger.debug("Bootstrapped %s", identity.id)
        return sample

    def last_sample(self, server_id: ServerId) -> MetricSample | None:
        return self._state.get(server_id)

    def snapshot(self) -> dict[ServerId, MetricSample]:
        return self._state.snapshot()

    @property
    def state(self) -> EvolutionState:
        return self._state

    def __len__(self) -> int:
        return len(self._state)
