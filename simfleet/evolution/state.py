"""Evolution state — the last reading produced for each server.

One entry per server id, created lazily on the first reading and
replaced on every subsequent one. Entries are never removed, so the map
grows to the size of the fleet and stays there.

Writers hold ``lock`` across read-previous / compute / store so two
updates for the same server can never interleave.
"""

from __future__ import annotations

import asyncio
from typing import Iterator

from simfleet.types import MetricSample, ServerId


class EvolutionState:
    """Mapping of server id to most recent MetricSample."""

    def __init__(self) -> None:
        self._samples: dict[ServerId, MetricSample] = {}
        self.lock = asyncio.Lock()

    def get(self, server_id: ServerId) -> MetricSample | None:
        return self._samples.get(server_id)

    def put(self, sample: MetricSample) -> None:
        self._samples[sample.server_id] = sample

    def snapshot(self) -> dict[ServerId, MetricSample]:
        """Copy of the current map, safe to iterate while writers run."""
        return dict(self._samples)

    def __contains__(self, server_id: object) -> bool:
        return server_id in self._samples

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[ServerId]:
        return iter(list(self._samples))
