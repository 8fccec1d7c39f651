"""Abstract base for telemetry sinks.

A sink is write-only: it takes a sample and either stores it or drops
it. Drops are logged and counted, never raised, so one bad write can't
take down a cycle.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from simfleet.exceptions import PublishError
from simfleet.types import MetricSample

_logger = logging.getLogger(__name__)


class BaseSink(ABC):
    name = "sink"

    def __init__(self) -> None:
        self.published = 0
        self.failed = 0

    async def publish(self, sample: MetricSample) -> bool:
        """Write one sample. Returns False (and logs) if it was dropped."""
        try:
            await self._write(sample)
        except PublishError as e:
            self.failed += 1
            _logger.warning(
                "Dropped sample %s on %s: %s", sample.document_id, self.name, e,
            )
            return False
        self.published += 1
        return True

    @abstractmethod
    async def _write(self, sample: MetricSample) -> None:
        """Deliver ``sample`` or raise PublishError."""
        ...

    async def open(self) -> None:
        """Acquire any connections. Default: nothing to do."""

    async def aclose(self) -> None:
        """Release connections. Default: nothing to do."""

    async def __aenter__(self) -> BaseSink:
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
