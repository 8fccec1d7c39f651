"""Emission scheduler — one sample per server, once per interval.

Each cycle fans out one task per server (evolve, then publish), joins
them all, and only then sleeps. The sleep is measured from the end of
the join, so cycles never overlap. ``stop()`` cuts the sleep short but
lets a cycle that is already running finish.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Iterable

import structlog
from pydantic import BaseModel, Field

from simfleet.evolution.engine import MetricEvolutionEngine
from simfleet.sink.base import BaseSink
from simfleet.types import ServerIdentity, utcnow

logger = structlog.get_logger()


class CycleReport(BaseModel):
    """Outcome of one generation cycle."""

    cycle: int
    started_at: datetime = Field(default_factory=utcnow)
    finished_at: datetime = Field(default_factory=utcnow)
    published: int = 0
    dropped: int = 0

    @property
    def servers(self) -> int:
        return self.published + self.dropped

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


class EmissionScheduler:
    """Drives generation cycles across the fleet."""

    def __init__(
        self,
        servers: Iterable[ServerIdentity],
        engine: MetricEvolutionEngine,
        sink: BaseSink,
        interval_seconds: float = 60.0,
        max_cycles: int = 0,
        history_limit: int = 100,
    ) -> None:
        self._servers = list(servers)
        self._engine = engine
        self._sink = sink
        self._interval = interval_seconds
        self._max_cycles = max_cycles  # 0 = unlimited
        self._history_limit = history_limit
        self._history: list[CycleReport] = []
        self._cycle = 0
        self._running = False
        self._wake = asyncio.Event()
        self._task: asyncio.Task | None = None

    async def run_cycle(self) -> CycleReport:
        """Generate and publish one sample per server, waiting for all."""
        self._cycle += 1
        started_at = utcnow()

        results = await asyncio.gather(
            *(self._emit_one(server) for server in self._servers)
        )

        published = sum(1 for ok in results if ok)
        report = CycleReport(
            cycle=self._cycle,
            started_at=started_at,
            finished_at=utcnow(),
            published=published,
            dropped=len(results) - published,
        )
        self._history.append(report)
        if len(self._history) > self._history_limit:
            self._history = self._history[-self._history_limit:]

        logger.info(
            "cycle_completed",
            cycle=report.cycle,
            published=report.published,
            dropped=report.dropped,
            duration_s=round(report.duration_seconds, 3),
        )
        return report

    async def run_forever(self) -> None:
        """Run cycles until stopped or ``max_cycles`` is reached."""
        self._running = True
        self._wake.clear()
        await self._run_loop()

    async def _run_loop(self) -> None:
        logger.info(
            "scheduler_started",
            servers=len(self._servers),
            interval_s=self._interval,
            max_cycles=self._max_cycles,
        )
        try:
            while self._running:
                try:
                    await self.run_cycle()
                except Exception as e:
                    logger.error("cycle_failed", cycle=self._cycle, error=str(e))

                if self._max_cycles > 0 and self._cycle >= self._max_cycles:
                    break

                # Sleep for the interval, or until stop() wakes us.
                try:
                    await asyncio.wait_for(self._wake.wait(), timeout=self._interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            logger.info("scheduler_stopped", cycles=self._cycle)

    async def start(self) -> None:
        """Start the cycle loop in a background task."""
        if self._task and not self._task.done():
            return
        self._running = True
        self._wake.clear()
        self._task = asyncio.create_task(self._run_loop())

    async def stop(self) -> None:
        """Stop after the in-flight cycle (if any) drains."""
        self._running = False
        self._wake.set()
        if self._task and not self._task.done():
            await self._task
        self._task = None

    async def _emit_one(self, server: ServerIdentity) -> bool:
        try:
            sample = await self._engine.advance(server)
            return await self._sink.publish(sample)
        except Exception as e:
            logger.error("server_task_failed", server_id=server.id, error=str(e))
            return False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def cycle_count(self) -> int:
        return self._cycle

    @property
    def history(self) -> list[CycleReport]:
        return list(self._history)
