"""Fixed-interval driver that keeps at most one reconciliation cycle in flight."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from typing import Optional

from .cycle import CycleReport, ReconciliationCycle

logger = logging.getLogger(__name__)

CycleFactory = Callable[[], AbstractAsyncContextManager[ReconciliationCycle]]


class SyncScheduler:
    """Runs a fresh ReconciliationCycle per tick.

    ``run_cycle`` is the single entry point for both timer ticks and manual
    triggers. A call made while another cycle is in flight is skipped. Errors
    escaping a cycle are logged by ``tick`` and never stop the loop.
    """

    def __init__(self, cycle_factory: CycleFactory, interval: float = 60.0) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._cycle_factory = cycle_factory
        self._interval = interval
        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task[None]] = None
        self._last_report: Optional[CycleReport] = None

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def last_report(self) -> Optional[CycleReport]:
        return self._last_report

    async def run_cycle(self) -> Optional[CycleReport]:
        """Run one cycle, or return None if one is already running."""
        if self._lock.locked():
            logger.warning("Previous cycle still in flight, skipping")
            return None
        async with self._lock:
            async with self._cycle_factory() as cycle:
                report = await cycle.run()
            self._last_report = report
            return report

    async def tick(self) -> Optional[CycleReport]:
        try:
            return await self.run_cycle()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Cycle failed unexpectedly; retrying next tick")
            return None

    async def run_forever(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        logger.info("Reconciling every %.1fs", self._interval)
        while True:
            await self.tick()
            next_tick += self._interval
            now = loop.time()
            if now > next_tick:
                missed = int((now - next_tick) // self._interval) + 1
                logger.warning("Cycle overran the interval, skipping %d tick(s)", missed)
                next_tick += missed * self._interval
            await asyncio.sleep(next_tick - now)

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
