"""
Scheduler - Fixed-cadence driver for the reconciliation engine.

Runs one cycle immediately, then one per tick. A tick that arrives while a
cycle is still in flight is skipped rather than queued, so at most one
command is ever outstanding. Failures stay inside the cycle that raised them.
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from auction_operator.core.errors import OperatorError
from auction_operator.utils.logger import get_logger

logger = get_logger("scheduler")


@dataclass
class SchedulerStats:
    """Counters for observability."""
    cycles_run: int = 0
    cycles_failed: int = 0
    ticks_skipped: int = 0


class Scheduler:
    """Invokes `cycle` eagerly and then every `period` seconds."""

    def __init__(self, cycle: Callable[[], Awaitable[object]], period: float = 15.0):
        self.cycle = cycle
        self.period = period
        self.stats = SchedulerStats()
        self._stop_event: Optional[asyncio.Event] = None
        self._current: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._current is not None and not self._current.done()

    async def run_cycle(self) -> bool:
        """
        Run one cycle, isolating its failure.

        Returns:
            True if the cycle completed without error
        """
        self.stats.cycles_run += 1
        try:
            await self.cycle()
            return True
        except asyncio.CancelledError:
            raise
        except OperatorError as e:
            self.stats.cycles_failed += 1
            logger.error(f"Reconciliation cycle failed: {e}")
        except Exception:
            self.stats.cycles_failed += 1
            logger.exception("Reconciliation cycle failed with an unexpected error")
        return False

    def tick(self) -> bool:
        """
        Start a cycle unless one is still running.

        Returns:
            True if a new cycle was started
        """
        if self.busy:
            self.stats.ticks_skipped += 1
            logger.warning("Previous cycle still running; skipping this tick")
            return False
        self._current = asyncio.create_task(self.run_cycle())
        return True

    async def run(self) -> None:
        """Tick until stop() is called. The first tick fires immediately."""
        self._stop_event = asyncio.Event()
        logger.info(f"Starting operator polling loop (every {self.period}s)...")
        try:
            while not self._stop_event.is_set():
                self.tick()
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=self.period)
                except asyncio.TimeoutError:
                    pass
        finally:
            await self._drain()

    async def _drain(self) -> None:
        if self.busy:
            self._current.cancel()
            try:
                await self._current
            except asyncio.CancelledError:
                pass

    def stop(self) -> None:
        """Wake the loop and make it exit, cancelling any in-flight cycle."""
        if self._stop_event is not None:
            self._stop_event.set()
