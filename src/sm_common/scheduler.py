"""Delayed continuations for simulated settlement.

Production code uses AsyncioScheduler (event-loop timers). Tests inject
VirtualScheduler and drive time explicitly with `await scheduler.advance(s)`,
so no test ever waits on the wall clock.
"""

import asyncio
import heapq
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

logger = logging.getLogger(__name__)

Callback = Callable[[], Awaitable[None]]


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callback, name: str = "") -> None: ...

    async def shutdown(self) -> None: ...


class AsyncioScheduler:
    """Runs each callback as its own task once `delay` seconds have elapsed."""

    def __init__(self) -> None:
        self._handles: set[asyncio.TimerHandle] = set()
        self._tasks: set[asyncio.Task[None]] = set()

    def call_later(self, delay: float, callback: Callback, name: str = "") -> None:
        loop = asyncio.get_running_loop()
        handle: asyncio.TimerHandle | None = None

        def _fire() -> None:
            if handle is not None:
                self._handles.discard(handle)
            task = loop.create_task(self._run(callback, name), name=name or None)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        handle = loop.call_later(delay, _fire)
        self._handles.add(handle)

    async def _run(self, callback: Callback, name: str) -> None:
        try:
            await callback()
        except Exception:
            logger.exception("Scheduled task %s failed", name or "<unnamed>")

    async def shutdown(self) -> None:
        """Cancel timers that have not fired and wait for running tasks."""
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


class VirtualScheduler:
    """Deterministic scheduler driven by a virtual clock (seconds since creation)."""

    def __init__(self) -> None:
        self._now = 0.0
        self._seq = itertools.count()
        self._queue: list[tuple[float, int, str, Callback]] = []

    @property
    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        return len(self._queue)

    def call_later(self, delay: float, callback: Callback, name: str = "") -> None:
        heapq.heappush(self._queue, (self._now + delay, next(self._seq), name, callback))

    async def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due. Returns count run."""
        target = self._now + seconds
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, name, callback = heapq.heappop(self._queue)
            self._now = due
            logger.debug("Virtual clock %.3fs: running %s", due, name or "<unnamed>")
            await callback()
            ran += 1
        self._now = target
        return ran

    async def run_all(self) -> int:
        """Run every pending callback, including ones scheduled while running."""
        ran = 0
        while self._queue:
            ran += await self.advance(self._queue[0][0] - self._now)
        return ran

    async def shutdown(self) -> None:
        """Drop everything still queued."""
        self._queue.clear()
