"""Cancellable repeating timers for polling, clocks and carousels.

Every view owns a TimerScope. Timers created through the scope are all
cancelled when the scope closes, so tearing down a view never leaves a
refetch or carousel running in the background.

Timers are independent asyncio tasks on the same event loop; they are not
synchronised with each other. A refetch still in flight when the next tick
fires simply overlaps it, and whichever finishes last wins.
"""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from src.timetable.logging import get_logger

log = get_logger(__name__)

TimerCallback = Callable[[], Awaitable[Any] | Any]


class RepeatingTask:
    """Calls `callback` every `interval` seconds until cancelled.

    Exceptions raised by the callback are logged and the timer keeps
    running; the failed work is not retried before the next tick.
    """

    def __init__(
        self,
        interval: float,
        callback: TimerCallback,
        *,
        name: str = "timer",
        run_immediately: bool = False,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = float(interval)
        self.name = name
        self.run_immediately = run_immediately
        self.ticks = 0
        self._callback = callback
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "RepeatingTask":
        """Arm the timer on the running event loop."""
        if self.running:
            return self
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        log.debug("timer_started", timer=self.name, interval=self.interval)
        return self

    def cancel(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            log.debug("timer_cancelled", timer=self.name, ticks=self.ticks)
        self._task = None

    async def _run(self) -> None:
        if self.run_immediately:
            await self._fire()
        while True:
            await asyncio.sleep(self.interval)
            await self._fire()

    async def _fire(self) -> None:
        self.ticks += 1
        try:
            result = self._callback()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log.error(
                "timer_callback_failed",
                timer=self.name,
                error=str(e),
                type=type(e).__name__,
            )


class TimerScope:
    """Owns the timers of one view and cancels them together.

    Usage:
        async with TimerScope("presentation") as scope:
            scope.every(60, view.refresh, name="refresh")
            ...
    """

    def __init__(self, name: str = "view") -> None:
        self.name = name
        self._timers: list[RepeatingTask] = []
        self._closed = False

    @property
    def timers(self) -> tuple[RepeatingTask, ...]:
        return tuple(self._timers)

    @property
    def closed(self) -> bool:
        return self._closed

    def every(
        self,
        interval: float,
        callback: TimerCallback,
        *,
        name: str = "timer",
        run_immediately: bool = False,
    ) -> RepeatingTask:
        """Create, register and start a repeating timer."""
        if self._closed:
            raise RuntimeError(f"TimerScope {self.name!r} is closed")
        timer = RepeatingTask(
            interval, callback, name=f"{self.name}.{name}", run_immediately=run_immediately
        )
        self._timers.append(timer)
        return timer.start()

    def close(self) -> None:
        """Cancel every timer owned by this scope, in creation order."""
        for timer in self._timers:
            timer.cancel()
        if not self._closed:
            log.debug("timer_scope_closed", scope=self.name, timers=len(self._timers))
        self._timers.clear()
        self._closed = True

    async def __aenter__(self) -> "TimerScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
