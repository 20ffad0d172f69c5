"""TickScheduler implementations — asyncio for headless use, Textual timers for the TUI."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from textual.timer import Timer

log = logging.getLogger('pchat.ratelimit')


class _AsyncioTask:
    def __init__(self, task: asyncio.Task) -> None:
        self._task = task

    def cancel(self) -> None:
        self._task.cancel()


class AsyncioTickScheduler:
    """Runs the callback every *interval* seconds on the running event loop."""

    def every(self, interval: float, callback: Callable[[], None]) -> _AsyncioTask:
        async def _loop() -> None:
            while True:
                await asyncio.sleep(interval)
                callback()

        return _AsyncioTask(asyncio.get_running_loop().create_task(_loop()))


class _TextualTask:
    def __init__(self, timer: Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.stop()


class TextualTickScheduler:
    """Binds ticks to a Textual message pump (App or widget) via set_interval."""

    def __init__(self, owner) -> None:
        self._owner = owner

    def every(self, interval: float, callback: Callable[[], None]) -> _TextualTask:
        return _TextualTask(self._owner.set_interval(interval, callback))
