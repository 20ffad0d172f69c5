"""Port: recurring scheduled task."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        """Stop the task. Idempotent."""
        ...


class TickScheduler(Protocol):
    """Schedules a callback at a fixed interval until cancelled."""

    def every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        ...
