"""Use case: cool-down countdown after a rate-limit response."""

from __future__ import annotations

import logging
from collections.abc import Callable

from panda_chat.l1_entities.session import RateLimitState
from panda_chat.l2_use_cases.ports.tick_scheduler import ScheduledTask, TickScheduler

log = logging.getLogger('pchat.ratelimit')

TICK_SECONDS = 1.0


class RateLimiter:
    """Owns the one-second countdown task. Blocks sends while a cool-down is active."""

    def __init__(
        self,
        scheduler: TickScheduler,
        default_cooldown: int,
        on_change: Callable[[RateLimitState | None], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._default_cooldown = default_cooldown
        self.on_change = on_change
        self._task: ScheduledTask | None = None
        self.state: RateLimitState | None = None

    def start(self, retry_after_seconds: int | None) -> RateLimitState | None:
        """Begin a cool-down. None applies the default; non-positive values start nothing."""
        seconds = self._default_cooldown if retry_after_seconds is None else retry_after_seconds
        self.stop()
        if seconds <= 0:
            return None
        self.state = RateLimitState(retry_after_seconds=seconds, remaining=seconds)
        self._task = self._scheduler.every(TICK_SECONDS, self.tick)
        log.info('Rate limited: cool-down %ds (server value=%s)', seconds, retry_after_seconds)
        self._notify()
        return self.state

    def tick(self) -> None:
        if self.state is None:
            return
        self.state.remaining = max(self.state.remaining - 1, 0)
        if self.state.remaining == 0:
            self.state.active = False
            self._cancel_task()
            self._notify()
            self.state = None
            log.info('Rate-limit cool-down elapsed')
            self._notify()
            return
        self._notify()

    def is_blocking(self) -> bool:
        return self.state is not None and self.state.active

    def remaining_display(self) -> str:
        return self.state.display() if self.state is not None else ''

    def stop(self) -> None:
        """Cancel any cool-down and its tick task (teardown)."""
        self._cancel_task()
        if self.state is not None:
            self.state = None
            self._notify()

    def _cancel_task(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.state)
