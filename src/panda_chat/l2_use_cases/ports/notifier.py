"""Port: user-facing notifications (toasts)."""

from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    def success(self, title: str, message: str) -> None:
        ...

    def error(self, title: str, message: str) -> None:
        ...
