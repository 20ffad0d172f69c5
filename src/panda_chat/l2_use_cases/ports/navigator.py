"""Port: navigation hand-off (details pages, purchase flow)."""

from __future__ import annotations

from typing import Protocol


class Navigator(Protocol):
    def navigate(self, target: str) -> None:
        """Hand off to *target*, a site-relative path or absolute URL."""
        ...
