"""Port: small persistent key-value store."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """Abstract string key-value persistence that survives process restarts."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        """Remove *key*. Missing keys are ignored."""
        ...
