"""Port: HTTP transport to the assistant back-end."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class TransportResponse:
    """Status code plus decoded JSON body (None when absent or not JSON)."""

    status: int
    payload: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class ChatTransport(Protocol):
    """Abstract request/response transport. Zero framework types leak through.

    Raises TransportError when no response was received.
    """

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: dict | None = None,
    ) -> TransportResponse:
        ...
