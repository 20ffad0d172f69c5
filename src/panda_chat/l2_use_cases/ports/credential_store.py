"""Port: credential store owned by the external login flow."""

from __future__ import annotations

from typing import Protocol

from panda_chat.l1_entities.session import AuthContext


class CredentialStore(Protocol):
    """Abstract bearer-token storage. The chat subsystem reads it and only purges it."""

    def load(self) -> AuthContext:
        """Return the current credential snapshot."""
        ...

    def clear(self) -> None:
        """Purge the stored credential."""
        ...
