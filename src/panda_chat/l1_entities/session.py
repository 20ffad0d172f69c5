"""Session-level entities: the active chat session, rate-limit state, and auth context."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from panda_chat.l1_entities.chat_message import utc_now


class ChatSession(BaseModel):
    """A server-tracked conversation. At most one is active per chat surface."""

    id: str
    created_at: datetime = Field(default_factory=utc_now)
    message_count: int = 0
    title: str | None = None


class RateLimitState(BaseModel):
    """Cool-down in effect after a 429. Dropped once remaining reaches 0."""

    retry_after_seconds: int
    remaining: int
    active: bool = True

    def display(self) -> str:
        """Remaining time as MM:SS."""
        minutes, seconds = divmod(max(self.remaining, 0), 60)
        return f'{minutes:02d}:{seconds:02d}'


class AuthContext(BaseModel):
    """Credential snapshot supplied by the external login flow."""

    token: str | None = None
