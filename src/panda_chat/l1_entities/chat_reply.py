"""Response payloads of the assistant back-end — pure schema, no I/O."""

from __future__ import annotations

import enum
from datetime import datetime

from pydantic import Field, field_validator

from panda_chat.l1_entities.chat_message import ActionButton, Role, Template, WireModel


class PurchaseOutcome(str, enum.Enum):
    """What the purchase-action endpoint asks the client to do next."""

    VIEW_DETAILS = 'VIEW_DETAILS'
    REDIRECT_TO_PURCHASE = 'REDIRECT_TO_PURCHASE'
    ADD_TO_LIBRARY = 'ADD_TO_LIBRARY'
    UNKNOWN = 'UNKNOWN'

    @classmethod
    def _missing_(cls, value: object) -> PurchaseOutcome:
        return cls.UNKNOWN


class ChatReply(WireModel):
    """Result of POST chat/message."""

    session_id: str
    message: str = ''
    templates: list[Template] = Field(default_factory=list)
    action_buttons: list[ActionButton] = Field(default_factory=list)
    conversation_title: str | None = None

    @field_validator('templates', 'action_buttons', mode='before')
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return [] if value is None else value


class HistoryMessage(WireModel):
    role: Role
    content: str
    timestamp: datetime | None = None


class SessionHistory(WireModel):
    """Result of GET chat/session/{id}."""

    session_id: str
    conversation_title: str | None = None
    message_count: int = 0
    created_at: datetime | None = None
    messages: list[HistoryMessage] = Field(default_factory=list)


class PurchaseActionResult(WireModel):
    """Result of POST chat/purchase-action."""

    action: PurchaseOutcome
    template_id: int
    endpoint: str | None = None
    url: str | None = None
    message: str = ''
