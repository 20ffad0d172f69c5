"""Chat message entities — messages, template cards, and action buttons."""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base for models that travel over the wire in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Role(str, enum.Enum):
    USER = 'USER'
    ASSISTANT = 'ASSISTANT'


class ActionType(str, enum.Enum):
    BUY_NOW = 'BUY_NOW'
    ADD_TO_LIBRARY = 'ADD_TO_LIBRARY'
    VIEW_DETAILS = 'VIEW_DETAILS'
    CANCEL = 'CANCEL'


class Template(WireModel):
    """A catalog template referenced by an assistant reply. Read-only."""

    id: int
    title: str
    description: str = ''
    price: int = Field(default=0, ge=0)
    preview_image: str = ''
    category: str = ''
    rating: float = 0.0
    downloads: int = 0


class ActionButton(WireModel):
    """A directive attached to an assistant message."""

    type: ActionType
    label: str
    template_id: int


class Message(BaseModel):
    """A single message in the client-side view of a session."""

    role: Role
    content: str
    timestamp: datetime = Field(default_factory=utc_now)
    templates: list[Template] = Field(default_factory=list)
    action_buttons: list[ActionButton] = Field(default_factory=list)
    error: str | None = None  # set on a user message whose send failed
