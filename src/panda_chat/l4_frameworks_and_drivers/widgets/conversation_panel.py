"""Conversation panel — scrolling list of chat messages, template cards, and action buttons."""

from __future__ import annotations

from rich.markup import escape
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Button, Static

from panda_chat.l1_entities.chat_message import ActionButton, ActionType, Message, Role, Template
from panda_chat.l1_entities.config import PriceFormat


def format_template_card(template: Template, price_format: PriceFormat | None = None) -> str:
    """One-card summary: title, price, rating, downloads, category."""
    price = (price_format or PriceFormat()).label(template.price)
    parts = [f'[b]{escape(template.title)}[/b]  {escape(price)}']
    stats = f'★ {template.rating:g} · {template.downloads} downloads'
    if template.category:
        stats += f' · {escape(template.category)}'
    parts.append(stats)
    if template.description:
        parts.append(f'[dim]{escape(template.description)}[/dim]')
    return '\n'.join(parts)


class ActionButtonWidget(Button):
    """A Button carrying the ActionButton it dispatches."""

    def __init__(self, action: ActionButton, **kwargs) -> None:
        variant = 'default' if action.type is ActionType.CANCEL else 'success'
        super().__init__(action.label, variant=variant, classes='action-button', **kwargs)
        self.chat_action = action


class MessageView(Vertical):
    DEFAULT_CSS = """
    MessageView {
        height: auto;
        margin: 0 0 1 0;
        padding: 0 1;
    }
    MessageView.user {
        border-left: thick $success;
    }
    MessageView.assistant {
        border-left: thick $primary;
    }
    MessageView > .template-card {
        border: round $primary;
        padding: 0 1;
        height: auto;
    }
    MessageView > .message-error {
        color: $error;
    }
    MessageView > Horizontal {
        height: auto;
    }
    """

    def __init__(
        self, message: Message, max_template_cards: int, price_format: PriceFormat | None = None, **kwargs
    ) -> None:
        role_class = 'user' if message.role is Role.USER else 'assistant'
        super().__init__(classes=role_class, **kwargs)
        self._message = message
        self._max_cards = max_template_cards
        self._price_format = price_format

    def compose(self):
        msg = self._message
        speaker = 'You' if msg.role is Role.USER else 'Assistant'
        stamp = msg.timestamp.astimezone().strftime('%H:%M')
        yield Static(f'[b]{speaker}[/b] [dim]{stamp}[/dim]\n{escape(msg.content)}', classes='message-body')
        for template in msg.templates[: self._max_cards]:
            yield Static(format_template_card(template, self._price_format), classes='template-card')
        if msg.action_buttons:
            with Horizontal():
                for action in msg.action_buttons:
                    yield ActionButtonWidget(action)
        if msg.error:
            yield Static(f'⚠ {escape(msg.error)}', classes='message-error')


class ConversationPanel(VerticalScroll):
    """Renders the controller's message list. Rebuilt wholesale on every change."""

    DEFAULT_CSS = """
    ConversationPanel {
        border: solid $primary;
        scrollbar-size: 1 1;
    }
    ConversationPanel > .empty-hint {
        color: $text-muted;
        text-align: center;
        width: 100%;
        margin-top: 2;
    }
    """

    def __init__(
        self,
        max_template_cards: int = 3,
        price_format: PriceFormat | None = None,
        title: str = 'Conversation',
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.border_title = title
        self._max_cards = max_template_cards
        self._price_format = price_format
        self._rendered: list[Message] = []

    @property
    def message_count(self) -> int:
        return len(self._rendered)

    def show_messages(self, messages: list[Message]) -> None:
        snapshot = [m.model_copy() for m in messages]
        if snapshot == self._rendered and self.children:
            return
        self._rendered = snapshot
        self.remove_children()
        if not messages:
            self.mount(Static('Ask me about any template you need.', classes='empty-hint'))
            return
        self.mount_all([MessageView(m, self._max_cards, self._price_format) for m in messages])
        self.call_after_refresh(self.scroll_end, animate=False)

    def set_buttons_disabled(self, disabled: bool) -> None:
        for button in self.query(ActionButtonWidget):
            button.disabled = disabled
