"""ChatApp — Textual TUI shell for one chat surface."""

from __future__ import annotations

import logging
from pathlib import Path

from textual.app import App as TextualApp
from textual.app import ComposeResult
from textual.binding import Binding
from textual.widgets import Button, Input, Static

from panda_chat.l1_entities.config import AppConfig
from panda_chat.l1_entities.session import RateLimitState
from panda_chat.l3_interface_adapters.controllers.chat_controller import ChatController, SendStatus
from panda_chat.l4_frameworks_and_drivers.infra_config import InfraConfig
from panda_chat.l4_frameworks_and_drivers.logging_setup import setup_file_logging
from panda_chat.l4_frameworks_and_drivers.widgets.conversation_panel import ActionButtonWidget, ConversationPanel
from panda_chat.l4_frameworks_and_drivers.widgets.status_bar import StatusBar

log = logging.getLogger('pchat.app')


class ChatApp(TextualApp):
    """Chat surface: conversation panel, inline error line, composer, status bar."""

    CSS = """
    #header {
        height: 1;
        background: $success;
        color: $text;
        padding: 0 1;
    }
    #error-line {
        height: auto;
        color: $error;
        padding: 0 1;
        display: none;
    }
    #error-line.visible {
        display: block;
    }
    #composer {
        dock: bottom;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding('ctrl+q', 'quit_app', 'Quit', priority=True),
        Binding('ctrl+l', 'clear_chat', 'Clear', priority=True),
        Binding('ctrl+r', 'recheck_auth', 'Re-check sign-in', priority=True),
        Binding('escape', 'dismiss_error', 'Dismiss error', show=False, priority=True),
    ]

    def __init__(
        self,
        config: AppConfig,
        surface: str = 'chatbox',
        infra: InfraConfig | None = None,
        controller: ChatController | None = None,
        log_dir: Path | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self._config = config

        if log_dir is not None:
            setup_file_logging(log_dir)

        # Controller (injected or created with default wiring)
        if controller is not None:
            self._controller = controller
        else:  # pragma: no cover -- composition-root wiring; controller always injected in tests
            from panda_chat.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: only wired when no controller injected
                DependencyContainer,
            )
            from panda_chat.l4_frameworks_and_drivers.handoff import TextualNotifier  # noqa: PLC0415
            from panda_chat.l4_frameworks_and_drivers.schedulers import TextualTickScheduler  # noqa: PLC0415

            container = DependencyContainer(
                config,
                surface,
                infra,
                notifier=TextualNotifier(self),
                scheduler=TextualTickScheduler(self),
            )
            self._controller = container.controller

        self._surface = self._controller.surface
        self._controller.on_change = self._refresh_view
        self._controller.rate_limiter.on_change = self._on_rate_limit_change

    @property
    def controller(self) -> ChatController:
        return self._controller

    def _header_text(self) -> str:
        text = '  PandaDocs AI Assistant | Find templates quickly'
        session = self._controller.session
        if session is not None and session.title:
            text += f' — {session.title}'
        return text

    def compose(self) -> ComposeResult:
        yield Static(self._header_text(), id='header')
        yield ConversationPanel(
            max_template_cards=self._surface.max_template_cards,
            price_format=self._surface.price,
            id='conversation',
        )
        yield Static('', id='error-line')
        yield Input(placeholder='Ask about any template you need...', id='composer')
        yield StatusBar(id='status-bar')

    def on_mount(self) -> None:
        bar = self.query_one('#status-bar', StatusBar)
        bar.surface_label = self._surface.name
        bar.keybinding_hints = r'\[^l] clear  \[^r] sign-in  \[esc] dismiss  \[^q] quit'
        self._refresh_view()
        self.query_one('#composer', Input).focus()
        self._run_activate_worker()

    def on_unmount(self) -> None:
        self._controller.teardown()

    # --- Rendering ---

    def _refresh_view(self) -> None:
        ctrl = self._controller
        try:
            self.query_one('#header', Static).update(self._header_text())
            panel = self.query_one('#conversation', ConversationPanel)
            panel.show_messages(ctrl.messages)
            panel.set_buttons_disabled(ctrl.loading)

            error_line = self.query_one('#error-line', Static)
            if ctrl.error:
                error_line.update(f'⚠ {ctrl.error}  [dim](esc to dismiss)[/dim]')
                error_line.add_class('visible')
            else:
                error_line.update('')
                error_line.remove_class('visible')

            self.query_one('#composer', Input).disabled = ctrl.composer_disabled
            self._refresh_status()
        except Exception:  # noqa: S110 -- TUI race guard; widgets may not exist during startup/teardown  # pragma: no cover
            pass

    def _refresh_status(self) -> None:
        ctrl = self._controller
        bar = self.query_one('#status-bar', StatusBar)
        bar.auth_required = ctrl.auth_required
        bar.countdown = ctrl.rate_limiter.remaining_display()
        bar.message_count = len(ctrl.messages)
        bar.activity = 'Thinking...' if ctrl.loading else ''

    def _on_rate_limit_change(self, state: RateLimitState | None) -> None:
        if state is None:
            log.debug('Rate-limit cleared; composer re-enabled')
        self._refresh_view()

    # --- Events ---

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != 'composer':
            return
        if self._controller.composer_disabled:
            return
        text = event.value
        if not text.strip():
            return
        event.input.value = ''
        self._run_send_worker(text)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if isinstance(event.button, ActionButtonWidget):
            self._run_action_worker(event.button)

    # --- Workers ---

    def _run_activate_worker(self) -> None:
        async def _activate_task() -> None:
            try:
                await self._controller.activate()
            finally:
                self._refresh_view()
            composer = self.query_one('#composer', Input)
            if not composer.disabled:
                composer.focus()

        self.run_worker(_activate_task, group='activate')

    def _run_send_worker(self, text: str) -> None:
        async def _send_task() -> None:
            try:
                result = await self._controller.send(text)
            finally:
                self._refresh_view()
            if result.status is SendStatus.AUTH_REQUIRED:
                self.notify(
                    'Your sign-in is missing or expired. Sign in again, then press ctrl+r.',
                    title='Sign in required',
                    severity='error',
                    timeout=10,
                )

        self.run_worker(_send_task, group='send')

    def _run_action_worker(self, button: ActionButtonWidget) -> None:
        async def _action_task() -> None:
            try:
                await self._controller.dispatch_action(button.chat_action)
            finally:
                self._refresh_view()

        self.run_worker(_action_task, group='action')

    # --- Actions ---

    async def action_clear_chat(self) -> None:
        await self._controller.clear()
        self._refresh_view()

    def action_recheck_auth(self) -> None:
        if self._controller.refresh_auth():
            self.notify('Signed in', timeout=3)
        else:
            self.notify('Still not signed in', severity='warning', timeout=3)
        self._refresh_view()

    def action_dismiss_error(self) -> None:
        self._controller.dismiss_error()
        self._refresh_view()

    def action_quit_app(self) -> None:
        self._controller.teardown()
        self.exit()
