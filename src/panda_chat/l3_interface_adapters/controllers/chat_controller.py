"""ChatController — orchestrates one chat surface: history, single-flight sends, timers."""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass

from panda_chat.l1_entities.chat_message import ActionButton, Message, Role, utc_now
from panda_chat.l1_entities.chat_reply import ChatReply, SessionHistory
from panda_chat.l1_entities.config import SurfaceConfig
from panda_chat.l1_entities.errors import (
    AuthExpiredError,
    AuthMissingError,
    ChatError,
    InputInvalidError,
    RateLimitedError,
)
from panda_chat.l1_entities.session import ChatSession
from panda_chat.l2_use_cases.action_dispatcher import ActionDispatcher, DispatchOutcome, DispatchResult
from panda_chat.l2_use_cases.auth_gate import AuthGate
from panda_chat.l2_use_cases.message_exchange import MessageExchange, normalize_text
from panda_chat.l2_use_cases.ports.notifier import Notifier
from panda_chat.l2_use_cases.rate_limiter import RateLimiter
from panda_chat.l2_use_cases.session_store import SessionStore
from panda_chat.l2_use_cases.utils.markdown import strip_markdown

log = logging.getLogger('pchat.controller')


class SendStatus(enum.Enum):
    SENT = 'sent'
    BUSY = 'busy'  # dropped: a send is already in flight
    RATE_LIMITED = 'rate_limited'  # dropped: cool-down active, or the server answered 429
    INVALID = 'invalid'  # empty input, never reached the network
    AUTH_REQUIRED = 'auth_required'
    FAILED = 'failed'
    DISCARDED = 'discarded'  # surface cleared or torn down while in flight


@dataclass(frozen=True)
class SendResult:
    status: SendStatus
    reply: ChatReply | None = None
    error: str = ''


class ChatController:
    """Central orchestrator for one chat surface.

    Owns the message list, the active ChatSession, and the loading flag.
    The TUI (L4) delegates every chat decision here and only renders state.
    """

    def __init__(
        self,
        surface: SurfaceConfig,
        auth_gate: AuthGate,
        exchange: MessageExchange,
        session_store: SessionStore,
        rate_limiter: RateLimiter,
        dispatcher: ActionDispatcher,
        notifier: Notifier,
    ) -> None:
        self._surface = surface
        self._auth = auth_gate
        self._exchange = exchange
        self._store = session_store
        self.rate_limiter = rate_limiter
        self._dispatcher = dispatcher
        self._notifier = notifier

        self.messages: list[Message] = []
        self.session: ChatSession | None = None
        self.loading = False
        self.auth_required = False
        self.error: str | None = None
        self.on_change: Callable[[], None] | None = None
        self._generation = 0
        self._torn_down = False

    @property
    def surface(self) -> SurfaceConfig:
        return self._surface

    @property
    def session_id(self) -> str | None:
        return self.session.id if self.session is not None else None

    @property
    def composer_disabled(self) -> bool:
        return self.loading or self.auth_required or self.rate_limiter.is_blocking() or self._torn_down

    # --- Lifecycle ---

    async def activate(self) -> None:
        """Resume the persisted session, if any. Failures start a fresh session silently."""
        if not self._surface.resume:
            return
        saved_id = self._store.load()
        if saved_id is None or not self._auth.has_credential():
            return

        self.loading = True
        self._changed()
        generation = self._generation
        try:
            history = await self._exchange.fetch_history(saved_id)
        except ChatError as e:
            if generation != self._generation:
                return
            log.info('Could not resume session %s (%s); starting fresh', saved_id, e)
            self._store.clear()
            self.session = None
            self.messages = []
            if isinstance(e, (AuthMissingError, AuthExpiredError)):
                self.auth_required = True
            return
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            return
        self._hydrate(history)
        log.info('Resumed session %s with %d messages', history.session_id, len(self.messages))

    def teardown(self) -> None:
        """Cancel timers and discard any in-flight result."""
        self._torn_down = True
        self._generation += 1
        self.rate_limiter.stop()

    def refresh_auth(self) -> bool:
        """Re-check credentials after an external re-login. Returns True when usable."""
        try:
            self._auth.headers()
        except (AuthMissingError, AuthExpiredError):
            self.auth_required = True
            return False
        self.auth_required = False
        return True

    def dismiss_error(self) -> None:
        self.error = None

    # --- Operations ---

    async def send(self, text: str) -> SendResult:
        """Send one user turn. Appends the user message optimistically."""
        if self._torn_down:
            return SendResult(SendStatus.DISCARDED)
        if self.loading:
            log.debug('Send dropped: already in flight')
            return SendResult(SendStatus.BUSY)
        if self.rate_limiter.is_blocking():
            log.debug('Send dropped: rate limited (%s left)', self.rate_limiter.remaining_display())
            return SendResult(SendStatus.RATE_LIMITED)
        try:
            message = normalize_text(text)
        except InputInvalidError as e:
            return SendResult(SendStatus.INVALID, error=str(e))
        if not self.refresh_auth():
            return SendResult(SendStatus.AUTH_REQUIRED, error='Please sign in to use the AI assistant.')

        self.error = None
        user_message = Message(role=Role.USER, content=message)
        self.messages.append(user_message)
        self.loading = True
        self._changed()
        generation = self._generation
        try:
            reply = await self._exchange.send(self.session_id, message)
        except ChatError as e:
            if generation != self._generation:
                return SendResult(SendStatus.DISCARDED)
            user_message.error = str(e)
            return self._on_send_error(e)
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            log.debug('Discarding late reply for session %s', reply.session_id)
            return SendResult(SendStatus.DISCARDED)

        self._commit_session(reply)
        self.messages.append(
            Message(
                role=Role.ASSISTANT,
                content=strip_markdown(reply.message) if self._surface.strip_markdown else reply.message,
                templates=reply.templates,
                action_buttons=reply.action_buttons,
            )
        )
        return SendResult(SendStatus.SENT, reply=reply)

    async def dispatch_action(self, button: ActionButton) -> DispatchResult:
        """Run an action button. Does not touch chat history."""
        if self.loading:
            return DispatchResult(DispatchOutcome.IGNORED)
        self.loading = True
        self.error = None
        generation = self._generation
        try:
            result = await self._dispatcher.dispatch(self.session_id, button)
        except (AuthMissingError, AuthExpiredError) as e:
            self.auth_required = True
            self.error = str(e)
            return DispatchResult(DispatchOutcome.FAILED, error=str(e))
        except RateLimitedError as e:
            self.rate_limiter.start(e.retry_after_seconds)
            self.error = str(e)
            return DispatchResult(DispatchOutcome.FAILED, error=str(e))
        finally:
            if generation == self._generation:
                self.loading = False
        if result.outcome is DispatchOutcome.FAILED:
            self.error = result.error
        return result

    async def clear(self) -> None:
        """End the session server-side (best effort) and empty local history. Idempotent."""
        session_id = self.session_id
        self._generation += 1
        self.loading = False
        self.messages = []
        self.session = None
        self.error = None
        self._store.clear()

        if session_id is None or not self._auth.has_credential():
            return
        try:
            await self._exchange.clear(session_id)
        except ChatError as e:
            log.warning('Server-side clear of %s failed: %s', session_id, e)
            self._notifier.error('Error', str(e))
            return
        self._notifier.success('Success', 'Chat history cleared')

    # --- Internals ---

    def _on_send_error(self, error: ChatError) -> SendResult:
        self.error = str(error)
        if isinstance(error, RateLimitedError):
            self.rate_limiter.start(error.retry_after_seconds)
            return SendResult(SendStatus.RATE_LIMITED, error=str(error))
        if isinstance(error, (AuthMissingError, AuthExpiredError)):
            self.auth_required = True
            return SendResult(SendStatus.AUTH_REQUIRED, error=str(error))
        log.error('Send failed: %s: %s', type(error).__name__, error)
        return SendResult(SendStatus.FAILED, error=str(error))

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def _commit_session(self, reply: ChatReply) -> None:
        previous = self.session
        if previous is not None and previous.id == reply.session_id:
            previous.message_count += 2
            if reply.conversation_title:
                previous.title = reply.conversation_title
        else:
            if previous is not None:
                log.info('Server replaced session %s with %s', previous.id, reply.session_id)
            self.session = ChatSession(
                id=reply.session_id,
                message_count=len(self.messages) + 1,
                title=reply.conversation_title,
            )
        self._store.save(reply.session_id)

    def _hydrate(self, history: SessionHistory) -> None:
        self.session = ChatSession(
            id=history.session_id,
            created_at=history.created_at or utc_now(),
            message_count=history.message_count or len(history.messages),
            title=history.conversation_title,
        )
        self.messages = [
            Message(role=m.role, content=m.content, timestamp=m.timestamp or utc_now()) for m in history.messages
        ]
        self._store.save(history.session_id)
