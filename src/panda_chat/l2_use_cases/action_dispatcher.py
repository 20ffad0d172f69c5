"""Use case: dispatch assistant-issued action buttons."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from panda_chat.l1_entities.chat_message import ActionButton, ActionType
from panda_chat.l1_entities.chat_reply import PurchaseActionResult, PurchaseOutcome
from panda_chat.l1_entities.config import ActionConfig, AddToLibraryPolicy
from panda_chat.l1_entities.errors import TransientError
from panda_chat.l2_use_cases.auth_gate import AuthGate
from panda_chat.l2_use_cases.message_exchange import MessageExchange
from panda_chat.l2_use_cases.ports.navigator import Navigator
from panda_chat.l2_use_cases.ports.notifier import Notifier

log = logging.getLogger('pchat.actions')

ADDED_TO_LIBRARY = 'Template added to library!'


class DispatchOutcome(enum.Enum):
    IGNORED = 'ignored'  # no session or no credential
    CANCELLED = 'cancelled'
    NAVIGATED = 'navigated'
    ADDED_TO_LIBRARY = 'added_to_library'
    NO_OP = 'no_op'
    FAILED = 'failed'


@dataclass(frozen=True)
class DispatchResult:
    outcome: DispatchOutcome
    target: str | None = None
    error: str = ''
    follow_up_called: bool = False


class ActionDispatcher:
    """Routes an ActionButton to navigation, notification, or a follow-up call."""

    def __init__(
        self,
        exchange: MessageExchange,
        auth_gate: AuthGate,
        navigator: Navigator,
        notifier: Notifier,
        config: ActionConfig,
    ) -> None:
        self._exchange = exchange
        self._auth = auth_gate
        self._navigator = navigator
        self._notifier = notifier
        self._config = config

    async def dispatch(self, session_id: str | None, button: ActionButton) -> DispatchResult:
        """Dispatch *button*. Auth errors propagate; transient errors are reported here."""
        if not session_id or not self._auth.has_credential():
            log.debug('Ignoring %s: no session or credential', button.type.value)
            return DispatchResult(DispatchOutcome.IGNORED)

        match button.type:
            case ActionType.CANCEL:
                return DispatchResult(DispatchOutcome.CANCELLED)
            case ActionType.BUY_NOW | ActionType.ADD_TO_LIBRARY | ActionType.VIEW_DETAILS:
                return await self._purchase_action(session_id, button)

    async def _purchase_action(self, session_id: str, button: ActionButton) -> DispatchResult:
        try:
            response = await self._exchange.purchase_action(session_id, button.template_id, button.type)
            return await self._handle_response(response, button.template_id)
        except TransientError as e:
            log.error('Action %s for template %d failed: %s', button.type.value, button.template_id, e)
            self._notifier.error('Error', str(e))
            return DispatchResult(DispatchOutcome.FAILED, error=str(e))

    async def _handle_response(self, response: PurchaseActionResult, template_id: int) -> DispatchResult:
        match response.action:
            case PurchaseOutcome.VIEW_DETAILS:
                if not response.url:
                    return DispatchResult(DispatchOutcome.NO_OP)
                return self._navigate(response.url)
            case PurchaseOutcome.REDIRECT_TO_PURCHASE:
                return self._navigate(self._config.purchase_target(template_id))
            case PurchaseOutcome.ADD_TO_LIBRARY:
                called = False
                if self._config.add_to_library is AddToLibraryPolicy.CALL_ENDPOINT and response.endpoint:
                    # A failing follow-up raises here and is reported as an error, not a success.
                    await self._exchange.follow_up(response.endpoint)
                    called = True
                self._notifier.success('Success', ADDED_TO_LIBRARY)
                return DispatchResult(DispatchOutcome.ADDED_TO_LIBRARY, follow_up_called=called)
            case PurchaseOutcome.UNKNOWN:
                log.warning('Unhandled purchase action for template %d', template_id)
                return DispatchResult(DispatchOutcome.NO_OP)

    def _navigate(self, target: str) -> DispatchResult:
        log.info('Navigating to %s', target)
        self._navigator.navigate(target)
        return DispatchResult(DispatchOutcome.NAVIGATED, target=target)
