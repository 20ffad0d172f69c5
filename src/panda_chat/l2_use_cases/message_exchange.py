"""Use case: the request/response contract with the assistant back-end.

Every remote call goes through here. Transport failures and non-2xx
responses are converted into the ChatError taxonomy; nothing escapes as a
raw transport exception.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from panda_chat.l1_entities.chat_message import ActionType
from panda_chat.l1_entities.chat_reply import ChatReply, PurchaseActionResult, SessionHistory
from panda_chat.l1_entities.errors import (
    AuthExpiredError,
    ChatError,
    InputInvalidError,
    RateLimitedError,
    TransientError,
    TransportError,
)
from panda_chat.l2_use_cases.auth_gate import AuthGate
from panda_chat.l2_use_cases.ports.chat_transport import ChatTransport, TransportResponse

log = logging.getLogger('pchat.exchange')

ModelT = TypeVar('ModelT', bound=BaseModel)

PAYLOAD_NOT_RECEIVED = 'Request payload was not received by the server. Please try again.'


def classify_failure(response: TransportResponse, fallback: str) -> ChatError:
    """Map a non-2xx response to the error taxonomy."""
    payload = response.payload if isinstance(response.payload, dict) else {}
    server_message = payload.get('message') if isinstance(payload.get('message'), str) else None

    if response.status == 401:
        return AuthExpiredError()
    if response.status == 429:
        retry_after = payload.get('retryAfter')
        if isinstance(retry_after, float) and retry_after.is_integer():
            retry_after = int(retry_after)
        if not isinstance(retry_after, int) or isinstance(retry_after, bool):
            retry_after = None
        return RateLimitedError(server_message or 'Rate limit exceeded', retry_after_seconds=retry_after)
    if response.status == 481:
        return TransientError(PAYLOAD_NOT_RECEIVED)
    return TransientError(server_message or fallback)


def normalize_text(text: str) -> str:
    """Trim *text*. Raises InputInvalidError when nothing is left."""
    trimmed = text.strip() if text else ''
    if not trimmed:
        raise InputInvalidError()
    return trimmed


class MessageExchange:
    """Performs remote calls for one chat surface. Holds no session state."""

    def __init__(self, transport: ChatTransport, auth_gate: AuthGate) -> None:
        self._transport = transport
        self._auth = auth_gate

    async def send(self, session_id: str | None, text: str) -> ChatReply:
        """POST chat/message. The returned session_id is authoritative."""
        message = normalize_text(text)
        log.info('Sending message (%d chars, session=%s)', len(message), session_id or 'new')
        reply = await self._call(
            'POST',
            'chat/message',
            ChatReply,
            fallback='Failed to send message',
            json={'sessionId': session_id, 'message': message},
        )
        log.info(
            'Reply received: session=%s, %d templates, %d action buttons',
            reply.session_id,
            len(reply.templates),
            len(reply.action_buttons),
        )
        return reply

    async def fetch_history(self, session_id: str) -> SessionHistory:
        """GET chat/session/{id}. Hydrates a resumed session."""
        return await self._call('GET', f'chat/session/{session_id}', SessionHistory, fallback='Failed to get session')

    async def clear(self, session_id: str) -> str:
        """DELETE chat/session/{id}. Returns the server's confirmation message."""
        payload = await self._call_raw('DELETE', f'chat/session/{session_id}', fallback='Failed to clear session')
        if isinstance(payload, dict) and isinstance(payload.get('message'), str):
            return payload['message']
        return ''

    async def purchase_action(self, session_id: str, template_id: int, action: ActionType) -> PurchaseActionResult:
        """POST chat/purchase-action."""
        return await self._call(
            'POST',
            'chat/purchase-action',
            PurchaseActionResult,
            fallback='Failed to handle action',
            json={'sessionId': session_id, 'templateId': template_id, 'action': action.value},
        )

    async def follow_up(self, endpoint: str) -> None:
        """POST to a follow-up endpoint returned by a purchase action."""
        await self._call_raw('POST', endpoint, fallback='Failed to complete action', json={})

    async def _call(
        self,
        method: str,
        path: str,
        model: type[ModelT],
        *,
        fallback: str,
        json: dict | None = None,
    ) -> ModelT:
        payload = await self._call_raw(method, path, fallback=fallback, json=json)
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            log.error('Malformed %s %s response: %s', method, path, e)
            raise TransientError(fallback) from e

    async def _call_raw(self, method: str, path: str, *, fallback: str, json: dict | None = None) -> Any:
        headers = self._auth.headers()
        try:
            response = await self._transport.request(method, path, headers=headers, json=json)
        except TransportError as e:
            log.error('%s %s failed: %s', method, path, e)
            raise TransientError(fallback) from e

        if not response.ok:
            error = classify_failure(response, fallback)
            log.warning('%s %s -> HTTP %d (%s: %s)', method, path, response.status, type(error).__name__, error)
            raise error
        return response.payload
