"""Use case: persist the active session id of one chat surface."""

from __future__ import annotations

import logging

from panda_chat.l2_use_cases.ports.key_value_store import KeyValueStore

log = logging.getLogger('pchat.session')


class SessionStore:
    """Per-surface session id persistence over a KeyValueStore."""

    def __init__(self, kv: KeyValueStore, surface: str) -> None:
        self._kv = kv
        self._key = f'chat_session_id:{surface}'

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> str | None:
        return self._kv.get(self._key) or None

    def save(self, session_id: str) -> None:
        self._kv.set(self._key, session_id)
        log.debug('Saved session id under %s', self._key)

    def clear(self) -> None:
        self._kv.delete(self._key)
        log.debug('Cleared %s', self._key)
