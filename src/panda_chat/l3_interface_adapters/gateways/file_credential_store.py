"""Gateway: token-file credential store — implements CredentialStore port."""

from __future__ import annotations

import logging
from pathlib import Path

from panda_chat.l1_entities.session import AuthContext

log = logging.getLogger('pchat.auth')


class FileCredentialStore:
    """Reads the bearer token written by the login flow (or `panda-chat set-token`)."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> AuthContext:
        if not self._path.exists():
            return AuthContext()
        token = self._path.read_text(encoding='utf-8').strip()
        return AuthContext(token=token or None)

    def save(self, token: str) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(token.strip() + '\n', encoding='utf-8')
        self._path.chmod(0o600)
        return self._path

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        log.info('Removed credential file %s', self._path)
