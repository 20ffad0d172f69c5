"""Use case: supply request credentials and classify them before each call."""

from __future__ import annotations

import base64
import binascii
import json
import logging
import time
from collections.abc import Callable

from panda_chat.l1_entities.errors import AuthExpiredError, AuthMissingError
from panda_chat.l2_use_cases.ports.credential_store import CredentialStore

log = logging.getLogger('pchat.auth')

DEFAULT_AUXILIARY_HEADERS: dict[str, str] = {'ngrok-skip-browser-warning': 'true'}


def decode_claims(token: str) -> dict:
    """Decode the payload segment of a three-part token.

    Raises ValueError when the token is not three non-empty segments or the
    payload is not base64url-encoded JSON.
    """
    parts = token.split('.')
    if len(parts) != 3 or not all(parts):
        raise ValueError('token is not three non-empty segments')
    payload = parts[1]
    padded = payload + '=' * (-len(payload) % 4)
    try:
        claims = json.loads(base64.urlsafe_b64decode(padded))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f'undecodable payload: {e}') from e
    if not isinstance(claims, dict):
        raise ValueError('payload is not a JSON object')
    return claims


def is_token_valid(token: str, now: float) -> bool:
    """Local, syntactic validation: structure plus an optional exp claim in the future."""
    try:
        claims = decode_claims(token)
    except ValueError as e:
        log.warning('Invalid token format: %s', e)
        return False
    exp = claims.get('exp')
    if exp is None:
        return True
    if not isinstance(exp, (int, float)) or isinstance(exp, bool):
        log.warning('Token exp claim is not numeric')
        return False
    if exp <= now:
        log.warning('Token has expired')
        return False
    return True


class AuthGate:
    """Produces transport headers from the credential store, purging known-bad tokens."""

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        auxiliary_headers: dict[str, str] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._credentials = credentials
        self._auxiliary = dict(DEFAULT_AUXILIARY_HEADERS if auxiliary_headers is None else auxiliary_headers)
        self._clock = clock

    def has_credential(self) -> bool:
        """True when a token is present. No validation."""
        return bool(self._credentials.load().token)

    def headers(self) -> dict[str, str]:
        """Return request headers. Raises AuthMissingError or AuthExpiredError."""
        token = self._credentials.load().token
        if not token:
            raise AuthMissingError()
        if not is_token_valid(token, self._clock()):
            self._credentials.clear()
            log.info('Purged invalid or expired credential')
            raise AuthExpiredError()
        return {'Authorization': f'Bearer {token}', **self._auxiliary}
