"""Gateway: aiohttp-based HTTP transport — implements ChatTransport port."""

from __future__ import annotations

import asyncio
import json as jsonlib
import logging

import aiohttp

from panda_chat.l1_entities.errors import TransportError
from panda_chat.l2_use_cases.ports.chat_transport import TransportResponse

log = logging.getLogger('pchat.http')


def api_root(base_url: str) -> str:
    """Normalize *base_url* to the `<base>/api/` root every chat path hangs off."""
    base = base_url.rstrip('/')
    return f'{base}/api/' if base else 'api/'


class AiohttpChatTransport:
    """Wraps aiohttp.ClientSession to implement the ChatTransport protocol."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self._root = api_root(base_url)
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def url_for(self, path: str) -> str:
        if path.startswith(('http://', 'https://')):
            return path
        return self._root + path.lstrip('/')

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: dict | None = None,
    ) -> TransportResponse:
        url = self.url_for(path)
        send_headers = {'Accept': 'application/json', **headers}
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.request(method, url, headers=send_headers, json=json) as resp:
                    body = await resp.text()
                    status = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f'{type(e).__name__}: {e}') from e

        log.debug('%s %s -> %d (%d bytes)', method, url, status, len(body))
        return TransportResponse(status=status, payload=_decode(body))


def _decode(body: str) -> object:
    if not body.strip():
        return None
    try:
        return jsonlib.loads(body)
    except jsonlib.JSONDecodeError:
        return None
