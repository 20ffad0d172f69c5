"""Tests for AiohttpChatTransport against a local aiohttp server."""

from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import AioHTTPTestCase

from panda_chat.l1_entities.errors import TransportError
from panda_chat.l3_interface_adapters.gateways.aiohttp_chat_transport import AiohttpChatTransport, api_root


class TestApiRoot:
    @pytest.mark.parametrize(
        ('base', 'expected'),
        [
            ('http://localhost:8080', 'http://localhost:8080/api/'),
            ('http://localhost:8080/', 'http://localhost:8080/api/'),
            ('https://x.ngrok.app/', 'https://x.ngrok.app/api/'),
        ],
    )
    def test_normalizes(self, base, expected):
        assert api_root(base) == expected

    def test_absolute_path_passes_through(self):
        transport = AiohttpChatTransport('http://localhost:8080')
        assert transport.url_for('https://other.test/library/1') == 'https://other.test/library/1'
        assert transport.url_for('/chat/message') == 'http://localhost:8080/api/chat/message'


class TestAiohttpChatTransport(AioHTTPTestCase):
    async def get_application(self):
        self.seen: list[dict] = []

        async def post_message(request: web.Request) -> web.Response:
            body = await request.json()
            self.seen.append({'headers': request.headers.copy(), 'body': body})
            return web.json_response({'sessionId': 'abc123', 'message': f'echo: {body["message"]}'})

        async def get_session(request: web.Request) -> web.Response:
            return web.json_response({'message': 'Session not found'}, status=404)

        async def delete_session(request: web.Request) -> web.Response:
            return web.Response(status=204)

        async def plain(request: web.Request) -> web.Response:
            return web.Response(text='<html>gateway</html>', status=502)

        async def slow(request: web.Request) -> web.Response:
            await asyncio.sleep(2)
            return web.json_response({})

        app = web.Application()
        app.router.add_post('/api/chat/message', post_message)
        app.router.add_get('/api/chat/session/{session_id}', get_session)
        app.router.add_delete('/api/chat/session/{session_id}', delete_session)
        app.router.add_get('/api/plain', plain)
        app.router.add_get('/api/slow', slow)
        return app

    def _transport(self, timeout: float = 5.0) -> AiohttpChatTransport:
        return AiohttpChatTransport(f'http://{self.server.host}:{self.server.port}', timeout=timeout)

    async def test_post_sends_json_and_headers(self):
        response = await self._transport().request(
            'POST',
            'chat/message',
            headers={'Authorization': 'Bearer t', 'ngrok-skip-browser-warning': 'true'},
            json={'sessionId': None, 'message': 'hi'},
        )
        assert response.ok
        assert response.payload == {'sessionId': 'abc123', 'message': 'echo: hi'}
        assert self.seen[0]['body'] == {'sessionId': None, 'message': 'hi'}
        assert self.seen[0]['headers']['Authorization'] == 'Bearer t'
        assert self.seen[0]['headers']['ngrok-skip-browser-warning'] == 'true'

    async def test_error_status_is_returned_not_raised(self):
        response = await self._transport().request('GET', 'chat/session/gone', headers={})
        assert response.status == 404
        assert not response.ok
        assert response.payload == {'message': 'Session not found'}

    async def test_empty_body_decodes_to_none(self):
        response = await self._transport().request('DELETE', 'chat/session/abc', headers={})
        assert response.status == 204
        assert response.payload is None

    async def test_non_json_body_decodes_to_none(self):
        response = await self._transport().request('GET', 'plain', headers={})
        assert response.status == 502
        assert response.payload is None

    async def test_timeout_raises_transport_error(self):
        with pytest.raises(TransportError):
            await self._transport(timeout=0.2).request('GET', 'slow', headers={})


class TestConnectionFailure:
    @pytest.mark.asyncio
    async def test_unreachable_host_raises_transport_error(self):
        transport = AiohttpChatTransport('http://127.0.0.1:1', timeout=2.0)
        with pytest.raises(TransportError):
            await transport.request('GET', 'chat/session/x', headers={})
