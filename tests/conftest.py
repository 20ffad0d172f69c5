"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import base64
import inspect
import json
import time
from collections.abc import Callable

import pytest

from panda_chat.l1_entities.config import AppConfig
from panda_chat.l1_entities.errors import TransportError
from panda_chat.l1_entities.session import AuthContext
from panda_chat.l2_use_cases.action_dispatcher import ActionDispatcher
from panda_chat.l2_use_cases.auth_gate import AuthGate
from panda_chat.l2_use_cases.message_exchange import MessageExchange
from panda_chat.l2_use_cases.ports.chat_transport import TransportResponse
from panda_chat.l2_use_cases.rate_limiter import RateLimiter
from panda_chat.l2_use_cases.session_store import SessionStore
from panda_chat.l3_interface_adapters.controllers.chat_controller import ChatController
from panda_chat.l4_frameworks_and_drivers.infra_config import build_app_config


def _b64url(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b'=').decode()


def make_token(exp: float | None = None, **claims) -> str:
    """Build an unsigned three-part token. Defaults to one expiring in an hour."""
    payload = dict(claims)
    payload['exp'] = int(time.time()) + 3600 if exp is None else exp
    return f'{_b64url({"alg": "HS256", "typ": "JWT"})}.{_b64url(payload)}.signature'


# --- Protocol-conforming Fakes ---


class FakeCredentialStore:
    """Fake CredentialStore — holds one token in memory."""

    def __init__(self, token: str | None = None) -> None:
        self.token = token
        self.clear_calls = 0

    def load(self) -> AuthContext:
        return AuthContext(token=self.token)

    def clear(self) -> None:
        self.clear_calls += 1
        self.token = None


class InMemoryKeyValueStore:
    """Fake KeyValueStore backed by a dict."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class FakeTransport:
    """Fake ChatTransport — records calls and replays queued responses in order.

    A queued item may be a TransportResponse, a TransportError instance (raised),
    or a callable returning either (evaluated at call time).
    """

    def __init__(self, responses: list | None = None) -> None:
        self._responses: list = list(responses or [])
        self.calls: list[tuple[str, str, dict[str, str], dict | None]] = []

    def queue(self, item) -> None:
        self._responses.append(item)

    def queue_json(self, payload, status: int = 200) -> None:
        self._responses.append(TransportResponse(status=status, payload=payload))

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str],
        json: dict | None = None,
    ) -> TransportResponse:
        self.calls.append((method, path, dict(headers), json))
        if not self._responses:
            raise AssertionError(f'Unexpected request: {method} {path}')
        item = self._responses.pop(0)
        if callable(item):
            item = await item() if inspect.iscoroutinefunction(item) else item()
        if isinstance(item, TransportError):
            raise item
        return item


class FakeTask:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTickScheduler:
    """Fake TickScheduler — tests advance time by calling fire()."""

    def __init__(self) -> None:
        self.scheduled: list[tuple[float, Callable[[], None], FakeTask]] = []

    def every(self, interval: float, callback: Callable[[], None]) -> FakeTask:
        task = FakeTask()
        self.scheduled.append((interval, callback, task))
        return task

    @property
    def active(self) -> list[tuple[float, Callable[[], None], FakeTask]]:
        return [entry for entry in self.scheduled if not entry[2].cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for _, callback, task in list(self.active):
                if not task.cancelled:
                    callback()


class FakeNavigator:
    def __init__(self) -> None:
        self.targets: list[str] = []

    def navigate(self, target: str) -> None:
        self.targets.append(target)


class FakeNotifier:
    def __init__(self) -> None:
        self.successes: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []

    def success(self, title: str, message: str) -> None:
        self.successes.append((title, message))

    def error(self, title: str, message: str) -> None:
        self.errors.append((title, message))


# --- Payload builders ---


def reply_payload(session_id: str = 'abc123', message: str = 'Here are some templates', **extra) -> dict:
    payload = {
        'sessionId': session_id,
        'message': message,
        'templates': [],
        'actionButtons': [],
        'conversationTitle': None,
    }
    payload.update(extra)
    return payload


def template_payload(template_id: int = 42, title: str = 'Wedding Invite', price: int = 0) -> dict:
    return {
        'id': template_id,
        'title': title,
        'description': 'Elegant floral layout',
        'price': price,
        'previewImage': 'https://cdn.example/42.png',
        'category': 'Invitations',
        'rating': 4.5,
        'downloads': 1200,
    }


class ChatHarness:
    """Wires a real ChatController over fakes for one surface."""

    def __init__(
        self,
        config: AppConfig,
        surface: str = 'chatbox',
        token: str | None = None,
        kv: InMemoryKeyValueStore | None = None,
    ) -> None:
        self.credentials = FakeCredentialStore(make_token() if token is None else token)
        self.kv = kv or InMemoryKeyValueStore()
        self.transport = FakeTransport()
        self.scheduler = ManualTickScheduler()
        self.navigator = FakeNavigator()
        self.notifier = FakeNotifier()
        self.auth_gate = AuthGate(self.credentials)
        self.exchange = MessageExchange(self.transport, self.auth_gate)
        self.surface = config.surface(surface)
        self.session_store = SessionStore(self.kv, self.surface.name)
        self.rate_limiter = RateLimiter(self.scheduler, default_cooldown=config.rate_limit.default_cooldown_seconds)
        self.dispatcher = ActionDispatcher(
            self.exchange,
            self.auth_gate,
            self.navigator,
            self.notifier,
            config.actions,
        )
        self.controller = ChatController(
            surface=self.surface,
            auth_gate=self.auth_gate,
            exchange=self.exchange,
            session_store=self.session_store,
            rate_limiter=self.rate_limiter,
            dispatcher=self.dispatcher,
            notifier=self.notifier,
        )


# --- Standard Fixtures ---


@pytest.fixture
def default_config() -> AppConfig:
    return build_app_config({})


@pytest.fixture
def valid_token() -> str:
    return make_token()


@pytest.fixture
def harness(default_config: AppConfig) -> ChatHarness:
    return ChatHarness(default_config)


@pytest.fixture
def sample_config_yaml(tmp_path):
    content = """\
rate_limit:
  default_cooldown_seconds: 90
actions:
  add_to_library: call_endpoint
surfaces:
  floating:
    max_template_cards: 1
api:
  base_url: "https://api.example.test"
  timeout: 5
web:
  base_url: "https://panda.example.test"
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p
