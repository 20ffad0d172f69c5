"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from pathlib import Path

from panda_chat.l1_entities.config import AppConfig
from panda_chat.l2_use_cases.action_dispatcher import ActionDispatcher
from panda_chat.l2_use_cases.auth_gate import AuthGate
from panda_chat.l2_use_cases.message_exchange import MessageExchange
from panda_chat.l2_use_cases.ports.chat_transport import ChatTransport
from panda_chat.l2_use_cases.ports.credential_store import CredentialStore
from panda_chat.l2_use_cases.ports.key_value_store import KeyValueStore
from panda_chat.l2_use_cases.ports.navigator import Navigator
from panda_chat.l2_use_cases.ports.notifier import Notifier
from panda_chat.l2_use_cases.ports.tick_scheduler import TickScheduler
from panda_chat.l2_use_cases.rate_limiter import RateLimiter
from panda_chat.l2_use_cases.session_store import SessionStore
from panda_chat.l3_interface_adapters.controllers.chat_controller import ChatController
from panda_chat.l3_interface_adapters.gateways.aiohttp_chat_transport import AiohttpChatTransport
from panda_chat.l3_interface_adapters.gateways.file_credential_store import FileCredentialStore
from panda_chat.l3_interface_adapters.gateways.json_key_value_store import JsonFileKeyValueStore
from panda_chat.l3_interface_adapters.gateways.paths import STATE_PATH, TOKEN_PATH
from panda_chat.l4_frameworks_and_drivers.handoff import BrowserNavigator, EchoNotifier
from panda_chat.l4_frameworks_and_drivers.infra_config import InfraConfig
from panda_chat.l4_frameworks_and_drivers.schedulers import AsyncioTickScheduler


class DependencyContainer:
    """Creates and wires all concrete instances for one chat surface. Easy to override for testing."""

    def __init__(
        self,
        config: AppConfig,
        surface: str = 'chatbox',
        infra: InfraConfig | None = None,
        *,
        notifier: Notifier | None = None,
        scheduler: TickScheduler | None = None,
        navigator: Navigator | None = None,
        transport: ChatTransport | None = None,
        token_path: Path = TOKEN_PATH,
        state_path: Path = STATE_PATH,
    ) -> None:
        self.config = config
        self.surface = config.surface(surface)

        _infra = infra or InfraConfig()
        self.credentials: CredentialStore = FileCredentialStore(token_path)
        self.kv_store: KeyValueStore = JsonFileKeyValueStore(state_path)
        self.transport: ChatTransport = transport or AiohttpChatTransport(
            _infra.api.base_url, timeout=_infra.api.timeout
        )
        self.notifier: Notifier = notifier or EchoNotifier()
        self.navigator: Navigator = navigator or BrowserNavigator(_infra.web.base_url)

        self.auth_gate = AuthGate(self.credentials, auxiliary_headers=_infra.api.auxiliary_headers)
        self.exchange = MessageExchange(self.transport, self.auth_gate)
        self.session_store = SessionStore(self.kv_store, self.surface.name)
        self.rate_limiter = RateLimiter(
            scheduler or AsyncioTickScheduler(),
            default_cooldown=config.rate_limit.default_cooldown_seconds,
        )
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
