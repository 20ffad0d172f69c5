"""Infrastructure provider configs — lives in L4, not domain."""

from __future__ import annotations

from pydantic import BaseModel, Field

from panda_chat.l1_entities.config import AppConfig
from panda_chat.l2_use_cases.auth_gate import DEFAULT_AUXILIARY_HEADERS
from panda_chat.l3_interface_adapters.gateways.yaml_config_loader import YamlConfigLoader

APP_CONFIG_DEFAULTS: dict = {
    'rate_limit': {
        # Fallback when a 429 carries no retryAfter. Matches the web client; confirm with the back-end team.
        'default_cooldown_seconds': 3600,
    },
    'actions': {
        'add_to_library': 'report_only',
        'purchase_path': '/payment/{template_id}',
    },
    'surfaces': {
        'chatbox': {
            'name': 'chatbox',
            'resume': True,
            'strip_markdown': False,
            'max_template_cards': 3,
        },
        'floating': {
            'name': 'floating',
            'resume': False,
            'strip_markdown': True,
            'max_template_cards': 2,
            'price': {'free_label': 'Free', 'pattern': '{amount} VNĐ', 'thousands_separator': '.'},
        },
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    return YamlConfigLoader(defaults=APP_CONFIG_DEFAULTS).validate(raw)


class ApiProviderConfig(BaseModel):
    base_url: str = 'http://localhost:8080'
    timeout: float = 30.0
    auxiliary_headers: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_AUXILIARY_HEADERS))


class WebConfig(BaseModel):
    base_url: str = 'http://localhost:5173'  # where navigation targets are opened


class InfraConfig(BaseModel):
    """Groups all back-end and hand-off settings outside the domain layer."""

    api: ApiProviderConfig = Field(default_factory=ApiProviderConfig)
    web: WebConfig = Field(default_factory=WebConfig)
