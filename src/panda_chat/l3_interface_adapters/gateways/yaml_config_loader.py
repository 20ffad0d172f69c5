"""Gateway: reads panda-chat YAML settings and validates them over built-in defaults."""

from __future__ import annotations

import copy
import logging
from pathlib import Path

import yaml

from panda_chat.l1_entities.config import AppConfig
from panda_chat.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS

log = logging.getLogger('pchat.config')


class ConfigFileError(ValueError):
    """The config file exists but is not a YAML mapping."""


class YamlConfigLoader:
    """One YAML file feeds both AppConfig (domain) and InfraConfig (L4).

    ``load_raw`` returns the user's mapping untouched so each layer can pick its
    own sections; ``validate`` lays it over *defaults* and builds AppConfig.
    """

    def __init__(self, defaults: dict | None = None) -> None:
        self._defaults = defaults or {}

    def load_raw(self, config_path: str | None = None, overrides: dict | None = None) -> dict:
        path = _resolve_path(config_path)
        data: dict = {}
        if path is not None:
            data = _read_mapping(path)
            log.info('Loaded config from %s (sections: %s)', path, ', '.join(sorted(data)) or 'none')
        if overrides:
            deep_merge(data, overrides)
        return data

    def validate(self, raw: dict) -> AppConfig:
        merged = deep_merge(copy.deepcopy(self._defaults), copy.deepcopy(raw))
        return AppConfig.model_validate(merged)


def _resolve_path(config_path: str | None) -> Path | None:
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f'Config file not found: {path}')
        return path
    return next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)


def _read_mapping(path: Path) -> dict:
    data = yaml.safe_load(path.read_text(encoding='utf-8'))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigFileError(f'Config file {path} must contain a mapping, not {type(data).__name__}')
    return data


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
