"""Shared path constants for configuration, credentials, and session state."""

from __future__ import annotations

from platformdirs import user_config_path, user_data_path

CONFIG_DIR = user_config_path('panda-chat')
DATA_DIR = user_data_path('panda-chat')

TOKEN_PATH = CONFIG_DIR / 'token'
STATE_PATH = DATA_DIR / 'state.json'
LOG_DIR = DATA_DIR / 'logs'

DEFAULT_CONFIG_PATHS = [
    CONFIG_DIR / 'config.yaml',
    CONFIG_DIR / 'config.yml',
]
