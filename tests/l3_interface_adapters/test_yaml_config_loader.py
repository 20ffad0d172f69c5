"""Tests for YAML config loading and infra config parsing."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from panda_chat.l1_entities.config import AddToLibraryPolicy
from panda_chat.l3_interface_adapters.gateways.yaml_config_loader import ConfigFileError, YamlConfigLoader, deep_merge
from panda_chat.l4_frameworks_and_drivers.infra_config import APP_CONFIG_DEFAULTS, InfraConfig, build_app_config

_DEFAULT_PATHS = 'panda_chat.l3_interface_adapters.gateways.yaml_config_loader.DEFAULT_CONFIG_PATHS'


class TestDeepMerge:
    def test_nested(self):
        base = {'a': {'b': 1, 'c': 2}, 'd': 3}
        deep_merge(base, {'a': {'c': 20}, 'e': 5})
        assert base == {'a': {'b': 1, 'c': 20}, 'd': 3, 'e': 5}

    def test_non_dict_replaces(self):
        base = {'a': {'b': 1}}
        deep_merge(base, {'a': 'flat'})
        assert base == {'a': 'flat'}


class TestYamlConfigLoader:
    def test_load_raw_from_path(self, sample_config_yaml):
        raw = YamlConfigLoader().load_raw(str(sample_config_yaml))
        assert raw['rate_limit']['default_cooldown_seconds'] == 90
        assert raw['api']['base_url'] == 'https://api.example.test'

    def test_missing_path_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            YamlConfigLoader().load_raw(str(tmp_path / 'nope.yaml'))

    def test_no_default_files_gives_empty(self, tmp_path):
        with patch(_DEFAULT_PATHS, [tmp_path / 'config.yaml']):
            assert YamlConfigLoader().load_raw() == {}

    def test_default_path_used(self, tmp_path):
        cfg = tmp_path / 'config.yaml'
        cfg.write_text('rate_limit:\n  default_cooldown_seconds: 10\n', encoding='utf-8')
        with patch(_DEFAULT_PATHS, [cfg]):
            assert YamlConfigLoader().load_raw() == {'rate_limit': {'default_cooldown_seconds': 10}}

    def test_overrides_merge(self, sample_config_yaml):
        raw = YamlConfigLoader().load_raw(str(sample_config_yaml), overrides={'api': {'timeout': 1}})
        assert raw['api'] == {'base_url': 'https://api.example.test', 'timeout': 1}

    def test_empty_file(self, tmp_path):
        cfg = tmp_path / 'empty.yaml'
        cfg.write_text('', encoding='utf-8')
        assert YamlConfigLoader().load_raw(str(cfg)) == {}

    def test_non_mapping_file_rejected(self, tmp_path):
        cfg = tmp_path / 'list.yaml'
        cfg.write_text('- chatbox\n- floating\n', encoding='utf-8')
        with pytest.raises(ConfigFileError, match='must contain a mapping'):
            YamlConfigLoader().load_raw(str(cfg))

    def test_validate_fills_missing_sections_from_defaults(self, tmp_path):
        cfg = tmp_path / 'partial.yaml'
        cfg.write_text('rate_limit:\n  default_cooldown_seconds: 5\n', encoding='utf-8')
        loader = YamlConfigLoader(defaults=APP_CONFIG_DEFAULTS)
        config = loader.validate(loader.load_raw(str(cfg)))
        assert config.rate_limit.default_cooldown_seconds == 5
        assert config.actions.add_to_library is AddToLibraryPolicy.REPORT_ONLY
        assert set(config.surfaces) == {'chatbox', 'floating'}

    def test_validate_does_not_mutate_inputs(self):
        raw = {'surfaces': {'floating': {'max_template_cards': 1}}}
        loader = YamlConfigLoader(defaults=APP_CONFIG_DEFAULTS)
        loader.validate(raw)
        assert raw == {'surfaces': {'floating': {'max_template_cards': 1}}}
        assert APP_CONFIG_DEFAULTS['surfaces']['floating']['max_template_cards'] == 2

    def test_validate_without_defaults_requires_all_sections(self):
        with pytest.raises(ValidationError):
            YamlConfigLoader().validate({'rate_limit': {'default_cooldown_seconds': 5}})


class TestBuildAppConfig:
    def test_defaults(self):
        config = build_app_config({})
        assert config.rate_limit.default_cooldown_seconds == 3600
        assert config.surface('chatbox').resume
        assert not config.surface('chatbox').strip_markdown
        assert not config.surface('floating').resume
        assert config.surface('floating').strip_markdown

    def test_user_overrides_merge_over_defaults(self, sample_config_yaml):
        config = build_app_config(YamlConfigLoader().load_raw(str(sample_config_yaml)))
        assert config.rate_limit.default_cooldown_seconds == 90
        assert config.actions.add_to_library is AddToLibraryPolicy.CALL_ENDPOINT
        assert config.actions.purchase_path == '/payment/{template_id}'
        assert config.surface('floating').max_template_cards == 1
        assert config.surface('floating').strip_markdown

    def test_defaults_not_mutated(self):
        build_app_config({'rate_limit': {'default_cooldown_seconds': 5}})
        assert build_app_config({}).rate_limit.default_cooldown_seconds == 3600


class TestInfraConfig:
    def test_defaults(self):
        infra = InfraConfig()
        assert infra.api.base_url == 'http://localhost:8080'
        assert infra.api.auxiliary_headers == {'ngrok-skip-browser-warning': 'true'}

    def test_parses_raw_yaml(self, sample_config_yaml):
        infra = InfraConfig.model_validate(YamlConfigLoader().load_raw(str(sample_config_yaml)))
        assert infra.api.timeout == 5
        assert infra.web.base_url == 'https://panda.example.test'
