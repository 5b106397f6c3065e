# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Tests for ``gush config`` and config file resolution.
"""

import json

import pytest

from gush.cli import config_commands
from gush.cli.config_commands import load_config, resolve_config, save_config


@pytest.fixture
def config_file(isolated_gush_dir):
    return isolated_gush_dir / 'config.json'


class TestConfigSet:
    def test_set_creates_file(self, invoke, config_file):
        result = invoke('config', 'set', 'adapter', 'gitlab')

        assert result.exit_code == 0, result.output
        assert json.loads(config_file.read_text()) == {'adapter': 'gitlab'}
        assert 'Set adapter' in result.output

    def test_update_shows_old_value(self, invoke):
        save_config({'base': 'master'})

        result = invoke('config', 'set', 'base', 'main')

        assert 'master → main' in result.output
        assert load_config()['base'] == 'main'

    @pytest.mark.parametrize('value,expected', [('false', False), ('No', False), ('1', True), ('on', True)])
    def test_boolean_values(self, invoke, value, expected):
        invoke('config', 'set', 'copy_milestone', value)

        assert load_config()['copy_milestone'] is expected

    def test_invalid_boolean(self, invoke):
        result = invoke('config', 'set', 'copy_milestone', 'maybe')

        assert result.exit_code == 2
        assert load_config() == {}

    def test_timeout_is_numeric(self, invoke):
        invoke('config', 'set', 'timeout', '10')

        assert load_config()['timeout'] == 10

    def test_unknown_key_is_kept_with_warning(self, invoke):
        result = invoke('config', 'set', 'colour', 'blue')

        assert 'unknown key' in result.output
        assert load_config() == {'colour': 'blue'}

    def test_token_is_masked(self, invoke):
        result = invoke('config', 'set', 'token', 'ghp_supersecret')

        assert 'supersecret' not in result.output
        assert load_config()['token'] == 'ghp_supersecret'


class TestConfigShow:
    def test_empty(self, invoke):
        result = invoke('config')

        assert 'No configuration set' in result.output

    def test_masks_token(self, invoke):
        save_config({'token': 'ghp_supersecret', 'username': 'alice'})

        result = invoke('config')

        assert 'alice' in result.output
        assert 'supersecret' not in result.output


class TestConfigUnsetAndClear:
    def test_unset(self, invoke):
        save_config({'base': 'main', 'username': 'alice'})

        result = invoke('config', 'unset', 'base')

        assert result.exit_code == 0
        assert load_config() == {'username': 'alice'}

    def test_unset_missing_key(self, invoke):
        result = invoke('config', 'unset', 'base')

        assert 'base is not set' in result.output

    def test_clear_force(self, invoke, config_file):
        save_config({'base': 'main'})

        result = invoke('config', 'clear', '--force')

        assert 'Configuration cleared' in result.output
        assert not config_file.exists()

    def test_clear_declined(self, invoke, config_file):
        save_config({'base': 'main'})

        result = invoke('config', 'clear', input='n\n')

        assert 'Cancelled' in result.output
        assert config_file.exists()


class TestResolveConfig:
    def test_invalid_json_is_empty(self, config_file):
        config_file.parent.mkdir(parents=True)
        config_file.write_text('{not json')

        assert load_config() == {}

    def test_environment_overrides_file(self, monkeypatch):
        save_config({'token': 'from-file', 'base': 'main'})
        monkeypatch.setenv('GUSH_TOKEN', 'from-env')

        assert resolve_config() == {'token': 'from-env', 'base': 'main'}

    def test_empty_environment_value_is_ignored(self, monkeypatch):
        save_config({'adapter': 'gitlab'})
        monkeypatch.setenv('GUSH_ADAPTER', '')

        assert resolve_config()['adapter'] == 'gitlab'

    def test_paths_point_at_temp_dir(self, isolated_gush_dir):
        assert config_commands.CONFIG_FILE.parent == isolated_gush_dir
