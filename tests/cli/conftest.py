# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Shared fixtures for CLI tests."""

from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from gush.cli.helpers import CliContext
from gush.cli.main import cli
from gush.utils.git import GitHelper


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_gush_dir(tmp_path, monkeypatch):
    """Point config and log files at a temp dir and clear GUSH_* overrides."""
    gush_dir = tmp_path / '.gush'
    monkeypatch.setattr('gush.cli.config_commands.GUSH_DIR', gush_dir)
    monkeypatch.setattr('gush.cli.config_commands.CONFIG_FILE', gush_dir / 'config.json')
    monkeypatch.setattr('gush.cli.main.LOG_DIR', gush_dir / 'logs')
    for name in ('GUSH_TOKEN', 'GUSH_USERNAME', 'GUSH_ADAPTER'):
        monkeypatch.delenv(name, raising=False)
    return gush_dir


@pytest.fixture
def git_helper():
    helper = Mock(spec=GitHelper)
    helper.get_active_branch_name.return_value = 'feature'
    helper.get_remote_url.return_value = 'git@github.com:acme/widget.git'
    helper.get_first_commit_title.return_value = 'Add widget'
    return helper


@pytest.fixture
def invoke(cli_runner, memory_adapter, git_helper):
    """Run ``gush`` with a prepared context; the in-memory adapter is used unless ``adapter`` is given."""

    def _invoke(*args, adapter=None, config=None, input=None):
        obj = CliContext(
            config=config or {'username': 'alice'},
            git=git_helper,
            adapter=memory_adapter if adapter is None else adapter,
        )
        return cli_runner.invoke(cli, list(args), obj=obj, input=input)

    return _invoke
