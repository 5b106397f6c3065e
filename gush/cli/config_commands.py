# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
CLI commands for managing Gush configuration.

Users can configure:
- Adapter (github, gitlab, bitbucket)
- Credentials (username, token)
- Default base branch
- Self-hosted API/web URLs
"""

import json
import os
from typing import Any, Dict

import click
from rich.table import Table

from gush.cli.helpers import console, print_warning
from gush.constants import CONFIG_FILE, GUSH_DIR
from gush.utils.utils import mask_secret

KNOWN_KEYS = {
    'adapter': 'Hosting provider adapter (github, gitlab, bitbucket)',
    'base': 'Default base branch for new pull requests',
    'username': 'Provider username (Bitbucket: account name for the app password)',
    'token': 'Personal access token / app password',
    'api_url': 'API root for self-hosted providers',
    'web_url': 'Web root for self-hosted providers',
    'timeout': 'HTTP timeout in seconds',
    'copy_milestone': 'Carry the milestone over when a pull request is re-opened on a new base',
    'remote': 'Git remote used to detect the repository (default: origin)',
}
SECRET_KEYS = ('token',)
BOOLEAN_KEYS = ('copy_milestone',)

# Environment variables override the config file
ENV_OVERRIDES = {
    'GUSH_TOKEN': 'token',
    'GUSH_USERNAME': 'username',
    'GUSH_ADAPTER': 'adapter',
}


def load_config() -> Dict[str, Any]:
    """Load configuration from ~/.gush/config.json; invalid JSON counts as empty."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, 'r') as f:
            config = json.load(f)
    except (json.JSONDecodeError, IOError):
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config: Dict[str, Any]) -> bool:
    """Save configuration to file."""
    GUSH_DIR.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, 'w') as f:
            json.dump(config, f, indent=2)
        return True
    except IOError as e:
        console.print(f'[red]Failed to save config: {e}[/red]')
        return False


def resolve_config() -> Dict[str, Any]:
    """
    Effective configuration.

    Priority:
    1. CLI arguments (highest - handled by callers)
    2. GUSH_* environment variables
    3. ~/.gush/config.json
    """
    config = load_config()
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value
    return config


def _parse_value(key: str, value: str) -> Any:
    if key in BOOLEAN_KEYS:
        lowered = value.strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off'):
            return False
        raise click.BadParameter(f'{key} expects true or false (got {value})', param_hint='VALUE')
    if key == 'timeout':
        try:
            return int(value)
        except ValueError:
            raise click.BadParameter(f'timeout must be a number of seconds (got {value})', param_hint='VALUE')
    return value


def _display_value(key: str, value: Any) -> str:
    if key in SECRET_KEYS and value:
        return mask_secret(value)
    return str(value)


@click.group(invoke_without_command=True)
@click.pass_context
def config(ctx):
    """Manage CLI configuration.

    Show current configuration (default) or set config values.

    \b
    Examples:
        gush config                          # Show current config
        gush config set adapter gitlab       # Use GitLab
        gush config set token glpat-xxxx     # Store a token
        gush config set base main            # Default PR base
    """
    if ctx.invoked_subcommand is None:
        show_config()


def show_config():
    """Display current configuration."""
    config_values = load_config()

    if not config_values:
        console.print('\n[yellow]No configuration set.[/yellow]')
        console.print('[dim]Use "gush config set <key> <value>" to set values.[/dim]')
        console.print(f'\n[dim]Available keys: {", ".join(KNOWN_KEYS)}[/dim]')
        return

    console.print('\n[bold cyan]Gush CLI Configuration[/bold cyan]\n')

    table = Table(show_header=True, header_style='bold magenta')
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')

    for key, value in sorted(config_values.items()):
        table.add_row(key, _display_value(key, value))

    console.print(table)
    console.print(f'\n[dim]Config file: {CONFIG_FILE}[/dim]')


@config.command('set')
@click.argument('key', type=str)
@click.argument('value', type=str)
def config_set(key: str, value: str):
    """Set a configuration value.

    \b
    Common keys:
        adapter     github, gitlab or bitbucket
        username    Provider username
        token       Personal access token / app password
        base        Default base branch

    \b
    Examples:
        gush config set adapter bitbucket
        gush config set copy_milestone false
    """
    if key not in KNOWN_KEYS:
        print_warning(f'unknown key "{key}", storing it anyway')

    config_values = load_config()
    old_value = config_values.get(key)
    config_values[key] = _parse_value(key, value)

    if not save_config(config_values):
        return

    new_display = _display_value(key, config_values[key])
    if old_value is not None:
        console.print(f'[green]Updated {key}:[/green] {_display_value(key, old_value)} → {new_display}')
    else:
        console.print(f'[green]Set {key}:[/green] {new_display}')


@config.command('unset')
@click.argument('key', type=str)
def config_unset(key: str):
    """Remove a single configuration value."""
    config_values = load_config()
    if key not in config_values:
        console.print(f'[yellow]{key} is not set.[/yellow]')
        return
    del config_values[key]
    if save_config(config_values):
        console.print(f'[green]Removed {key}[/green]')


@config.command('clear')
@click.option('--force', '-f', is_flag=True, help='Skip confirmation')
def config_clear(force: bool):
    """Clear all configuration.

    \b
    Example:
        gush config clear
        gush config clear --force
    """
    if not CONFIG_FILE.exists():
        console.print('[yellow]No configuration to clear.[/yellow]')
        return

    if not force and not click.confirm('Clear all configuration?', default=False):
        console.print('[yellow]Cancelled.[/yellow]')
        return

    try:
        CONFIG_FILE.unlink()
        console.print('[green]Configuration cleared.[/green]')
    except IOError as e:
        console.print(f'[red]Failed to clear config: {e}[/red]')


def register_config_commands(cli):
    """Register config commands with a parent CLI group."""
    cli.add_command(config)
