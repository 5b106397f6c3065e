# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Authentication check against the configured provider.
"""

import click

from gush.cli.config_commands import load_config, save_config
from gush.cli.helpers import console, handle_adapter_errors, print_error, print_success


@click.command('auth')
@click.option('--username', '-u', default=None, help='Username to authenticate with (overrides config)')
@click.option('--token', '-t', default=None, help='Token / app password to authenticate with (overrides config)')
@click.option('--save', is_flag=True, help='Store the credentials in ~/.gush/config.json when they work')
@click.pass_obj
@handle_adapter_errors
def auth(obj, username, token, save):
    """Verify the configured credentials.

    On failure, prints where a new token can be generated.

    \b
    Examples:
        gush auth
        gush auth --token ghp_xxxx --save
    """
    if username:
        obj.config['username'] = username
    if token:
        obj.config['token'] = token

    adapter = obj.adapter
    with console.status(f'[bold green]Authenticating against {adapter.name}...', spinner='dots'):
        authenticated = adapter.authenticate()

    if not authenticated:
        print_error(f'Authentication against {adapter.name} failed.')
        token_url = adapter.get_token_generation_url()
        if token_url:
            console.print(f'Create a token at: {token_url}')
            console.print('[dim]Then run: gush config set token <TOKEN>[/dim]')
        raise click.ClickException('Not authenticated')

    print_success(f'Authenticated as [bold]{adapter.username or "unknown"}[/bold] on {adapter.name}')

    if save and (username or token):
        config_values = load_config()
        if username:
            config_values['username'] = username
        if token:
            config_values['token'] = token
        config_values.setdefault('adapter', adapter.name)
        if save_config(config_values):
            console.print('[dim]Credentials saved.[/dim]')
