# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Gush CLI - Main entry point

Usage:
    gush config              - Show/set CLI configuration
    gush auth                - Verify credentials
    gush repo ...            - Repository commands
    gush pr ...              - Pull request commands (alias: p)
    gush release ...         - Release commands (alias: r)
    gush branch ...          - Local branch commands (alias: b)
"""

import click

from gush import __version__
from gush.cli.auth_commands import auth
from gush.cli.branch_commands import register_branch_commands
from gush.cli.config_commands import register_config_commands, resolve_config
from gush.cli.helpers import CliContext
from gush.cli.pull_request_commands import register_pull_request_commands
from gush.cli.release_commands import register_release_commands
from gush.cli.repo_commands import register_repo_commands
from gush.constants import LOG_DIR
from gush.utils.logging import setup_logging


class AliasGroup(click.Group):
    """Click Group that supports command aliases without duplicate help entries."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._aliases = {}  # alias -> canonical name

    def add_alias(self, name, alias):
        """Register an alias for an existing command."""
        self._aliases[alias] = name

    def get_command(self, ctx, cmd_name):
        canonical = self._aliases.get(cmd_name, cmd_name)
        return super().get_command(ctx, canonical)

    def format_commands(self, ctx, formatter):
        """Write the help text, appending aliases to command descriptions."""
        alias_map = {}
        for alias, canonical in self._aliases.items():
            alias_map.setdefault(canonical, []).append(alias)

        commands = []
        for subcommand in self.list_commands(ctx):
            cmd = self.commands.get(subcommand)
            if cmd is None or cmd.hidden:
                continue
            help_text = cmd.get_short_help_str(limit=150)
            aliases = alias_map.get(subcommand)
            if aliases:
                subcommand = f'{subcommand}, {", ".join(sorted(aliases))}'
            commands.append((subcommand, help_text))

        if commands:
            with formatter.section('Commands'):
                formatter.write_dl(commands)


@click.group(cls=AliasGroup)
@click.version_option(version=__version__, prog_name='gush')
@click.option('--org', default=None, help='Repository organization/owner (default: from the git remote)')
@click.option('--repo', default=None, help='Repository name (default: from the git remote)')
@click.option(
    '--adapter',
    'adapter_name',
    type=click.Choice(['github', 'gitlab', 'bitbucket'], case_sensitive=False),
    default=None,
    help='Hosting provider (default: config, then detected from the remote)',
)
@click.option('-v', '--verbose', count=True, help='-v for info, -vv for debug output')
@click.pass_context
def cli(ctx, org, repo, adapter_name, verbose):
    """Gush - Work with pull requests and releases on GitHub, GitLab and Bitbucket"""
    setup_logging(verbose, log_dir=LOG_DIR)
    if ctx.obj is None:
        ctx.obj = CliContext(config=resolve_config())
    ctx.obj.apply_options(org, repo, adapter_name.lower() if adapter_name else None)


cli.add_command(auth)
register_config_commands(cli)
register_repo_commands(cli)
register_pull_request_commands(cli)
register_release_commands(cli)
register_branch_commands(cli)


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
