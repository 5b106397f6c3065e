# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Local branch maintenance.
"""

import click

from gush.cli.helpers import handle_adapter_errors, print_success


@click.group(name='branch')
def branch_group():
    """Local branch commands."""
    pass


@branch_group.command('sync')
@click.argument('branch', required=False, default=None)
@click.argument('remote', required=False, default=None)
@click.pass_obj
@handle_adapter_errors
def branch_sync(obj, branch, remote):
    """Sync a local branch with its remote version.

    Fetches REMOTE and hard-resets BRANCH to REMOTE/BRANCH, then returns to
    the branch that was checked out before.

    \b
    Examples:
        gush branch sync                 # active branch from origin
        gush branch sync master upstream
    """
    branch = branch or obj.git.get_active_branch_name()
    remote = remote or obj.remote

    obj.git.sync_with_remote(remote, branch)
    print_success(f'Branch "{branch}" has been synced with remote "{remote}".')


def register_branch_commands(cli):
    cli.add_command(branch_group)
    cli.add_alias('branch', 'b')
