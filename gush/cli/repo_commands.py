# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Repository level commands: info, create, fork, labels, milestones.
"""

import click

from gush.cli.helpers import (
    console,
    echo_json,
    handle_adapter_errors,
    print_success,
    validate_repository,
)
from gush.cli.tables import build_repository_table


@click.group(name='repo')
def repo_group():
    """Repository commands.

    \b
    Commands:
        info        Show repository details
        create      Create a repository
        fork        Fork the current repository
        labels      List label names
        milestones  List milestone names
    """
    pass


@repo_group.command('info')
@click.argument('full_name', required=False, default=None)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def repo_info(obj, full_name, as_json):
    """Show repository details (defaults to the current repository).

    \b
    Arguments:
        FULL_NAME: org/repo (optional)
    """
    adapter = obj.adapter
    org, repo = validate_repository(full_name) if full_name else (adapter.org, adapter.repo)
    info = adapter.get_repository_info(org, repo)

    if as_json:
        echo_json(info.to_dict())
        return

    console.print(f'\n[bold cyan]{org}/{repo}[/bold cyan]\n')
    console.print(build_repository_table(info))


@repo_group.command('create')
@click.argument('name')
@click.option('--description', '-d', default='', help='Repository description')
@click.option('--homepage', default='', help='Project homepage URL')
@click.option('--private', is_flag=True, help='Create a private repository')
@click.option('--organization', '-o', default=None, help='Create under this organization instead of the user')
@click.option('--no-issues', is_flag=True, help='Disable the issue tracker')
@click.option('--wiki', is_flag=True, help='Enable the wiki')
@click.option('--downloads', is_flag=True, help='Enable downloads')
@click.option('--team-id', type=int, default=0, help='Team granted access (organization repositories)')
@click.option('--no-init', is_flag=True, help='Do not create an initial commit')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def repo_create(
    obj, name, description, homepage, private, organization, no_issues, wiki, downloads, team_id, no_init, as_json
):
    """Create a new repository.

    \b
    Examples:
        gush repo create widget --description "A widget"
        gush repo create widget --organization acme --private
    """
    info = obj.adapter.create_repo(
        name,
        description,
        homepage,
        public=not private,
        organization=organization,
        has_issues=not no_issues,
        has_wiki=wiki,
        has_downloads=downloads,
        team_id=team_id,
        auto_init=not no_init,
    )

    if as_json:
        echo_json(info.to_dict())
        return

    print_success(f'Repository created: {info.html_url}')
    if info.push_url:
        console.print(f'[dim]Push URL: {info.push_url}[/dim]')


@repo_group.command('fork')
@click.option('--target-org', default=None, help='Organization to fork into (default: your username)')
@click.pass_obj
@handle_adapter_errors
def repo_fork(obj, target_org):
    """Fork the current repository."""
    adapter = obj.adapter
    org = target_org or adapter.username
    if not org:
        raise click.UsageError('No target organization given and no username configured. Use --target-org.')

    result = adapter.create_fork(org)
    print_success(f'Forked {adapter.full_name} into {org}')
    console.print(f'Web: {result.html_url}')
    console.print(f'Git: {result.git_url}')


@repo_group.command('labels')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def repo_labels(obj, as_json):
    """List the repository label names."""
    labels = obj.adapter.get_labels()
    if as_json:
        echo_json(labels)
        return
    if not labels:
        console.print('[yellow]No labels found.[/yellow]')
        return
    for label in labels:
        click.echo(label)


@repo_group.command('milestones')
@click.option('--state', default=None, help='Only milestones in this provider state (e.g. open, closed)')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def repo_milestones(obj, state, as_json):
    """List the repository milestone names."""
    milestones = obj.adapter.get_milestones({'state': state} if state else None)
    if as_json:
        echo_json(milestones)
        return
    if not milestones:
        console.print('[yellow]No milestones found.[/yellow]')
        return
    for milestone in milestones:
        click.echo(milestone)


def register_repo_commands(cli):
    """Register repository commands with a parent CLI group."""
    cli.add_command(repo_group)
