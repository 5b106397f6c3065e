# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Pull request commands

Command structure:
    gush pr (alias: p)
        create                  Open a pull request from a branch
        show N                  Show one pull request
        list                    List pull requests
        states                  States accepted by ``list --state``
        merge N                 Merge a pull request
        close N                 Close a pull request
        update N                Change title, body, labels, milestone or assignee
        switch-base N BASE      Point a pull request at another base branch
        comment N MESSAGE       Comment on a pull request
        comments N              List comments
        commits N               List commits
"""

import logging

import click

from gush.cli.helpers import (
    _is_interactive,
    console,
    echo_json,
    handle_adapter_errors,
    print_success,
)
from gush.cli.tables import build_comment_table, build_commit_table, build_pr_details_table, build_pr_table
from gush.constants import DEFAULT_PER_PAGE
from gush.utils.git import GitError
from gush.utils.utils import format_head

logger = logging.getLogger(__name__)


@click.group(name='pr')
def pr_group():
    """Pull request commands.

    \b
    Commands:
        create        Open a pull request
        show          Show a pull request
        list          List pull requests
        states        Show the states list --state accepts
        merge         Merge a pull request
        close         Close a pull request
        update        Update a pull request
        switch-base   Switch the base branch
        comment       Add a comment
        comments      List comments
        commits       List commits
    """
    pass


def _suggest_title(obj, base: str, branch: str) -> str:
    try:
        return obj.git.get_first_commit_title(base, branch)
    except GitError as e:
        logger.debug(f'No commit title suggestion for {base}..{branch}: {e}')
        return ''


@pr_group.command('create')
@click.option('--base', default=None, help='Base branch to merge into (default: config "base" or master)')
@click.option('--source-org', default=None, help='Organization holding the source branch (default: your username)')
@click.option('--source-branch', default=None, help='Source branch (default: the active branch)')
@click.option('--issue', default=None, help='Issue the pull request resolves')
@click.option('--title', default=None, help='Pull request title (default: first commit title)')
@click.option('--body', default='', help='Pull request description')
@click.pass_obj
@handle_adapter_errors
def pr_create(obj, base, source_org, source_branch, issue, title, body):
    """Open a pull request from the current branch.

    With --issue the issue is turned into the pull request and supplies the
    title, so no title is asked for.

    \b
    Examples:
        gush pr create
        gush pr create --base develop --issue 42
        gush pr create --source-org alice --source-branch fix-typo --title "Fix typo"
    """
    adapter = obj.adapter
    base = base or obj.base_branch
    source_org = source_org or adapter.username or adapter.org
    source_branch = source_branch or obj.git.get_active_branch_name()

    if not title and not issue:
        suggested = _suggest_title(obj, base, source_branch)
        if _is_interactive():
            title = click.prompt('Title', default=suggested or None)
        else:
            title = suggested
        if not title:
            raise click.UsageError('A title is required. Pass --title.')

    parameters = {'issue': issue} if issue else {}
    head = format_head(source_org, source_branch)
    logger.info(f'Opening pull request {head} -> {base} on {adapter.full_name}')

    link = adapter.open_pull_request(base, head, title or '', body, parameters)
    click.echo(link.html_url or f'#{link.number}')


@pr_group.command('show')
@click.argument('number', type=int)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def pr_show(obj, number, as_json):
    """Show a single pull request."""
    pull_request = obj.adapter.get_pull_request(number)
    if as_json:
        echo_json(pull_request.to_dict())
        return

    console.print(f'\n[bold cyan]#{pull_request.number}[/bold cyan]\n')
    console.print(build_pr_details_table(pull_request))


@pr_group.command('list')
@click.option('--state', default=None, help='Filter by state (see "gush pr states")')
@click.option('--page', type=click.IntRange(min=1), default=1, show_default=True)
@click.option('--per-page', type=click.IntRange(min=1, max=100), default=DEFAULT_PER_PAGE, show_default=True)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def pr_list(obj, state, page, per_page, as_json):
    """List pull requests.

    \b
    Examples:
        gush pr list
        gush pr list --state closed --page 2
    """
    pull_requests = obj.adapter.get_pull_requests(state, page, per_page)
    if as_json:
        echo_json([pull_request.to_dict() for pull_request in pull_requests])
        return

    if not pull_requests:
        console.print('[yellow]No pull requests found.[/yellow]')
        return
    console.print(build_pr_table(pull_requests))


@pr_group.command('states')
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def pr_states(obj, as_json):
    """Show the pull request states the provider accepts."""
    states = obj.adapter.get_pull_request_states()
    if as_json:
        echo_json(states)
        return
    for state in states:
        click.echo(state)


@pr_group.command('merge')
@click.argument('number', type=int)
@click.option('--message', '-m', default=None, help='Merge commit message')
@click.pass_obj
@handle_adapter_errors
def pr_merge(obj, number, message):
    """Merge a pull request and print the merge commit."""
    sha = obj.adapter.merge_pull_request(number, message or f'Merge pull request #{number}')
    print_success(f'Merged #{number}')
    click.echo(sha)


@pr_group.command('close')
@click.argument('number', type=int)
@click.option('--message', '-m', default=None, help='Comment to leave before closing')
@click.pass_obj
@handle_adapter_errors
def pr_close(obj, number, message):
    """Close a pull request without merging it."""
    adapter = obj.adapter
    if message:
        adapter.create_comment(number, message)
    adapter.close_pull_request(number)
    print_success(f'Closed #{number}')


@pr_group.command('update')
@click.argument('number', type=int)
@click.option('--title', default=None)
@click.option('--body', default=None)
@click.option('--label', 'labels', multiple=True, help='Label to set (repeatable, replaces existing labels)')
@click.option('--milestone', default=None)
@click.option('--assignee', default=None)
@click.pass_obj
@handle_adapter_errors
def pr_update(obj, number, title, body, labels, milestone, assignee):
    """Update a pull request. Only the given options are changed.

    \b
    Examples:
        gush pr update 12 --title "Better title"
        gush pr update 12 --label bug --label urgent
    """
    parameters = {}
    if title is not None:
        parameters['title'] = title
    if body is not None:
        parameters['body'] = body
    if labels:
        parameters['labels'] = list(labels)
    if milestone is not None:
        parameters['milestone'] = milestone
    if assignee is not None:
        parameters['assignee'] = assignee

    if not parameters:
        raise click.UsageError(
            'Nothing to update. Pass at least one of --title, --body, --label, --milestone, --assignee.'
        )

    obj.adapter.update_pull_request(number, parameters)
    print_success(f'Updated #{number}: {", ".join(sorted(parameters))}')


@pr_group.command('switch-base')
@click.argument('number', type=int)
@click.argument('new_base')
@click.option('--head', 'new_head', default=None, help='New head as org:branch (default: the current head)')
@click.option('--force-new-pr', is_flag=True, help='Always open a replacement pull request')
@click.pass_obj
@handle_adapter_errors
def pr_switch_base(obj, number, new_base, new_head, force_new_pr):
    """Point a pull request at a different base branch.

    When the provider cannot retarget in place, a new pull request is opened
    and the old one is closed with a reference to it.

    \b
    Examples:
        gush pr switch-base 12 develop
        gush pr switch-base 12 develop --head alice:feature-rebased
    """
    adapter = obj.adapter
    if not new_head:
        current = adapter.get_pull_request(number)
        new_head = format_head(current.head.user or adapter.org, current.head.ref)

    link = adapter.switch_pull_request_base(number, new_base, new_head, force_new_pr)
    if link.number != number:
        print_success(f'#{number} was replaced by #{link.number}')
    else:
        print_success(f'#{number} now targets {new_base}')
    click.echo(link.html_url or f'#{link.number}')


@pr_group.command('comment')
@click.argument('number', type=int)
@click.argument('message')
@click.pass_obj
@handle_adapter_errors
def pr_comment(obj, number, message):
    """Comment on a pull request and print the comment URL."""
    url = obj.adapter.create_comment(number, message)
    click.echo(url or f'Commented on #{number}')


@pr_group.command('comments')
@click.argument('number', type=int)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def pr_comments(obj, number, as_json):
    """List the comments of a pull request."""
    comments = obj.adapter.get_comments(number)
    if as_json:
        echo_json([comment.to_dict() for comment in comments])
        return
    if not comments:
        console.print('[yellow]No comments.[/yellow]')
        return
    console.print(build_comment_table(comments))


@pr_group.command('commits')
@click.argument('number', type=int)
@click.option('--json', 'as_json', is_flag=True, help='Output as JSON for scripting')
@click.pass_obj
@handle_adapter_errors
def pr_commits(obj, number, as_json):
    """List the commits of a pull request."""
    commits = obj.adapter.get_pull_request_commits(number)
    if as_json:
        echo_json([commit.to_dict() for commit in commits])
        return
    if not commits:
        console.print('[yellow]No commits.[/yellow]')
        return
    console.print(build_commit_table(commits))


def register_pull_request_commands(cli):
    """Register pull request commands with the root CLI group."""
    cli.add_command(pr_group, name='pr')
    cli.add_alias('pr', 'p')
