# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Reusable Rich table presets."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from rich import box
from rich.markup import escape
from rich.table import Table

from gush.classes import Comment, Commit, PullRequest, Release, ReleaseAsset, RepositoryInfo


@dataclass(frozen=True)
class TableTheme:
    box_style: box.Box
    header_style: str
    border_style: str
    show_lines: bool
    pad_edge: bool


TABLE_THEMES = {
    # Full wrapped grid
    'square': TableTheme(
        box_style=box.SQUARE,
        header_style='bold magenta',
        border_style='grey35',
        show_lines=True,
        pad_edge=True,
    ),
    # Minimal separators with a heavier header rule
    'minimal': TableTheme(
        box_style=box.MINIMAL_HEAVY_HEAD,
        header_style='bold white',
        border_style='grey50',
        show_lines=False,
        pad_edge=False,
    ),
}

DEFAULT_TABLE_THEME = 'minimal'

STATE_COLORS = {
    'open': 'green',
    'merged': 'magenta',
    'closed': 'red',
    'declined': 'red',
    'locked': 'dim',
    'superseded': 'dim',
}


def build_table(theme: str = DEFAULT_TABLE_THEME, **kwargs) -> Table:
    """Create a Rich table using a named visual theme."""
    preset = TABLE_THEMES.get(theme, TABLE_THEMES[DEFAULT_TABLE_THEME])
    params = {
        'box': preset.box_style,
        'header_style': preset.header_style,
        'border_style': preset.border_style,
        'show_lines': preset.show_lines,
        'pad_edge': preset.pad_edge,
    }
    params.update(kwargs)
    return Table(**params)


def _date(value: Optional[datetime]) -> str:
    return value.strftime('%Y-%m-%d') if value else 'N/A'


def _text(value: Optional[str], fallback: str = '') -> str:
    return escape(value) if value else fallback


def colorize_state(state: Optional[str]) -> str:
    """Wrap a pull request state with the appropriate Rich color tag."""
    if not state:
        return 'N/A'
    color = STATE_COLORS.get(state, 'white')
    return f'[{color}]{state}[/{color}]'


def build_pr_table(pull_requests: List[PullRequest]) -> Table:
    table = build_table(show_header=True)
    table.add_column('#', style='cyan', justify='right')
    table.add_column('Title', style='green', max_width=50)
    table.add_column('State')
    table.add_column('Author', style='yellow')
    table.add_column('Head → Base')
    table.add_column('Updated', style='magenta')

    for pr in pull_requests:
        head = pr.head.label or pr.head.ref or '?'
        table.add_row(
            str(pr.number),
            _text(pr.title, 'Untitled'),
            colorize_state(pr.state),
            _text(pr.user, 'N/A'),
            _text(f'{head} → {pr.base.ref or "?"}'),
            _date(pr.updated_at or pr.created_at),
        )

    return table


def build_pr_details_table(pr: PullRequest) -> Table:
    """Key/value view of a single pull request."""
    table = build_table(theme='square', show_header=False)
    table.add_column('Field', style='cyan')
    table.add_column('Value')

    table.add_row('Title', _text(pr.title, 'Untitled'))
    table.add_row('State', colorize_state(pr.state) + (' (merged)' if pr.merged and pr.state != 'merged' else ''))
    table.add_row('Author', _text(pr.user, 'N/A'))
    table.add_row('Head', _text(f'{pr.head.user or "?"}:{pr.head.ref or "?"}'))
    table.add_row('Base', _text(pr.base.ref, 'N/A'))
    table.add_row('Labels', _text(', '.join(pr.labels), '-'))
    table.add_row('Milestone', _text(pr.milestone, '-'))
    table.add_row('Assignee', _text(pr.assignee, '-'))
    table.add_row('Created', _date(pr.created_at))
    table.add_row('Updated', _date(pr.updated_at))
    if pr.merged:
        table.add_row('Merged by', _text(pr.merged_by, 'N/A'))
        table.add_row('Merge commit', _text(pr.merge_commit, 'N/A'))
    table.add_row('URL', _text(pr.url))
    return table


def build_repository_table(info: RepositoryInfo) -> Table:
    table = build_table(theme='square', show_header=False)
    table.add_column('Field', style='cyan')
    table.add_column('Value')

    table.add_row('Owner', _text(info.owner, 'N/A'))
    table.add_row('Visibility', 'private' if info.is_private else 'public')
    table.add_row('Fork of', _text(info.fork_origin.full_name) if info.fork_origin else '-')
    table.add_row('Web', _text(info.html_url))
    table.add_row('Fetch', _text(info.fetch_url))
    table.add_row('Push', _text(info.push_url))
    return table


def build_comment_table(comments: List[Comment]) -> Table:
    table = build_table(theme='square', show_header=True)
    table.add_column('Author', style='yellow')
    table.add_column('Date', style='magenta')
    table.add_column('Comment', max_width=70)

    for comment in comments:
        table.add_row(_text(comment.user, 'N/A'), _date(comment.created_at), _text(comment.body))

    return table


def build_commit_table(commits: List[Commit]) -> Table:
    table = build_table(show_header=True)
    table.add_column('SHA', style='cyan')
    table.add_column('Author', style='yellow')
    table.add_column('Title', style='green')

    for commit in commits:
        table.add_row(commit.sha[:8], _text(commit.user, 'N/A'), _text(commit.title))

    return table


def build_release_table(releases: List[Release]) -> Table:
    table = build_table(show_header=True)
    table.add_column('ID', style='cyan', justify='right')
    table.add_column('Tag', style='green')
    table.add_column('Name')
    table.add_column('Flags', style='yellow')
    table.add_column('Published', style='magenta')

    for release in releases:
        flags = [flag for flag, on in (('draft', release.draft), ('prerelease', release.prerelease)) if on]
        table.add_row(
            str(release.id),
            _text(release.tag_name, 'N/A'),
            _text(release.name),
            ', '.join(flags) or '-',
            _date(release.published_at or release.created_at),
        )

    return table


def format_size(size: Optional[int]) -> str:
    if size is None:
        return 'N/A'
    for unit in ('B', 'KB', 'MB'):
        if size < 1024:
            return f'{size:.0f} {unit}' if unit == 'B' else f'{size:.1f} {unit}'
        size = size / 1024
    return f'{size:.1f} GB'


def build_asset_table(assets: List[ReleaseAsset]) -> Table:
    table = build_table(show_header=True)
    table.add_column('ID', style='cyan', justify='right')
    table.add_column('Name', style='green')
    table.add_column('Type')
    table.add_column('Size', justify='right')
    table.add_column('State', style='yellow')

    for asset in assets:
        table.add_row(
            str(asset.id),
            _text(asset.name, 'N/A'),
            _text(asset.content_type, '-'),
            format_size(asset.size),
            asset.state.value if asset.state else '-',
        )

    return table
