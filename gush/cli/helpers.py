# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared helper functions for gush commands
"""

import functools
import json
import logging
import re
import sys
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import click
from rich.console import Console

from gush.adapter import AdapterError, create_adapter, detect_adapter_name
from gush.adapter.base import Adapter
from gush.constants import DEFAULT_BASE_BRANCH, DEFAULT_REMOTE
from gush.utils.git import GitError, GitHelper, parse_remote_url
from gush.utils.utils import parse_repo_name

REPO_PATTERN = re.compile(r'^[a-zA-Z0-9._-]+(/[a-zA-Z0-9._-]+)+$')
DEFAULT_ADAPTER = 'github'

console = Console()
logger = logging.getLogger(__name__)


def print_success(message: str) -> None:
    """Print a standardized success message."""
    console.print(f'\n  [green]✓[/green] {message}\n')


def print_error(message: str) -> None:
    """Print a standardized error message."""
    console.print(f'\n  [red]✗[/red] {message}\n')


def print_warning(message: str) -> None:
    console.print(f'[yellow]Warning: {message}[/yellow]')


def _is_interactive() -> bool:
    """Return True if stdin is a TTY (interactive session)."""
    return getattr(sys.stdin, 'isatty', lambda: False)()


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def echo_json(data: Any) -> None:
    """Write records as JSON to stdout (no Rich markup, safe for piping)."""
    click.echo(json.dumps(data, indent=2, default=_json_default))


def validate_repository(repo: str, param_hint: str = 'ORG/REPO') -> Tuple[str, str]:
    """Validate org/repo format (GitLab subgroups allowed).

    Returns (org, repo_name) on success.
    Raises click.BadParameter on failure.
    """
    repo = repo.strip()
    if not REPO_PATTERN.match(repo):
        raise click.BadParameter(
            f"Repository must be in org/repo format with alphanumeric characters, "
            f"hyphens, underscores, or dots (got '{repo}')",
            param_hint=param_hint,
        )
    return parse_repo_name(repo)


def handle_adapter_errors(func):
    """Turn adapter and git failures into a one-line CLI error (exit code 1)."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except AdapterError as e:
            logger.debug('Adapter call failed', exc_info=True)
            raise click.ClickException(str(e))
        except GitError as e:
            logger.debug('git call failed', exc_info=True)
            raise click.ClickException(f'git: {e}')

    return wrapper


class CliContext:
    """
    Per-invocation state shared by all commands (``ctx.obj``).

    The adapter is created lazily on first use so commands that never talk to
    a provider (config, branch sync) work outside a configured checkout.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        org: Optional[str] = None,
        repo: Optional[str] = None,
        adapter_name: Optional[str] = None,
        git: Optional[GitHelper] = None,
        adapter: Optional[Adapter] = None,
    ):
        self.config: Dict[str, Any] = dict(config or {})
        self.org = org
        self.repo = repo
        self.adapter_name = adapter_name
        self.git = git or GitHelper()
        self._adapter = adapter

    def apply_options(self, org: Optional[str], repo: Optional[str], adapter_name: Optional[str]) -> None:
        """Global CLI options win over everything already resolved."""
        if org:
            self.org = org
        if repo:
            self.repo = repo
        if adapter_name:
            self.adapter_name = adapter_name

    @property
    def base_branch(self) -> str:
        return self.config.get('base') or DEFAULT_BASE_BRANCH

    @property
    def remote(self) -> str:
        return self.config.get('remote') or DEFAULT_REMOTE

    def resolve_repository(self) -> Tuple[str, str, str]:
        """
        Work out (adapter_name, org, repo) for this invocation.

        Missing pieces come from the git remote; the adapter name falls back to
        the configured one, then to host detection, then to GitHub.
        """
        org, repo = self.org, self.repo
        adapter_name = self.adapter_name or self.config.get('adapter')

        remote_url = None
        if not (org and repo and adapter_name):
            try:
                remote_url = self.git.get_remote_url(self.remote)
            except GitError as e:
                if not (org and repo):
                    raise click.UsageError(
                        f'Could not read the "{self.remote}" remote ({e}). Pass --org and --repo explicitly.'
                    )

        if remote_url and not (org and repo):
            try:
                _, remote_org, remote_repo = parse_remote_url(remote_url)
            except ValueError as e:
                raise click.UsageError(f'{e}. Pass --org and --repo explicitly.')
            org = org or remote_org
            repo = repo or remote_repo

        if not adapter_name and remote_url:
            adapter_name = detect_adapter_name(remote_url, self.config)
            if adapter_name:
                logger.info(f'Detected {adapter_name} from remote {remote_url}')

        return adapter_name or DEFAULT_ADAPTER, org, repo

    @property
    def adapter(self) -> Adapter:
        if self._adapter is None:
            adapter_name, org, repo = self.resolve_repository()
            try:
                self._adapter = create_adapter(adapter_name, org, repo, self.config)
            except AdapterError as e:
                raise click.UsageError(str(e))
            logger.debug(f'Using {self._adapter!r}')
        return self._adapter
