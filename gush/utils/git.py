# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Thin wrapper around the local ``git`` executable.
"""

import logging
import os
import re
import subprocess
from typing import List, Optional, Tuple
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

# git@host:org/repo(.git)
_SCP_LIKE_URL = re.compile(r'^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>[^/].*)$')


class GitError(RuntimeError):
    """Raised when a git invocation fails."""


def parse_remote_url(remote_url: str) -> Tuple[str, str, str]:
    """Split a git remote URL into (host, org, repo).

    Accepts HTTPS (``https://github.com/org/repo.git``), SSH
    (``ssh://git@host:22/org/repo``) and scp-like (``git@host:org/repo.git``)
    notations. Nested GitLab groups are kept in ``org`` (``group/subgroup``).

    Raises:
        ValueError: If the URL cannot be parsed.
    """
    url = (remote_url or '').strip()
    if not url:
        raise ValueError('Remote URL cannot be empty')

    if '://' in url:
        parsed = urlparse(url)
        host = parsed.hostname or ''
        path = parsed.path
    else:
        match = _SCP_LIKE_URL.match(url)
        if not match:
            raise ValueError(f"Unrecognized remote URL '{remote_url}'")
        host = match.group('host')
        path = match.group('path')

    path = path.strip('/')
    if path.endswith('.git'):
        path = path[: -len('.git')]
    parts = [part for part in path.split('/') if part]
    if not host or len(parts) < 2:
        raise ValueError(f"Remote URL '{remote_url}' does not point to an org/repo")

    return host.lower(), '/'.join(parts[:-1]), parts[-1]


class GitHelper:
    """Runs git commands inside one working copy."""

    def __init__(self, repo_path: Optional[str] = None):
        self.repo_path = repo_path or os.getcwd()

    def _run_git_command(self, args: List[str]) -> str:
        """Run a git command and return its stripped stdout."""
        cmd = ['git'] + args
        try:
            result = subprocess.run(cmd, cwd=self.repo_path, capture_output=True, text=True, check=True)
        except FileNotFoundError as e:
            raise GitError('git executable not found') from e
        except subprocess.CalledProcessError as e:
            stderr = (e.stderr or '').strip()
            logger.debug(f"Git command failed: {' '.join(cmd)}, Error: {stderr}")
            raise GitError(stderr or f"git {' '.join(args)} failed with exit code {e.returncode}") from e
        return result.stdout.strip()

    def get_active_branch_name(self) -> str:
        branch = self._run_git_command(['rev-parse', '--abbrev-ref', 'HEAD'])
        if branch == 'HEAD':
            raise GitError('Not on a branch (detached HEAD)')
        return branch

    def get_remote_url(self, remote: str = 'origin') -> str:
        return self._run_git_command(['remote', 'get-url', remote])

    def get_first_commit_title(self, base: str, branch: str) -> str:
        """Subject of the oldest commit on ``branch`` that is not on ``base``; empty if none."""
        output = self._run_git_command(['log', '--reverse', '--format=%s', f'{base}..{branch}'])
        return output.splitlines()[0] if output else ''

    def is_working_tree_clean(self) -> bool:
        return self._run_git_command(['status', '--porcelain', '--untracked-files=no']) == ''

    def sync_with_remote(self, remote: str, branch: str) -> None:
        """Fetch ``remote`` and hard-reset the local ``branch`` to its upstream version.

        Refuses to run when the working tree has staged or uncommitted changes.
        """
        if not self.is_working_tree_clean():
            raise GitError('Working tree is not clean, commit or stash your changes before syncing')
        current = self.get_active_branch_name()
        self._run_git_command(['fetch', remote])
        if current != branch:
            self._run_git_command(['checkout', branch])
        try:
            self._run_git_command(['reset', '--hard', f'{remote}/{branch}'])
        finally:
            if current != branch:
                self._run_git_command(['checkout', current])
        logger.info(f"Synced {branch} with {remote}/{branch}")
