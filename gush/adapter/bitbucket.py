# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Bitbucket Cloud adapter over the REST 2.0 API.

Bitbucket has no labels on pull requests and no releases; those operations
answer with empty lists or ``UnsupportedOperationError``.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from gush.adapter.base import Capability
from gush.adapter.exceptions import AdapterError, ConflictError, UnauthorizedError, UnsupportedOperationError
from gush.adapter.rest import RestAdapter, login_of, split_full_name
from gush.classes import (
    Comment,
    Commit,
    ForkOrigin,
    ForkResult,
    PullRequest,
    PullRequestLink,
    PullRequestRef,
    RecordId,
    Release,
    ReleaseAsset,
    ReleaseLink,
    RepositoryInfo,
)
from gush.constants import BASE_BITBUCKET_API_URL, BITBUCKET_WEB_URL
from gush.utils.utils import parse_datetime, parse_head

logger = logging.getLogger(__name__)

_USER_KEYS = ('nickname', 'username', 'display_name')


def _html_link(data: Optional[Dict[str, Any]]) -> Optional[str]:
    return (((data or {}).get('links') or {}).get('html') or {}).get('href')


def _clone_link(data: Dict[str, Any], protocol: str) -> Optional[str]:
    for link in (data.get('links') or {}).get('clone') or []:
        if link.get('name') == protocol:
            return link.get('href')
    return None


def _pull_request_ref(side: Optional[Dict[str, Any]], with_label: bool) -> PullRequestRef:
    side = side or {}
    branch = (side.get('branch') or {}).get('name')
    user, repo = split_full_name((side.get('repository') or {}).get('full_name'))
    return PullRequestRef(
        ref=branch,
        sha=(side.get('commit') or {}).get('hash'),
        user=user,
        repo=repo,
        label=branch if with_label else None,
    )


def _pull_request_from_response(data: Dict[str, Any]) -> PullRequest:
    state = (data.get('state') or '').lower() or None
    merged = state == 'merged'
    return PullRequest(
        number=int(data['id']),
        url=_html_link(data),
        state=state,
        title=data.get('title'),
        body=data.get('description'),
        labels=[],
        milestone=None,
        created_at=parse_datetime(data.get('created_on')),
        updated_at=parse_datetime(data.get('updated_on')),
        user=login_of(data.get('author'), *_USER_KEYS),
        assignee=None,
        merge_commit=(data.get('merge_commit') or {}).get('hash'),
        merged=merged,
        merged_by=login_of(data.get('closed_by'), *_USER_KEYS) if merged else None,
        head=_pull_request_ref(data.get('source'), with_label=False),
        base=_pull_request_ref(data.get('destination'), with_label=True),
    )


class BitbucketAdapter(RestAdapter):
    """Adapter for bitbucket.org, authenticating with username + app password."""

    name = 'bitbucket'
    DEFAULT_API_URL = BASE_BITBUCKET_API_URL
    DEFAULT_WEB_URL = BITBUCKET_WEB_URL
    CAPABILITIES = frozenset({Capability.MILESTONES, Capability.SWITCH_BASE})
    PULL_REQUEST_STATES = ('open', 'merged', 'declined', 'superseded')

    def _configure_auth(self, session: requests.Session) -> None:
        if self.username and self.token:
            session.auth = (self.username, self.token)
        elif self.token:
            # Repository/workspace access tokens
            session.headers.update({'Authorization': f"Bearer {self.token}"})

    @property
    def _repo_path(self) -> str:
        return f"/repositories/{self.org}/{self.repo}"

    def _values(self, path: str, context: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Entries of one page of a paginated Bitbucket collection."""
        return (self._get(path, context, params=params) or {}).get('values') or []

    def _fetch_authenticated_user(self) -> Optional[str]:
        if not self.token:
            raise UnauthorizedError('No Bitbucket app password configured')
        return login_of(self._get('/user', 'Fetching authenticated user'), 'username', 'nickname')

    def get_token_generation_url(self) -> Optional[str]:
        return f"{self.web_url}/account/settings/app-passwords/"

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_fork(self, org: str) -> ForkResult:
        payload = {'workspace': {'slug': org}} if org else {}
        data = self._post(f"{self._repo_path}/forks", f"Forking {self.full_name}", payload)
        return ForkResult(git_url=_clone_link(data, 'ssh'), html_url=_html_link(data))

    def _repository_info(self, data: Dict[str, Any]) -> RepositoryInfo:
        parent = data.get('parent')
        fork_origin = None
        if parent:
            origin_org, origin_repo = split_full_name(parent.get('full_name'))
            fork_origin = ForkOrigin(org=origin_org, repo=origin_repo)
        owner = (data.get('workspace') or {}).get('slug') or login_of(data.get('owner'), *_USER_KEYS)
        return RepositoryInfo(
            owner=owner,
            html_url=_html_link(data),
            fetch_url=_clone_link(data, 'https'),
            push_url=_clone_link(data, 'ssh'),
            is_fork=parent is not None,
            is_private=bool(data.get('is_private')),
            fork_origin=fork_origin,
        )

    def get_repository_info(self, org: str, repo: str) -> RepositoryInfo:
        data = self._get(f"/repositories/{org}/{repo}", f"Fetching repository {org}/{repo}")
        return self._repository_info(data)

    def create_repo(
        self,
        name,
        description,
        homepage,
        public=True,
        organization=None,
        has_issues=True,
        has_wiki=False,
        has_downloads=False,
        team_id=0,
        auto_init=True,
    ) -> RepositoryInfo:
        workspace = organization or self.username
        if not workspace:
            raise AdapterError('Creating a Bitbucket repository needs an organization or a configured username')
        payload = {
            'scm': 'git',
            'is_private': not public,
            'description': description,
            'website': homepage,
            'has_issues': has_issues,
            'has_wiki': has_wiki,
        }
        data = self._post(
            f"/repositories/{workspace}/{name.lower()}", f"Creating repository {workspace}/{name}", payload
        )
        return self._repository_info(data)

    # ------------------------------------------------------------------
    # Comments, labels, milestones
    # ------------------------------------------------------------------

    def create_comment(self, id: int, message: str) -> Optional[str]:
        data = self._post(
            f"{self._repo_path}/pullrequests/{id}/comments", f"Commenting on #{id}", {'content': {'raw': message}}
        )
        return _html_link(data)

    def get_comments(self, id: int) -> List[Comment]:
        entries = self._values(f"{self._repo_path}/pullrequests/{id}/comments", f"Fetching comments of #{id}")
        return [
            Comment(
                id=comment['id'],
                url=_html_link(comment),
                body=(comment.get('content') or {}).get('raw'),
                user=login_of(comment.get('user'), *_USER_KEYS),
                created_at=parse_datetime(comment.get('created_on')),
                updated_at=parse_datetime(comment.get('updated_on')),
            )
            for comment in entries
            if not comment.get('deleted')
        ]

    def get_labels(self) -> List[str]:
        return []

    def get_milestones(self, parameters: Optional[Dict[str, Any]] = None) -> List[str]:
        entries = self._values(f"{self._repo_path}/milestones", 'Fetching milestones', params=parameters or None)
        return [milestone['name'] for milestone in entries]

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def open_pull_request(self, base, head, subject, body, parameters=None) -> PullRequestLink:
        parameters = dict(parameters or {})
        try:
            head_org, head_branch = parse_head(head, default_org=self.org)
        except ValueError as e:
            raise AdapterError(str(e)) from e

        issue = parameters.pop('issue', None)
        if issue:
            subject = subject or f"Issue #{issue}"
            body = f"{body}\n\nFixes #{issue}".strip()

        payload: Dict[str, Any] = {
            'title': subject,
            'description': body,
            'source': {
                'branch': {'name': head_branch},
                'repository': {'full_name': f"{head_org}/{self.repo}"},
            },
            'destination': {'branch': {'name': base}},
        }
        payload.update(parameters)

        data = self._post(f"{self._repo_path}/pullrequests", f"Opening pull request {head} -> {base}", payload)
        return PullRequestLink(html_url=_html_link(data), number=int(data['id']))

    def get_pull_request(self, id: int) -> PullRequest:
        data = self._get(f"{self._repo_path}/pullrequests/{id}", f"Fetching pull request #{id}")
        return _pull_request_from_response(data)

    def get_pull_request_commits(self, id: int) -> List[Commit]:
        commits = []
        for entry in self._values(f"{self._repo_path}/pullrequests/{id}/commits", f"Fetching commits of #{id}"):
            author = entry.get('author') or {}
            commits.append(
                Commit(
                    sha=entry['hash'],
                    message=entry.get('message'),
                    user=login_of(author.get('user'), *_USER_KEYS) or author.get('raw'),
                )
            )
        return commits

    def merge_pull_request(self, id: int, message: str) -> str:
        data = self._post(f"{self._repo_path}/pullrequests/{id}/merge", f"Merging #{id}", {'message': message})
        sha = ((data or {}).get('merge_commit') or {}).get('hash')
        if not sha:
            raise ConflictError(f"Merging #{id} failed: pull request is {(data or {}).get('state', 'not merged')}")
        return sha

    def update_pull_request(self, id: int, parameters: Dict[str, Any]) -> None:
        parameters = dict(parameters)
        unsupported = sorted(key for key in ('labels', 'milestone', 'assignee') if key in parameters)
        if unsupported:
            raise UnsupportedOperationError(f"Bitbucket pull requests have no {', '.join(unsupported)}")

        state = parameters.pop('state', None)
        payload: Dict[str, Any] = {}
        for key, value in parameters.items():
            payload['description' if key == 'body' else key] = value
        if payload:
            self._put(f"{self._repo_path}/pullrequests/{id}", f"Updating #{id}", payload)

        if state == 'closed':
            self._post(f"{self._repo_path}/pullrequests/{id}/decline", f"Declining #{id}")
        elif state is not None:
            raise AdapterError(f"Cannot change pull request state to '{state}'")

    def _change_pull_request_base(self, pr_number: int, new_base: str) -> PullRequestLink:
        data = self._put(
            f"{self._repo_path}/pullrequests/{pr_number}",
            f"Switching destination of #{pr_number}",
            {'destination': {'branch': {'name': new_base}}},
        )
        return PullRequestLink(html_url=_html_link(data), number=int(data['id']))

    def close_pull_request(self, id: int) -> None:
        pull_request = self.get_pull_request(id)
        if pull_request.state != 'open':
            raise ConflictError(f"Pull request #{id} is already {pull_request.state}")
        self._post(f"{self._repo_path}/pullrequests/{id}/decline", f"Declining #{id}")

    def _list_pull_requests(self, state, page, per_page) -> List[PullRequest]:
        params: Dict[str, Any] = {'page': page, 'pagelen': per_page}
        if state:
            params['state'] = state.upper()
        entries = self._values(f"{self._repo_path}/pullrequests", 'Listing pull requests', params=params)
        return [_pull_request_from_response(entry) for entry in entries]

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def create_release(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ReleaseLink:
        raise UnsupportedOperationError('Bitbucket does not support releases')

    def get_releases(self) -> List[Release]:
        return []

    def get_release_assets(self, id: RecordId) -> List[ReleaseAsset]:
        return []

    def remove_release(self, id: RecordId) -> None:
        raise UnsupportedOperationError('Bitbucket does not support releases')
