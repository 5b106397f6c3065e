# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
GitHub (and GitHub Enterprise) adapter over the REST v3 API.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from gush.adapter.base import Capability
from gush.adapter.exceptions import AdapterError, ConflictError, UnauthorizedError
from gush.adapter.rest import RestAdapter, login_of
from gush.classes import (
    AssetState,
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
from gush.constants import BASE_GITHUB_API_URL, GITHUB_UPLOADS_URL, GITHUB_WEB_URL
from gush.utils.utils import parse_datetime, parse_head

logger = logging.getLogger(__name__)

# Keys of update_pull_request that go through the issues endpoint
_ISSUE_FIELDS = ('title', 'body', 'state', 'labels', 'milestone', 'assignee', 'assignees')


def make_headers(token: Optional[str]) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a PAT.

    Args:
        token (str): Github pat
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def _pull_request_ref(data: Optional[Dict[str, Any]], with_label: bool) -> PullRequestRef:
    if not data:
        return PullRequestRef()
    return PullRequestRef(
        ref=data.get('ref'),
        sha=data.get('sha'),
        user=login_of(data.get('user')),
        repo=(data.get('repo') or {}).get('name'),
        label=data.get('ref') if with_label else None,
    )


def _pull_request_from_response(data: Dict[str, Any]) -> PullRequest:
    milestone = data.get('milestone') or {}
    return PullRequest(
        number=int(data['number']),
        url=data.get('html_url'),
        state=data.get('state'),
        title=data.get('title'),
        body=data.get('body'),
        labels=[label['name'] for label in data.get('labels') or []],
        milestone=milestone.get('title'),
        created_at=parse_datetime(data.get('created_at')),
        updated_at=parse_datetime(data.get('updated_at')),
        user=login_of(data.get('user')),
        assignee=login_of(data.get('assignee')),
        merge_commit=data.get('merge_commit_sha'),
        merged=bool(data.get('merged') or data.get('merged_at')),
        merged_by=login_of(data.get('merged_by')),
        head=_pull_request_ref(data.get('head'), with_label=False),
        base=_pull_request_ref(data.get('base'), with_label=True),
    )


def _release_from_response(data: Dict[str, Any]) -> Release:
    return Release(
        id=data['id'],
        url=data.get('html_url'),
        name=data.get('name'),
        tag_name=data.get('tag_name'),
        body=data.get('body'),
        draft=bool(data.get('draft')),
        prerelease=bool(data.get('prerelease')),
        created_at=parse_datetime(data.get('created_at')),
        published_at=parse_datetime(data.get('published_at')),
        user=login_of(data.get('author')),
    )


def _asset_from_response(data: Dict[str, Any]) -> ReleaseAsset:
    state = data.get('state')
    return ReleaseAsset(
        id=data['id'],
        url=data.get('url'),
        name=data.get('name'),
        label=data.get('label'),
        state=AssetState(state) if state in {s.value for s in AssetState} else None,
        content_type=data.get('content_type'),
        size=data.get('size'),
        created_at=parse_datetime(data.get('created_at')),
        updated_at=parse_datetime(data.get('updated_at')),
        uploader=login_of(data.get('uploader')),
    )


class GitHubAdapter(RestAdapter):
    """Adapter for github.com, or a GitHub Enterprise host via ``api_url``/``web_url``."""

    name = 'github'
    DEFAULT_API_URL = BASE_GITHUB_API_URL
    DEFAULT_WEB_URL = GITHUB_WEB_URL
    CAPABILITIES = frozenset(
        {
            Capability.LABELS,
            Capability.MILESTONES,
            Capability.RELEASES,
            Capability.RELEASE_ASSETS,
            Capability.SWITCH_BASE,
        }
    )
    PULL_REQUEST_STATES = ('open', 'closed', 'all')

    def __init__(self, org, repo, config=None, session=None):
        super().__init__(org, repo, config, session)
        if self.api_url == BASE_GITHUB_API_URL:
            default_uploads = GITHUB_UPLOADS_URL
        else:
            # GitHub Enterprise serves uploads next to the API
            default_uploads = self.api_url.replace('/api/v3', '/api/uploads')
        self.uploads_url = (self.config.get('uploads_url') or default_uploads).rstrip('/')

    def _configure_auth(self, session: requests.Session) -> None:
        session.headers.update(make_headers(self.token))

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.org}/{self.repo}"

    def _fetch_authenticated_user(self) -> Optional[str]:
        if not self.token:
            raise UnauthorizedError('No GitHub token configured')
        user = self._get('/user', 'Fetching authenticated user')
        return login_of(user)

    def get_token_generation_url(self) -> Optional[str]:
        return f"{self.web_url}/settings/tokens"

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_fork(self, org: str) -> ForkResult:
        payload = {'organization': org} if org and org != self.username else {}
        data = self._post(f"{self._repo_path}/forks", f"Forking {self.full_name}", payload)
        return ForkResult(git_url=data.get('ssh_url'), html_url=data.get('html_url'))

    def get_repository_info(self, org: str, repo: str) -> RepositoryInfo:
        data = self._get(f"/repos/{org}/{repo}", f"Fetching repository {org}/{repo}")
        parent = data.get('parent')
        fork_origin = None
        if parent:
            fork_origin = ForkOrigin(org=login_of(parent.get('owner')), repo=parent.get('name'))
        return RepositoryInfo(
            owner=login_of(data.get('owner')),
            html_url=data.get('html_url'),
            fetch_url=data.get('clone_url'),
            push_url=data.get('ssh_url'),
            is_fork=bool(data.get('fork')),
            is_private=bool(data.get('private')),
            fork_origin=fork_origin,
        )

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
        payload: Dict[str, Any] = {
            'name': name,
            'description': description,
            'homepage': homepage,
            'private': not public,
            'has_issues': has_issues,
            'has_wiki': has_wiki,
            'has_downloads': has_downloads,
            'auto_init': auto_init,
        }
        if organization and team_id:
            payload['team_id'] = team_id
        path = f"/orgs/{organization}/repos" if organization else '/user/repos'
        data = self._post(path, f"Creating repository {name}", payload)
        return RepositoryInfo(
            owner=login_of(data.get('owner')),
            html_url=data.get('html_url'),
            fetch_url=data.get('clone_url'),
            push_url=data.get('ssh_url'),
            is_fork=False,
            is_private=bool(data.get('private')),
            fork_origin=None,
        )

    # ------------------------------------------------------------------
    # Comments, labels, milestones
    # ------------------------------------------------------------------

    def create_comment(self, id: int, message: str) -> Optional[str]:
        data = self._post(f"{self._repo_path}/issues/{id}/comments", f"Commenting on #{id}", {'body': message})
        return (data or {}).get('html_url')

    def get_comments(self, id: int) -> List[Comment]:
        data = self._get(f"{self._repo_path}/issues/{id}/comments", f"Fetching comments of #{id}")
        return [
            Comment(
                id=comment['id'],
                url=comment.get('html_url'),
                body=comment.get('body'),
                user=login_of(comment.get('user')),
                created_at=parse_datetime(comment.get('created_at')),
                updated_at=parse_datetime(comment.get('updated_at')),
            )
            for comment in data or []
        ]

    def get_labels(self) -> List[str]:
        data = self._get(f"{self._repo_path}/labels", 'Fetching labels')
        return [label['name'] for label in data or []]

    def get_milestones(self, parameters: Optional[Dict[str, Any]] = None) -> List[str]:
        data = self._get(f"{self._repo_path}/milestones", 'Fetching milestones', params=parameters or None)
        return [milestone['title'] for milestone in data or []]

    def _milestone_number(self, milestone: Any) -> Any:
        """Resolve a milestone title to its number; numbers and None pass through."""
        if milestone is None or isinstance(milestone, int) or str(milestone).isdigit():
            return milestone
        data = self._get(f"{self._repo_path}/milestones", 'Fetching milestones', params={'state': 'all'})
        for entry in data or []:
            if entry.get('title') == milestone:
                return entry['number']
        raise AdapterError(f"Milestone '{milestone}' does not exist in {self.full_name}")

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def open_pull_request(self, base, head, subject, body, parameters=None) -> PullRequestLink:
        parameters = dict(parameters or {})
        try:
            head_org, head_branch = parse_head(head, default_org=self.org)
        except ValueError as e:
            raise AdapterError(str(e)) from e

        payload: Dict[str, Any] = {'base': base, 'head': f"{head_org}:{head_branch}"}
        if 'issue' in parameters:
            # Turns the issue into a pull request, keeping its title and comments
            payload['issue'] = int(parameters.pop('issue'))
        else:
            payload['title'] = subject
            payload['body'] = body
        payload.update(parameters)

        data = self._post(f"{self._repo_path}/pulls", f"Opening pull request {head} -> {base}", payload)
        return PullRequestLink(html_url=data.get('html_url'), number=int(data['number']))

    def get_pull_request(self, id: int) -> PullRequest:
        data = self._get(f"{self._repo_path}/pulls/{id}", f"Fetching pull request #{id}")
        return _pull_request_from_response(data)

    def get_pull_request_commits(self, id: int) -> List[Commit]:
        data = self._get(f"{self._repo_path}/pulls/{id}/commits", f"Fetching commits of #{id}")
        commits = []
        for entry in data or []:
            commit = entry.get('commit') or {}
            user = login_of(entry.get('author')) or (commit.get('author') or {}).get('name')
            commits.append(Commit(sha=entry['sha'], message=commit.get('message'), user=user))
        return commits

    def merge_pull_request(self, id: int, message: str) -> str:
        data = self._put(f"{self._repo_path}/pulls/{id}/merge", f"Merging #{id}", {'commit_message': message})
        if not data or not data.get('merged'):
            raise ConflictError(f"Merging #{id} failed: {(data or {}).get('message', 'not merged')}")
        return data['sha']

    def update_pull_request(self, id: int, parameters: Dict[str, Any]) -> None:
        payload = {key: value for key, value in parameters.items() if key in _ISSUE_FIELDS}
        if 'milestone' in payload:
            payload['milestone'] = self._milestone_number(payload['milestone'])
        if payload:
            self._patch(f"{self._repo_path}/issues/{id}", f"Updating #{id}", payload)

        extra = {key: value for key, value in parameters.items() if key not in _ISSUE_FIELDS}
        if extra:
            self._patch(f"{self._repo_path}/pulls/{id}", f"Updating #{id}", extra)

    def _change_pull_request_base(self, pr_number: int, new_base: str) -> PullRequestLink:
        data = self._patch(
            f"{self._repo_path}/pulls/{pr_number}", f"Switching base of #{pr_number}", {'base': new_base}
        )
        return PullRequestLink(html_url=data.get('html_url'), number=int(data['number']))

    def close_pull_request(self, id: int) -> None:
        pull_request = self.get_pull_request(id)
        if pull_request.state == 'closed':
            raise ConflictError(f"Pull request #{id} is already closed")
        self._patch(f"{self._repo_path}/pulls/{id}", f"Closing #{id}", {'state': 'closed'})

    def _list_pull_requests(self, state, page, per_page) -> List[PullRequest]:
        params: Dict[str, Any] = {'page': page, 'per_page': per_page}
        if state:
            params['state'] = state
        data = self._get(f"{self._repo_path}/pulls", 'Listing pull requests', params=params)
        return [_pull_request_from_response(entry) for entry in data or []]

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def create_release(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ReleaseLink:
        payload = {'tag_name': name, 'name': name}
        payload.update(parameters or {})
        data = self._post(f"{self._repo_path}/releases", f"Creating release {name}", payload)
        return ReleaseLink(url=data.get('html_url'), id=data['id'])

    def create_release_assets(self, id: RecordId, name: str, content_type: str, content: bytes) -> RecordId:
        response = self._request(
            'POST',
            f"{self.uploads_url}{self._repo_path}/releases/{id}/assets",
            f"Uploading {name}",
            params={'name': name},
            data=content,
            headers={'Content-Type': content_type},
        )
        return response.json()['id']

    def get_releases(self) -> List[Release]:
        data = self._get(f"{self._repo_path}/releases", 'Fetching releases')
        return [_release_from_response(entry) for entry in data or []]

    def get_release_assets(self, id: RecordId) -> List[ReleaseAsset]:
        data = self._get(f"{self._repo_path}/releases/{id}/assets", f"Fetching assets of release {id}")
        return [_asset_from_response(entry) for entry in data or []]

    def remove_release(self, id: RecordId) -> None:
        self._delete(f"{self._repo_path}/releases/{id}", f"Removing release {id}")
