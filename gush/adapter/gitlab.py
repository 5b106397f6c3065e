# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
GitLab adapter over the REST v4 API.

Pull requests map onto merge requests (numbered by ``iid``) and releases are
identified by their tag name.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

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
from gush.constants import BASE_GITLAB_API_URL, GITLAB_WEB_URL
from gush.utils.utils import parse_datetime, parse_head

logger = logging.getLogger(__name__)

# GitLab vocabulary -> normalized pull request state
_STATE_FROM_GITLAB = {'opened': 'open', 'closed': 'closed', 'merged': 'merged', 'locked': 'locked'}
_STATE_TO_GITLAB = {'open': 'opened', 'closed': 'closed', 'merged': 'merged', 'locked': 'locked', 'all': 'all'}
_STATE_EVENTS = {'closed': 'close', 'open': 'reopen'}


def project_id(org: str, repo: str) -> str:
    """URL-encoded 'namespace/project' path accepted wherever GitLab wants a project id."""
    return quote(f"{org}/{repo}", safe='')


class GitLabAdapter(RestAdapter):
    """Adapter for gitlab.com, or a self-managed instance via ``api_url``/``web_url``."""

    name = 'gitlab'
    DEFAULT_API_URL = BASE_GITLAB_API_URL
    DEFAULT_WEB_URL = GITLAB_WEB_URL
    CAPABILITIES = frozenset(
        {
            Capability.LABELS,
            Capability.MILESTONES,
            Capability.RELEASES,
            Capability.SWITCH_BASE,
        }
    )
    PULL_REQUEST_STATES = ('open', 'closed', 'merged', 'locked', 'all')

    def _configure_auth(self, session: requests.Session) -> None:
        if self.token:
            session.headers.update({'PRIVATE-TOKEN': self.token})

    @property
    def _project_path(self) -> str:
        return f"/projects/{project_id(self.org, self.repo)}"

    def _fetch_authenticated_user(self) -> Optional[str]:
        if not self.token:
            raise UnauthorizedError('No GitLab token configured')
        return login_of(self._get('/user', 'Fetching authenticated user'), 'username')

    def get_token_generation_url(self) -> Optional[str]:
        return f"{self.web_url}/-/user_settings/personal_access_tokens"

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    def create_fork(self, org: str) -> ForkResult:
        payload = {'namespace_path': org} if org and org != self.username else {}
        data = self._post(f"{self._project_path}/fork", f"Forking {self.full_name}", payload)
        return ForkResult(git_url=data.get('ssh_url_to_repo'), html_url=data.get('web_url'))

    def _repository_info(self, data: Dict[str, Any]) -> RepositoryInfo:
        parent = data.get('forked_from_project')
        fork_origin = None
        if parent:
            fork_origin = ForkOrigin(org=(parent.get('namespace') or {}).get('full_path'), repo=parent.get('path'))
        return RepositoryInfo(
            owner=(data.get('namespace') or {}).get('full_path') or login_of(data.get('owner'), 'username'),
            html_url=data.get('web_url'),
            fetch_url=data.get('http_url_to_repo'),
            push_url=data.get('ssh_url_to_repo'),
            is_fork=parent is not None,
            is_private=data.get('visibility', 'private') != 'public',
            fork_origin=fork_origin,
        )

    def get_repository_info(self, org: str, repo: str) -> RepositoryInfo:
        data = self._get(f"/projects/{project_id(org, repo)}", f"Fetching repository {org}/{repo}")
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
        payload: Dict[str, Any] = {
            'name': name,
            'description': description,
            'visibility': 'public' if public else 'private',
            'issues_enabled': has_issues,
            'wiki_enabled': has_wiki,
            'initialize_with_readme': auto_init,
        }
        if organization:
            namespace = self._get(f"/namespaces/{quote(organization, safe='')}", f"Fetching namespace {organization}")
            payload['namespace_id'] = namespace['id']
        if homepage or has_downloads or team_id:
            logger.debug('GitLab ignores homepage, downloads and team settings on project creation')
        data = self._post('/projects', f"Creating repository {name}", payload)
        return self._repository_info(data)

    # ------------------------------------------------------------------
    # Comments, labels, milestones
    # ------------------------------------------------------------------

    def _merge_request_url(self, iid: int) -> str:
        return f"{self.web_url}/{self.org}/{self.repo}/-/merge_requests/{iid}"

    def create_comment(self, id: int, message: str) -> Optional[str]:
        data = self._post(
            f"{self._project_path}/merge_requests/{id}/notes", f"Commenting on !{id}", {'body': message}
        )
        return f"{self._merge_request_url(id)}#note_{data['id']}"

    def get_comments(self, id: int) -> List[Comment]:
        data = self._get(f"{self._project_path}/merge_requests/{id}/notes", f"Fetching comments of !{id}")
        return [
            Comment(
                id=note['id'],
                url=f"{self._merge_request_url(id)}#note_{note['id']}",
                body=note.get('body'),
                user=login_of(note.get('author'), 'username'),
                created_at=parse_datetime(note.get('created_at')),
                updated_at=parse_datetime(note.get('updated_at')),
            )
            for note in data or []
            if not note.get('system')
        ]

    def get_labels(self) -> List[str]:
        data = self._get(f"{self._project_path}/labels", 'Fetching labels')
        return [label['name'] for label in data or []]

    def get_milestones(self, parameters: Optional[Dict[str, Any]] = None) -> List[str]:
        data = self._get(f"{self._project_path}/milestones", 'Fetching milestones', params=parameters or None)
        return [milestone['title'] for milestone in data or []]

    def _milestone_id(self, milestone: Any) -> Any:
        if milestone is None or isinstance(milestone, int) or str(milestone).isdigit():
            return milestone
        data = self._get(f"{self._project_path}/milestones", 'Fetching milestones', params={'title': milestone})
        if not data:
            raise AdapterError(f"Milestone '{milestone}' does not exist in {self.full_name}")
        return data[0]['id']

    def _user_id(self, username: str) -> int:
        data = self._get('/users', f"Looking up user {username}", params={'username': username})
        if not data:
            raise AdapterError(f"User '{username}' does not exist")
        return data[0]['id']

    # ------------------------------------------------------------------
    # Merge requests
    # ------------------------------------------------------------------

    def _pull_request_from_response(self, data: Dict[str, Any]) -> PullRequest:
        same_project = data.get('source_project_id') == data.get('target_project_id')
        labels = [label['name'] if isinstance(label, dict) else label for label in data.get('labels') or []]
        diff_refs = data.get('diff_refs') or {}
        return PullRequest(
            number=int(data['iid']),
            url=data.get('web_url'),
            state=_STATE_FROM_GITLAB.get(data.get('state'), data.get('state')),
            title=data.get('title'),
            body=data.get('description'),
            labels=labels,
            milestone=(data.get('milestone') or {}).get('title'),
            created_at=parse_datetime(data.get('created_at')),
            updated_at=parse_datetime(data.get('updated_at')),
            user=login_of(data.get('author'), 'username'),
            assignee=login_of(data.get('assignee'), 'username'),
            merge_commit=data.get('merge_commit_sha') or data.get('squash_commit_sha'),
            merged=data.get('state') == 'merged',
            merged_by=login_of(data.get('merge_user') or data.get('merged_by'), 'username'),
            head=PullRequestRef(
                ref=data.get('source_branch'),
                sha=data.get('sha'),
                user=self.org if same_project else login_of(data.get('author'), 'username'),
                repo=self.repo if same_project else None,
            ),
            base=PullRequestRef(
                label=data.get('target_branch'),
                ref=data.get('target_branch'),
                sha=diff_refs.get('base_sha'),
                user=self.org,
                repo=self.repo,
            ),
        )

    def open_pull_request(self, base, head, subject, body, parameters=None) -> PullRequestLink:
        parameters = dict(parameters or {})
        try:
            head_org, head_branch = parse_head(head, default_org=self.org)
        except ValueError as e:
            raise AdapterError(str(e)) from e

        issue = parameters.pop('issue', None)
        if issue:
            subject = subject or f"Issue #{issue}"
            body = f"{body}\n\nCloses #{issue}".strip()
        if isinstance(parameters.get('labels'), (list, tuple)):
            parameters['labels'] = ','.join(parameters['labels'])

        payload: Dict[str, Any] = {
            'source_branch': head_branch,
            'target_branch': base,
            'title': subject,
            'description': body,
        }
        payload.update(parameters)

        source_path = self._project_path
        if head_org != self.org:
            # Cross-fork merge requests are created on the fork and aimed at this project
            target = self._get(self._project_path, f"Fetching repository {self.full_name}")
            payload['target_project_id'] = target['id']
            source_path = f"/projects/{project_id(head_org, self.repo)}"

        data = self._post(f"{source_path}/merge_requests", f"Opening merge request {head} -> {base}", payload)
        return PullRequestLink(html_url=data.get('web_url'), number=int(data['iid']))

    def get_pull_request(self, id: int) -> PullRequest:
        data = self._get(f"{self._project_path}/merge_requests/{id}", f"Fetching merge request !{id}")
        return self._pull_request_from_response(data)

    def get_pull_request_commits(self, id: int) -> List[Commit]:
        data = self._get(f"{self._project_path}/merge_requests/{id}/commits", f"Fetching commits of !{id}")
        return [
            Commit(sha=entry['id'], message=entry.get('message'), user=entry.get('author_name'))
            for entry in data or []
        ]

    def merge_pull_request(self, id: int, message: str) -> str:
        data = self._put(
            f"{self._project_path}/merge_requests/{id}/merge",
            f"Merging !{id}",
            {'merge_commit_message': message},
        )
        sha = (data or {}).get('merge_commit_sha') or (data or {}).get('squash_commit_sha')
        if not sha:
            raise ConflictError(f"Merging !{id} failed: merge request is {(data or {}).get('state', 'not merged')}")
        return sha

    def update_pull_request(self, id: int, parameters: Dict[str, Any]) -> None:
        payload: Dict[str, Any] = {}
        for key, value in parameters.items():
            if key == 'body':
                payload['description'] = value
            elif key == 'state':
                if value not in _STATE_EVENTS:
                    raise AdapterError(f"Cannot change merge request state to '{value}'")
                payload['state_event'] = _STATE_EVENTS[value]
            elif key == 'labels':
                payload['labels'] = ','.join(value) if isinstance(value, (list, tuple)) else value
            elif key == 'milestone':
                payload['milestone_id'] = self._milestone_id(value)
            elif key == 'assignee':
                payload['assignee_id'] = self._user_id(value) if value else 0
            else:
                payload[key] = value
        if payload:
            self._put(f"{self._project_path}/merge_requests/{id}", f"Updating !{id}", payload)

    def _change_pull_request_base(self, pr_number: int, new_base: str) -> PullRequestLink:
        data = self._put(
            f"{self._project_path}/merge_requests/{pr_number}",
            f"Switching target of !{pr_number}",
            {'target_branch': new_base},
        )
        return PullRequestLink(html_url=data.get('web_url'), number=int(data['iid']))

    def close_pull_request(self, id: int) -> None:
        pull_request = self.get_pull_request(id)
        if pull_request.state != 'open':
            raise ConflictError(f"Merge request !{id} is already {pull_request.state}")
        self._put(f"{self._project_path}/merge_requests/{id}", f"Closing !{id}", {'state_event': 'close'})

    def _list_pull_requests(self, state, page, per_page) -> List[PullRequest]:
        params: Dict[str, Any] = {'page': page, 'per_page': per_page}
        if state:
            params['state'] = _STATE_TO_GITLAB[state]
        data = self._get(f"{self._project_path}/merge_requests", 'Listing merge requests', params=params)
        return [self._pull_request_from_response(entry) for entry in data or []]

    # ------------------------------------------------------------------
    # Releases
    # ------------------------------------------------------------------

    def create_release(self, name: str, parameters: Optional[Dict[str, Any]] = None) -> ReleaseLink:
        parameters = dict(parameters or {})
        payload: Dict[str, Any] = {'tag_name': name, 'name': parameters.pop('name', name)}
        if 'body' in parameters:
            payload['description'] = parameters.pop('body')
        if 'target_commitish' in parameters:
            payload['ref'] = parameters.pop('target_commitish')
        for unsupported in ('draft', 'prerelease'):
            if parameters.pop(unsupported, None):
                logger.warning(f"GitLab releases have no {unsupported} flag, ignoring it")
        payload.update(parameters)

        data = self._post(f"{self._project_path}/releases", f"Creating release {name}", payload)
        return ReleaseLink(url=(data.get('_links') or {}).get('self'), id=data['tag_name'])

    def get_releases(self) -> List[Release]:
        data = self._get(f"{self._project_path}/releases", 'Fetching releases')
        return [
            Release(
                id=entry['tag_name'],
                url=(entry.get('_links') or {}).get('self'),
                name=entry.get('name'),
                tag_name=entry.get('tag_name'),
                body=entry.get('description'),
                draft=False,
                prerelease=bool(entry.get('upcoming_release')),
                created_at=parse_datetime(entry.get('created_at')),
                published_at=parse_datetime(entry.get('released_at')),
                user=login_of(entry.get('author'), 'username'),
            )
            for entry in data or []
        ]

    def get_release_assets(self, id: RecordId) -> List[ReleaseAsset]:
        data = self._get(
            f"{self._project_path}/releases/{quote(str(id), safe='')}", f"Fetching assets of release {id}"
        )
        links = ((data or {}).get('assets') or {}).get('links') or []
        return [
            ReleaseAsset(
                id=link['id'],
                url=link.get('direct_asset_url') or link.get('url'),
                name=link.get('name'),
                state=AssetState.UPLOADED,
            )
            for link in links
        ]

    def remove_release(self, id: RecordId) -> None:
        self._delete(f"{self._project_path}/releases/{quote(str(id), safe='')}", f"Removing release {id}")
