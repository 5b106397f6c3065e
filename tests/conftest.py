#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared fixtures: mocked HTTP responses/sessions and an in-memory adapter.
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest

from gush.adapter import Adapter, Capability, ConflictError, NotFoundError, UnauthorizedError
from gush.classes import (
    AssetState,
    Comment,
    Commit,
    ForkResult,
    PullRequest,
    PullRequestLink,
    PullRequestRef,
    Release,
    ReleaseAsset,
    ReleaseLink,
    RepositoryInfo,
)
from gush.utils.utils import parse_head


def build_response(
    status_code: int = 200,
    json_data: Any = None,
    headers: Optional[Dict[str, str]] = None,
    text: Optional[str] = None,
    url: str = 'https://api.example.test/resource',
) -> Mock:
    """Mock of a requests.Response good enough for the http tools."""
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.url = url
    response.reason = 'Reason'
    if json_data is None:
        response.content = b''
        response.text = text or ''
        response.json.side_effect = ValueError('No JSON object could be decoded')
    else:
        response.text = text if text is not None else json.dumps(json_data)
        response.content = response.text.encode('utf-8')
        response.json.return_value = json_data
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def session():
    """A requests.Session stand-in; tests set ``request.return_value``/``side_effect``."""
    mock_session = Mock()
    mock_session.headers = {}
    mock_session.auth = None
    return mock_session


class InMemoryAdapter(Adapter):
    """Adapter keeping every record in dicts; records calls in order."""

    name = 'memory'
    CAPABILITIES = frozenset(Capability)
    PULL_REQUEST_STATES = ('open', 'closed', 'all')
    WEB = 'https://memory.test'

    def __init__(self, org='acme', repo='widget', config=None, capabilities=None):
        super().__init__(org, repo, config)
        if capabilities is not None:
            self.CAPABILITIES = frozenset(capabilities)
        self.token = self.config.get('token')
        self.pull_requests: Dict[int, PullRequest] = {}
        self.comments: Dict[int, List[Comment]] = {}
        self.commits: Dict[int, List[Commit]] = {}
        self.releases: Dict[int, Release] = {}
        self.assets: Dict[int, List[ReleaseAsset]] = {}
        self.calls: List[tuple] = []

    # Seeding -----------------------------------------------------------

    def add_pull_request(self, number, head='feature', head_org=None, base='master', **fields) -> PullRequest:
        pull_request = PullRequest(
            number=number,
            url=f'{self.WEB}/{self.full_name}/pull/{number}',
            state=fields.pop('state', 'open'),
            title=fields.pop('title', f'Pull request {number}'),
            body=fields.pop('body', 'Description'),
            head=PullRequestRef(ref=head, user=head_org or self.org, repo=self.repo),
            base=PullRequestRef(ref=base, label=base, user=self.org, repo=self.repo),
            **fields,
        )
        self.pull_requests[number] = pull_request
        return pull_request

    def _pull_request(self, id) -> PullRequest:
        if id not in self.pull_requests:
            raise NotFoundError(f'Pull request #{id} not found', status_code=404)
        return self.pull_requests[id]

    # Contract ----------------------------------------------------------

    def supports_repository(self, remote_url):
        return 'memory.test' in remote_url

    def _fetch_authenticated_user(self):
        if self.token != 'valid-token':
            raise UnauthorizedError('Bad credentials', status_code=401)
        return 'alice'

    def get_token_generation_url(self):
        return f'{self.WEB}/tokens'

    def create_fork(self, org):
        self.calls.append(('create_fork', org))
        return ForkResult(git_url=f'git@memory.test:{org}/{self.repo}.git', html_url=f'{self.WEB}/{org}/{self.repo}')

    def get_repository_info(self, org, repo):
        return RepositoryInfo(
            owner=org,
            html_url=f'{self.WEB}/{org}/{repo}',
            fetch_url=f'{self.WEB}/{org}/{repo}.git',
            push_url=f'git@memory.test:{org}/{repo}.git',
        )

    def create_repo(self, name, description, homepage, public=True, organization=None, has_issues=True,
                    has_wiki=False, has_downloads=False, team_id=0, auto_init=True):
        self.calls.append(('create_repo', name, public, organization))
        owner = organization or self.username
        return RepositoryInfo(
            owner=owner,
            html_url=f'{self.WEB}/{owner}/{name}',
            fetch_url=f'{self.WEB}/{owner}/{name}.git',
            push_url=f'git@memory.test:{owner}/{name}.git',
            is_private=not public,
        )

    def create_comment(self, id, message):
        self._pull_request(id)
        comments = self.comments.setdefault(id, [])
        comment = Comment(id=len(comments) + 1, body=message, user=self.username, url=f'{self.WEB}/c/{id}')
        comments.append(comment)
        self.calls.append(('create_comment', id, message))
        return comment.url

    def get_comments(self, id):
        return list(self.comments.get(id, []))

    def get_labels(self):
        return ['bug', 'feature']

    def get_milestones(self, parameters=None):
        return ['v1.0']

    def open_pull_request(self, base, head, subject, body, parameters=None):
        org, branch = parse_head(head, default_org=self.org)
        number = max(self.pull_requests, default=0) + 1
        self.add_pull_request(number, head=branch, head_org=org, base=base, title=subject, body=body)
        self.calls.append(('open_pull_request', base, head, subject, dict(parameters or {})))
        return PullRequestLink(html_url=self.pull_requests[number].url, number=number)

    def get_pull_request(self, id):
        return self._pull_request(id)

    def get_pull_request_commits(self, id):
        self._pull_request(id)
        return list(self.commits.get(id, []))

    def merge_pull_request(self, id, message):
        pull_request = self._pull_request(id)
        if pull_request.state != 'open':
            raise ConflictError(f'Pull request #{id} is not mergeable')
        pull_request.state = 'closed'
        pull_request.merged = True
        pull_request.merge_commit = 'f' * 40
        self.calls.append(('merge_pull_request', id, message))
        return pull_request.merge_commit

    def update_pull_request(self, id, parameters):
        pull_request = self._pull_request(id)
        for key, value in parameters.items():
            setattr(pull_request, key, list(value) if key == 'labels' else value)
        self.calls.append(('update_pull_request', id, dict(parameters)))

    def close_pull_request(self, id):
        pull_request = self._pull_request(id)
        if pull_request.state == 'closed':
            raise ConflictError(f'Pull request #{id} is already closed')
        pull_request.state = 'closed'
        self.calls.append(('close_pull_request', id))

    def _list_pull_requests(self, state, page, per_page):
        matching = [
            pull_request
            for number, pull_request in sorted(self.pull_requests.items())
            if state in (None, 'all') or pull_request.state == state
        ]
        start = (page - 1) * per_page
        return matching[start:start + per_page]

    def _change_pull_request_base(self, pr_number, new_base):
        pull_request = self._pull_request(pr_number)
        pull_request.base.ref = new_base
        pull_request.base.label = new_base
        self.calls.append(('change_base', pr_number, new_base))
        return PullRequestLink(html_url=pull_request.url, number=pr_number)

    def create_release(self, name, parameters=None):
        release_id = max(self.releases, default=0) + 1
        parameters = dict(parameters or {})
        self.releases[release_id] = Release(
            id=release_id,
            url=f'{self.WEB}/releases/{name}',
            name=parameters.get('name', name),
            tag_name=name,
            body=parameters.get('body'),
            draft=bool(parameters.get('draft')),
            prerelease=bool(parameters.get('prerelease')),
        )
        self.calls.append(('create_release', name, parameters))
        return ReleaseLink(url=self.releases[release_id].url, id=release_id)

    def create_release_assets(self, id, name, content_type, content):
        if not self.supports(Capability.RELEASE_ASSETS):
            return super().create_release_assets(id, name, content_type, content)
        if id not in self.releases:
            raise NotFoundError(f'Release {id} not found', status_code=404)
        assets = self.assets.setdefault(id, [])
        asset = ReleaseAsset(
            id=100 + len(assets),
            name=name,
            content_type=content_type,
            size=len(content),
            state=AssetState.UPLOADED,
        )
        assets.append(asset)
        return asset.id

    def get_releases(self):
        return list(self.releases.values())

    def get_release_assets(self, id):
        return list(self.assets.get(id, []))

    def remove_release(self, id):
        if id not in self.releases:
            raise NotFoundError(f'Release {id} not found', status_code=404)
        del self.releases[id]
        self.calls.append(('remove_release', id))


@pytest.fixture
def make_memory_adapter():
    """Factory for in-memory adapters; ``capabilities`` narrows what the adapter supports."""

    def _make(capabilities=None, **config):
        settings = {"username": "alice", "token": "valid-token"}
        settings.update(config)
        return InMemoryAdapter(config=settings, capabilities=capabilities)

    return _make


@pytest.fixture
def memory_adapter(make_memory_adapter):
    return make_memory_adapter()
