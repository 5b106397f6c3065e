#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for the Bitbucket Cloud adapter.
"""

import pytest

from gush.adapter import AdapterError, Capability, ConflictError, UnsupportedOperationError
from gush.adapter.bitbucket import BitbucketAdapter

REPO = 'https://api.bitbucket.org/2.0/repositories/acme/widget'

PULL_REQUEST_JSON = {
    'id': 3,
    'title': 'Add widget',
    'description': 'Implements the widget',
    'state': 'OPEN',
    'author': {'nickname': 'alice', 'display_name': 'Alice'},
    'created_on': '2025-02-26T08:30:00.123456+00:00',
    'updated_on': '2025-02-26T09:30:00.123456+00:00',
    'links': {'html': {'href': 'https://bitbucket.org/acme/widget/pull-requests/3'}},
    'source': {
        'branch': {'name': 'feature'},
        'commit': {'hash': 'abc123'},
        'repository': {'full_name': 'alice/widget'},
    },
    'destination': {
        'branch': {'name': 'master'},
        'commit': {'hash': 'def456'},
        'repository': {'full_name': 'acme/widget'},
    },
}


@pytest.fixture
def adapter(session):
    return BitbucketAdapter('acme', 'widget', {'username': 'alice', 'token': 'app-password'}, session=session)


def sent(session, index=-1):
    call = session.request.call_args_list[index]
    return call.args[0], call.args[1], call.kwargs


class TestSetup:
    def test_basic_auth_with_username(self, adapter, session):
        assert session.auth == ('alice', 'app-password')

    def test_bearer_token_without_username(self, session):
        BitbucketAdapter('acme', 'widget', {'token': 'access-token'}, session=session)

        assert session.headers['Authorization'] == 'Bearer access-token'

    def test_capabilities(self, adapter):
        assert adapter.capabilities == frozenset({Capability.MILESTONES, Capability.SWITCH_BASE})

    def test_token_url(self, adapter):
        assert adapter.get_token_generation_url() == 'https://bitbucket.org/account/settings/app-passwords/'

    def test_supports_repository(self, adapter):
        assert adapter.supports_repository('git@bitbucket.org:acme/widget.git')
        assert not adapter.supports_repository('git@github.com:acme/widget.git')


class TestPullRequests:
    def test_normalizes_pull_request(self, adapter, session, make_response):
        session.request.return_value = make_response(200, PULL_REQUEST_JSON)

        pr = adapter.get_pull_request(3)

        assert pr.state == 'open'
        assert pr.user == 'alice'
        assert pr.url == 'https://bitbucket.org/acme/widget/pull-requests/3'
        assert pr.head.user == 'alice'
        assert pr.head.sha == 'abc123'
        assert pr.base.label == 'master'
        assert pr.labels == []
        assert pr.milestone is None

    def test_list_uppercases_state(self, adapter, session, make_response):
        session.request.return_value = make_response(200, {'values': [PULL_REQUEST_JSON], 'page': 1})

        prs = adapter.get_pull_requests('declined', per_page=5)

        assert sent(session)[2]['params'] == {'page': 1, 'pagelen': 5, 'state': 'DECLINED'}
        assert len(prs) == 1

    def test_list_rejects_github_state(self, adapter):
        with pytest.raises(AdapterError):
            adapter.get_pull_requests('closed')

    def test_open_pull_request(self, adapter, session, make_response):
        session.request.return_value = make_response(201, {
            'id': 4,
            'links': {'html': {'href': 'https://bitbucket.org/acme/widget/pull-requests/4'}},
        })

        link = adapter.open_pull_request('master', 'alice:feature', 'Title', 'Body', {'issue': 12})

        payload = sent(session)[2]['json']
        assert payload['source'] == {'branch': {'name': 'feature'}, 'repository': {'full_name': 'alice/widget'}}
        assert payload['destination'] == {'branch': {'name': 'master'}}
        assert payload['description'] == 'Body\n\nFixes #12'
        assert link.number == 4

    def test_open_from_issue_without_title(self, adapter, session, make_response):
        session.request.return_value = make_response(201, {'id': 5, 'links': {}})

        adapter.open_pull_request('master', 'alice:feature', '', '', {'issue': '42'})

        payload = sent(session)[2]['json']
        assert payload['title'] == 'Issue #42'
        assert payload['description'] == 'Fixes #42'

    def test_merge(self, adapter, session, make_response):
        session.request.return_value = make_response(200, {'state': 'MERGED', 'merge_commit': {'hash': 'beef'}})

        assert adapter.merge_pull_request(3, 'Merge') == 'beef'
        assert sent(session)[:2] == ('POST', f'{REPO}/pullrequests/3/merge')

    def test_close_declines(self, adapter, session, make_response):
        session.request.side_effect = [
            make_response(200, PULL_REQUEST_JSON),
            make_response(200, dict(PULL_REQUEST_JSON, state='DECLINED')),
        ]

        adapter.close_pull_request(3)

        assert sent(session)[:2] == ('POST', f'{REPO}/pullrequests/3/decline')

    def test_close_declined_is_conflict(self, adapter, session, make_response):
        session.request.return_value = make_response(200, dict(PULL_REQUEST_JSON, state='DECLINED'))

        with pytest.raises(ConflictError):
            adapter.close_pull_request(3)

    def test_update_maps_body(self, adapter, session, make_response):
        session.request.return_value = make_response(200, PULL_REQUEST_JSON)

        adapter.update_pull_request(3, {'title': 'New', 'body': 'Text'})

        method, url, kwargs = sent(session)
        assert (method, url) == ('PUT', f'{REPO}/pullrequests/3')
        assert kwargs['json'] == {'title': 'New', 'description': 'Text'}

    def test_update_labels_unsupported(self, adapter, session):
        with pytest.raises(UnsupportedOperationError):
            adapter.update_pull_request(3, {'labels': ['bug']})
        session.request.assert_not_called()

    def test_switch_base_in_place(self, adapter, session, make_response):
        session.request.side_effect = [
            make_response(200, PULL_REQUEST_JSON),
            make_response(200, PULL_REQUEST_JSON),
        ]

        link = adapter.switch_pull_request_base(3, 'develop', 'alice:feature')

        assert sent(session)[2]['json'] == {'destination': {'branch': {'name': 'develop'}}}
        assert link.number == 3


class TestNoReleasesNoLabels:
    def test_labels_empty_without_request(self, adapter, session):
        assert adapter.get_labels() == []
        session.request.assert_not_called()

    def test_releases_empty(self, adapter):
        assert adapter.get_releases() == []
        assert adapter.get_release_assets(1) == []

    @pytest.mark.parametrize('call', [
        lambda a: a.create_release('v1.0.0'),
        lambda a: a.remove_release(1),
        lambda a: a.create_release_assets(1, 'a.zip', 'application/zip', b''),
    ])
    def test_release_mutations_unsupported(self, adapter, call):
        with pytest.raises(UnsupportedOperationError):
            call(adapter)

    def test_milestones(self, adapter, session, make_response):
        session.request.return_value = make_response(200, {'values': [{'name': 'v1.0'}, {'name': 'v2.0'}]})

        assert adapter.get_milestones() == ['v1.0', 'v2.0']


class TestComments:
    def test_deleted_comments_skipped(self, adapter, session, make_response):
        session.request.return_value = make_response(200, {'values': [
            {'id': 1, 'content': {'raw': 'Hi'}, 'user': {'nickname': 'bob'}, 'deleted': False},
            {'id': 2, 'content': {'raw': ''}, 'deleted': True},
        ]})

        comments = adapter.get_comments(3)

        assert [c.body for c in comments] == ['Hi']

    def test_create_comment_raw_content(self, adapter, session, make_response):
        session.request.return_value = make_response(201, {'id': 9, 'links': {'html': {'href': 'https://bb/c/9'}}})

        assert adapter.create_comment(3, 'Hello') == 'https://bb/c/9'
        assert sent(session)[2]['json'] == {'content': {'raw': 'Hello'}}
