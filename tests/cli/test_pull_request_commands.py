# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
CLI tests for ``gush pr`` commands against the in-memory adapter.
"""

import json

from gush.classes import Commit
from gush.utils.git import GitError


class TestPrCreate:
    def test_defaults_from_git_and_config(self, invoke, memory_adapter, git_helper):
        result = invoke('pr', 'create')

        assert result.exit_code == 0, result.output
        assert result.output.strip() == 'https://memory.test/acme/widget/pull/1'
        assert memory_adapter.calls[-1] == ('open_pull_request', 'master', 'alice:feature', 'Add widget', {})
        git_helper.get_first_commit_title.assert_called_once_with('master', 'feature')

    def test_configured_base_branch(self, invoke, memory_adapter):
        result = invoke('pr', 'create', '--title', 'Fix', config={'username': 'alice', 'base': 'main'})

        assert result.exit_code == 0, result.output
        assert memory_adapter.calls[-1][1] == 'main'

    def test_explicit_options(self, invoke, memory_adapter, git_helper):
        result = invoke(
            'pr', 'create',
            '--base', 'develop',
            '--source-org', 'bob',
            '--source-branch', 'fix-typo',
            '--issue', '42',
            '--title', 'Fix typo',
            '--body', 'Small fix',
        )

        assert result.exit_code == 0, result.output
        assert memory_adapter.calls[-1] == ('open_pull_request', 'develop', 'bob:fix-typo', 'Fix typo', {'issue': '42'})
        assert memory_adapter.pull_requests[1].body == 'Small fix'
        git_helper.get_active_branch_name.assert_not_called()

    def test_no_title_available(self, invoke, git_helper):
        git_helper.get_first_commit_title.side_effect = GitError('unknown revision')

        result = invoke('pr', 'create')

        assert result.exit_code == 2
        assert 'title is required' in result.output

    def test_issue_supplies_the_title(self, invoke, memory_adapter, git_helper):
        git_helper.get_first_commit_title.side_effect = GitError('unknown revision')

        result = invoke('pr', 'create', '--issue', '42')

        assert result.exit_code == 0, result.output
        assert memory_adapter.calls[-1] == ('open_pull_request', 'master', 'alice:feature', '', {'issue': '42'})
        git_helper.get_first_commit_title.assert_not_called()

    def test_issue_skips_title_prompt(self, invoke, memory_adapter, monkeypatch):
        monkeypatch.setattr('gush.cli.pull_request_commands._is_interactive', lambda: True)

        result = invoke('pr', 'create', '--issue', '42')

        assert result.exit_code == 0, result.output
        assert 'Title' not in result.output
        assert memory_adapter.calls[-1][3] == ''

    def test_detached_head(self, invoke, git_helper):
        git_helper.get_active_branch_name.side_effect = GitError('Not on a branch (detached HEAD)')

        result = invoke('pr', 'create', '--title', 'x')

        assert result.exit_code == 1
        assert 'detached HEAD' in result.output


class TestPrReadCommands:
    def test_show(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, title='Add widget', labels=['bug'])

        result = invoke('pr', 'show', '3')

        assert result.exit_code == 0, result.output
        assert 'Add widget' in result.output
        assert 'bug' in result.output

    def test_show_json(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, title='Add widget')

        result = invoke('pr', 'show', '3', '--json')

        data = json.loads(result.stdout)
        assert data['number'] == 3
        assert data['head']['ref'] == 'feature'
        assert data['milestone'] is None

    def test_show_missing(self, invoke):
        result = invoke('pr', 'show', '99')

        assert result.exit_code == 1
        assert 'Pull request #99 not found' in result.output

    def test_list_filters_state(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(1, title='Open one')
        memory_adapter.add_pull_request(2, title='Closed one', state='closed')

        result = invoke('pr', 'list', '--state', 'open', '--json')

        assert [pr['number'] for pr in json.loads(result.stdout)] == [1]

    def test_list_rejects_unknown_state(self, invoke):
        result = invoke('pr', 'list', '--state', 'declined')

        assert result.exit_code == 1
        assert "Unsupported pull request state 'declined'" in result.output

    def test_list_empty(self, invoke):
        result = invoke('pr', 'list')

        assert result.exit_code == 0
        assert 'No pull requests found' in result.output

    def test_states(self, invoke):
        result = invoke('pr', 'states')

        assert result.output.split() == ['open', 'closed', 'all']

    def test_commits(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)
        memory_adapter.commits[3] = [Commit(sha='0123456789abcdef', message='Add widget\n\nDetails', user='alice')]

        result = invoke('pr', 'commits', '3')

        assert result.exit_code == 0, result.output
        assert '01234567' in result.output
        assert 'Details' not in result.output


class TestPrMutations:
    def test_merge_prints_sha(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)

        result = invoke('pr', 'merge', '3', '-m', 'Ship it')

        assert result.exit_code == 0, result.output
        assert 'f' * 40 in result.output
        assert memory_adapter.calls[-1] == ('merge_pull_request', 3, 'Ship it')

    def test_merge_default_message(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)

        invoke('pr', 'merge', '3')

        assert memory_adapter.calls[-1][2] == 'Merge pull request #3'

    def test_merge_conflict(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, state='closed')

        result = invoke('pr', 'merge', '3')

        assert result.exit_code == 1
        assert 'not mergeable' in result.output

    def test_close_with_message(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)

        result = invoke('pr', 'close', '3', '-m', 'Superseded')

        assert result.exit_code == 0, result.output
        assert memory_adapter.pull_requests[3].state == 'closed'
        assert memory_adapter.comments[3][0].body == 'Superseded'

    def test_close_twice(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, state='closed')

        result = invoke('pr', 'close', '3')

        assert result.exit_code == 1
        assert 'already closed' in result.output

    def test_update_sends_only_given_keys(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)

        result = invoke('pr', 'update', '3', '--label', 'bug', '--label', 'urgent', '--milestone', 'v1.0')

        assert result.exit_code == 0, result.output
        assert memory_adapter.calls[-1] == (
            'update_pull_request', 3, {'labels': ['bug', 'urgent'], 'milestone': 'v1.0'}
        )

    def test_update_nothing(self, invoke):
        result = invoke('pr', 'update', '3')

        assert result.exit_code == 2
        assert 'Nothing to update' in result.output

    def test_comment(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)

        result = invoke('pr', 'comment', '3', 'Looks good')

        assert result.output.strip() == 'https://memory.test/c/3'
        assert memory_adapter.comments[3][0].body == 'Looks good'

    def test_comments_json(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3)
        memory_adapter.create_comment(3, 'First')

        result = invoke('pr', 'comments', '3', '--json')

        assert [c['body'] for c in json.loads(result.stdout)] == ['First']


class TestPrSwitchBase:
    def test_in_place_keeps_number(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, head='feature')

        result = invoke('pr', 'switch-base', '3', 'develop')

        assert result.exit_code == 0, result.output
        assert 'now targets develop' in result.output
        assert memory_adapter.pull_requests[3].base.ref == 'develop'

    def test_force_new_pr(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, head='feature')

        result = invoke('pr', 'switch-base', '3', 'develop', '--force-new-pr')

        assert result.exit_code == 0, result.output
        assert 'replaced by #4' in result.output
        assert memory_adapter.pull_requests[3].state == 'closed'

    def test_new_head(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, head='feature')

        result = invoke('pr', 'switch-base', '3', 'develop', '--head', 'bob:feature-v2')

        assert result.exit_code == 0, result.output
        assert memory_adapter.pull_requests[4].head.user == 'bob'

    def test_closed_pull_request_is_refused(self, invoke, memory_adapter):
        memory_adapter.add_pull_request(3, state='closed')

        result = invoke('pr', 'switch-base', '3', 'develop', '--force-new-pr')

        assert result.exit_code == 1
        assert 'only open pull requests' in result.output
        assert list(memory_adapter.pull_requests) == [3]


def test_pr_alias(invoke):
    result = invoke('p', 'states')

    assert result.exit_code == 0
    assert 'open' in result.output
