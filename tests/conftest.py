"""Shared test fixtures — config, fake HTTP session, fake gateway."""

from unittest.mock import MagicMock

import pytest
import requests

from mr_impact.config import GitLabConfig
from mr_impact.gitlab import Commit, CommitDetail, FileDiff, GitLabGateway, MergeRequest


def make_response(json_data=None, status=200, headers=None):
    """A stand-in for requests.Response."""
    resp = MagicMock()
    resp.status_code = status
    resp.headers = headers or {}
    resp.json.return_value = json_data
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(
            f"{status} Client Error", response=resp
        )
    return resp


@pytest.fixture
def config():
    return GitLabConfig(
        api_url="https://gitlab.example.com/api/v4",
        token="glpat-test",
        project_id="group/project",
        source_branch="release",
        target_branch="master",
        timeout=5.0,
    )


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


@pytest.fixture
def gateway(config, session):
    return GitLabGateway(config, session=session)


@pytest.fixture
def merge_request():
    return MergeRequest(
        id=901, iid=42, title="Merge release into master", state="opened",
        web_url="https://gitlab.example.com/group/project/-/merge_requests/42",
    )


@pytest.fixture
def sample_commits():
    """Three commits, two authors; Alice first."""
    return [
        Commit(id="a" * 40, short_id="aaaaaaaa", title="add parser", author_name="Alice"),
        Commit(id="b" * 40, short_id="bbbbbbbb", title="fix typo", author_name="Bob"),
        Commit(id="c" * 40, short_id="cccccccc", title="extend parser", author_name="Alice"),
    ]


@pytest.fixture
def sample_diffs():
    """Per-commit diffs keyed by sha, matching sample_commits."""
    return {
        "a" * 40: [
            FileDiff("src/parser.py", "src/parser.py", "@@ -0,0 +1,3 @@\n+import re\n+\n+def parse(): pass\n"),
        ],
        "b" * 40: [
            FileDiff("README.md", "README.md", "@@ -1,2 +1,2 @@\n-Helo\n+Hello\n world\n"),
        ],
        "c" * 40: [
            FileDiff("src/parser.py", "src/parser.py", "@@ -3,1 +3,2 @@\n def parse(): pass\n+# TODO\n"),
            FileDiff("docs/old.md", "docs/new.md", ""),
        ],
    }


@pytest.fixture
def fake_gateway(sample_commits, sample_diffs, merge_request):
    """A gateway double answering from the sample fixtures."""
    authors = {c.id: c.author_name for c in sample_commits}
    gw = MagicMock(spec=GitLabGateway)
    gw.find_open_merge_request.return_value = merge_request
    gw.list_merge_request_commits.return_value = sample_commits
    gw.get_commit.side_effect = lambda sha: CommitDetail(sha, authors[sha])
    gw.get_commit_diff.side_effect = lambda sha: sample_diffs[sha]
    return gw
