import json
import logging
from unittest.mock import MagicMock, patch

import pytest

import generate_impact
from generate_impact import (
    build_author_line_map,
    build_snapshot,
    lines_per_file,
    main,
    print_report,
    resolve_merge_request,
)
from mr_impact.diffs import LineAttribution
from mr_impact.gitlab import Commit, CommitDetail
from mr_impact.metrics import count_commits_per_contributor, count_lines_per_contributor


# ============================================================================
# Merge request resolution
# ============================================================================

def test_resolve_existing(fake_gateway, merge_request, caplog):
    caplog.set_level(logging.INFO)
    assert resolve_merge_request(fake_gateway, "release", "master") is merge_request
    assert "Merge Request already exists: !42" in caplog.text
    fake_gateway.create_merge_request.assert_not_called()


def test_resolve_missing_does_not_create_by_default(fake_gateway):
    fake_gateway.find_open_merge_request.return_value = None
    assert resolve_merge_request(fake_gateway, "release", "master") is None
    fake_gateway.create_merge_request.assert_not_called()


def test_resolve_missing_creates_when_asked(fake_gateway, merge_request):
    fake_gateway.find_open_merge_request.return_value = None
    fake_gateway.create_merge_request.return_value = merge_request
    mr = resolve_merge_request(fake_gateway, "release", "master", create_if_missing=True)
    assert mr is merge_request
    fake_gateway.create_merge_request.assert_called_once_with(
        "release", "master", "Merge release into master"
    )


def test_resolve_create_failure(fake_gateway, caplog):
    fake_gateway.find_open_merge_request.return_value = None
    fake_gateway.create_merge_request.return_value = None
    assert resolve_merge_request(fake_gateway, "release", "master", True) is None
    assert "Failed to create a new merge request." in caplog.text


# ============================================================================
# Attribution pipeline
# ============================================================================

def test_build_author_line_map(fake_gateway, sample_commits):
    line_map, skipped = build_author_line_map(fake_gateway, sample_commits)

    assert skipped == []
    assert list(line_map) == ["Alice", "Bob"]
    assert line_map["Alice"] == [
        LineAttribution("src/parser.py", "import re"),
        LineAttribution("src/parser.py", ""),
        LineAttribution("src/parser.py", "def parse(): pass"),
        LineAttribution("src/parser.py", "# TODO"),
    ]
    assert line_map["Bob"] == [LineAttribution("README.md", "Hello")]


def test_failed_diff_skips_only_that_commit(fake_gateway, sample_commits, sample_diffs):
    failing = "c" * 40
    fake_gateway.get_commit_diff.side_effect = (
        lambda sha: None if sha == failing else sample_diffs[sha]
    )
    line_map, skipped = build_author_line_map(fake_gateway, sample_commits)

    assert skipped == [failing]
    assert count_lines_per_contributor(line_map) == {"Alice": 3, "Bob": 1}
    # Commit counts come from the commit list, not the diff fetch
    assert count_commits_per_contributor(sample_commits) == {"Alice": 2, "Bob": 1}


def test_failed_commit_detail_skips_diff_fetch(fake_gateway, sample_commits):
    fake_gateway.get_commit.side_effect = lambda sha: None
    line_map, skipped = build_author_line_map(fake_gateway, sample_commits)

    assert line_map == {}
    assert skipped == [c.id for c in sample_commits]
    fake_gateway.get_commit_diff.assert_not_called()


def test_attribution_uses_commit_detail_author(fake_gateway, sample_commits):
    fake_gateway.get_commit.side_effect = lambda sha: CommitDetail(sha, "Carol")
    line_map, _ = build_author_line_map(fake_gateway, sample_commits)
    assert list(line_map) == ["Carol"]


def test_empty_commit_list(fake_gateway):
    line_map, skipped = build_author_line_map(fake_gateway, [])
    assert line_map == {} and skipped == []
    fake_gateway.get_commit.assert_not_called()


# ============================================================================
# Report
# ============================================================================

def test_lines_per_file():
    line_map = {
        "A": [
            LineAttribution("x.py", "1"),
            LineAttribution("y.py", "2"),
            LineAttribution("y.py", "3"),
        ]
    }
    assert lines_per_file(line_map) == {"A": {"y.py": 2, "x.py": 1}}


def test_build_snapshot(config, merge_request, fake_gateway, sample_commits):
    merger = sample_commits + [
        Commit("d" * 40, "dddddddd", "Merge branch", "Merger"),
    ]
    line_map, skipped = build_author_line_map(fake_gateway, sample_commits)
    snap = build_snapshot(config, "release", "master", merge_request, merger, line_map, skipped)

    assert snap["merge_request"]["iid"] == 42
    assert snap["commit_weight"] == 10
    assert snap["total_commits"] == 4
    assert snap["processed_commits"] == 4
    assert list(snap["contributors"]) == ["Alice", "Bob", "Merger"]
    assert snap["contributors"]["Alice"] == {"lines_added": 4, "commits": 2, "impact": 24}
    assert snap["contributors"]["Bob"] == {"lines_added": 1, "commits": 1, "impact": 11}
    assert snap["contributors"]["Merger"] == {"lines_added": 0, "commits": 1, "impact": None}
    assert snap["ranking"] == [
        {"author": "Alice", "impact": 24},
        {"author": "Bob", "impact": 11},
    ]
    assert snap["top_contributor"] == "Alice"
    assert snap["files"]["Alice"] == {"src/parser.py": 4}
    json.dumps(snap)


def test_print_report(capsys):
    print_report({"Alice": 4, "Bob": 1}, {"Alice": 2, "Bob": 1}, "Alice")
    out = capsys.readouterr().out
    assert "Author: Alice | Lines Added: 4" in out
    assert "Author: Bob | Lines Added: 1" in out
    assert "Author: Alice | Commits: 2" in out
    assert "Author: Bob | Commits: 1" in out
    assert "Contributor with the most impact: Alice" in out
    assert out.index("Lines Added Per Contributor:") < out.index("Commits Per Contributor:")


def test_print_report_without_contributor(capsys):
    print_report({}, {"Merger": 1}, None)
    out = capsys.readouterr().out
    assert "Author: Merger | Commits: 1" in out
    assert "Contributor with the most impact: none" in out


# ============================================================================
# CLI
# ============================================================================

@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("GITLAB_TOKEN", "glpat-test")
    monkeypatch.setenv("GITLAB_PROJECT_ID", "group/project")
    for name in ("SOURCE_BRANCH", "TARGET_BRANCH", "GITLAB_CREATE_MR", "GITLAB_API_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def patched_gateway(fake_gateway):
    with patch.object(generate_impact, "GitLabGateway") as gw_cls:
        gw_cls.return_value.__enter__.return_value = fake_gateway
        yield gw_cls


def test_main_writes_snapshot_and_report(env, patched_gateway, fake_gateway, tmp_path, capsys):
    out_file = tmp_path / "snap.json"
    assert main(["--output", str(out_file)]) == 0

    fake_gateway.find_open_merge_request.assert_called_once_with("release", "master")
    fake_gateway.list_merge_request_commits.assert_called_once_with(42)
    snap = json.loads(out_file.read_text())
    assert snap["top_contributor"] == "Alice"
    assert "Contributor with the most impact: Alice" in capsys.readouterr().out


def test_main_branch_flags_override_env(env, monkeypatch, patched_gateway, fake_gateway, tmp_path):
    monkeypatch.setenv("SOURCE_BRANCH", "develop")
    main(["--target", "main", "--output", str(tmp_path / "s.json")])
    fake_gateway.find_open_merge_request.assert_called_once_with("develop", "main")


def test_main_json_output(env, patched_gateway, tmp_path, capsys):
    assert main(["--json", "--output", str(tmp_path / "s.json")]) == 0
    snap = json.loads(capsys.readouterr().out)
    assert snap["contributors"]["Bob"]["commits"] == 1


def test_main_without_merge_request_fails(env, patched_gateway, fake_gateway, tmp_path, caplog):
    fake_gateway.find_open_merge_request.return_value = None
    out_file = tmp_path / "snap.json"

    assert main(["--output", str(out_file)]) == 1
    assert "Cannot proceed without a merge request IID." in caplog.text
    assert not out_file.exists()
    fake_gateway.list_merge_request_commits.assert_not_called()


def test_main_create_if_missing(env, patched_gateway, fake_gateway, merge_request, tmp_path):
    fake_gateway.find_open_merge_request.return_value = None
    fake_gateway.create_merge_request.return_value = merge_request
    assert main(["--create-if-missing", "--output", str(tmp_path / "s.json")]) == 0
    fake_gateway.create_merge_request.assert_called_once()


def test_main_empty_merge_request(env, patched_gateway, fake_gateway, tmp_path, capsys):
    fake_gateway.list_merge_request_commits.return_value = []
    out_file = tmp_path / "snap.json"

    assert main(["--output", str(out_file)]) == 0
    snap = json.loads(out_file.read_text())
    assert snap["contributors"] == {}
    assert snap["top_contributor"] is None
    assert "Contributor with the most impact: none" in capsys.readouterr().out


def test_main_missing_config(monkeypatch, caplog):
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.setenv("GITLAB_PROJECT_ID", "276")
    gw_cls = MagicMock()
    with patch.object(generate_impact, "GitLabGateway", gw_cls):
        assert main([]) == 2
    gw_cls.assert_not_called()
    assert "GITLAB_TOKEN" in caplog.text
