#!/usr/bin/env python3
"""
generate_impact.py

Finds the open GitLab merge request between two branches, pulls its commits
and per-commit diffs, attributes added lines and commits to each author and
ranks authors by impact (lines added + 10 × commits).

Prints the per-author tables and the top contributor, and writes the same
data to impact_snapshot.json for the dashboard (`streamlit run app.py`).

Usage:
    export GITLAB_TOKEN=glpat-...
    export GITLAB_PROJECT_ID=group/project
    export SOURCE_BRANCH=release TARGET_BRANCH=master   # optional
    python generate_impact.py
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pandas as pd

from mr_impact.config import COMMIT_WEIGHT, OUTPUT_FILE, GitLabConfig, load_config
from mr_impact.diffs import AuthorLineMap, attribute_added_lines
from mr_impact.gitlab import Commit, GitLabGateway, MergeRequest
from mr_impact.metrics import (
    count_commits_per_contributor,
    count_lines_per_contributor,
    get_contributor_with_most_impact,
    rank_contributors,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Data fetching
# ─────────────────────────────────────────────────────────────────────────────

def resolve_merge_request(
    gateway: GitLabGateway,
    source_branch: str,
    target_branch: str,
    create_if_missing: bool = False,
) -> Optional[MergeRequest]:
    """Find the open MR for source → target, creating it only if asked to."""
    mr = gateway.find_open_merge_request(source_branch, target_branch)
    if mr:
        log.info(f"Merge Request already exists: !{mr.iid}")
        log.info(f"URL: {mr.web_url}")
        return mr

    log.warning(f"No open merge request from '{source_branch}' into '{target_branch}'")
    if not create_if_missing:
        return None

    mr = gateway.create_merge_request(
        source_branch, target_branch, f"Merge {source_branch} into {target_branch}"
    )
    if mr:
        log.info(f"Created new Merge Request: !{mr.iid}")
        log.info(f"URL: {mr.web_url}")
    else:
        log.error("Failed to create a new merge request.")
    return mr


def build_author_line_map(
    gateway: GitLabGateway, commits: list[Commit]
) -> tuple[AuthorLineMap, list[str]]:
    """
    Fetch each commit's author and diff, one commit at a time, and attribute
    its added lines. A commit whose detail or diff fetch fails is skipped and
    its sha returned in the second element.
    """
    author_line_map: AuthorLineMap = {}
    skipped: list[str] = []

    for i, commit in enumerate(commits, 1):
        log.info(f"  [{i}/{len(commits)}] {commit.short_id} {commit.title}")
        detail = gateway.get_commit(commit.id)
        diffs = gateway.get_commit_diff(commit.id) if detail else None
        if detail is None or diffs is None:
            log.warning(f"  Skipping commit {commit.short_id}: could not fetch its data")
            skipped.append(commit.id)
            continue
        added = attribute_added_lines(detail.author_name, diffs, author_line_map)
        log.debug(f"  {detail.author_name}: +{added} lines in {len(diffs)} files")

    return author_line_map, skipped


# ─────────────────────────────────────────────────────────────────────────────
# Report
# ─────────────────────────────────────────────────────────────────────────────

def lines_per_file(author_line_map: AuthorLineMap) -> dict[str, dict[str, int]]:
    """{author: {file_path: added_lines}}, files ordered by count (desc)."""
    return {
        author: dict(Counter(a.file_path for a in lines).most_common())
        for author, lines in author_line_map.items()
    }


def build_snapshot(
    config: GitLabConfig,
    source_branch: str,
    target_branch: str,
    mr: MergeRequest,
    commits: list[Commit],
    author_line_map: AuthorLineMap,
    skipped: list[str],
) -> dict:
    line_counts   = count_lines_per_contributor(author_line_map)
    commit_counts = count_commits_per_contributor(commits)
    ranking       = rank_contributors(line_counts, commit_counts)
    scores        = dict(ranking)

    contributors: dict[str, dict] = {}
    for author in list(line_counts) + [a for a in commit_counts if a not in line_counts]:
        contributors[author] = {
            "lines_added": line_counts.get(author, 0),
            "commits":     commit_counts.get(author, 0),
            # None = not ranked (no added lines)
            "impact":      scores.get(author),
        }

    return {
        "generated_at":      datetime.now(timezone.utc).isoformat(),
        "api_url":           config.api_url,
        "project_id":        config.project_id,
        "source_branch":     source_branch,
        "target_branch":     target_branch,
        "merge_request": {
            "iid":     mr.iid,
            "title":   mr.title,
            "web_url": mr.web_url,
        },
        "commit_weight":     COMMIT_WEIGHT,
        "total_commits":     len(commits),
        "processed_commits": len(commits) - len(skipped),
        "skipped_commits":   skipped,
        "contributors":      contributors,
        "files":             lines_per_file(author_line_map),
        "ranking":           [{"author": a, "impact": s} for a, s in ranking],
        "top_contributor":   get_contributor_with_most_impact(line_counts, commit_counts),
    }


def print_report(
    line_counts: dict[str, int],
    commit_counts: dict[str, int],
    top_contributor: Optional[str],
) -> None:
    print("\nLines Added Per Contributor:")
    for author, lines in line_counts.items():
        print(f"Author: {author} | Lines Added: {lines}")

    print("\nCommits Per Contributor:")
    for author, commits in commit_counts.items():
        print(f"Author: {author} | Commits: {commits}")

    if top_contributor is None:
        print("\nContributor with the most impact: none (no lines were added)")
        return
    print(f"\nContributor with the most impact: {top_contributor}")

    ranking = rank_contributors(line_counts, commit_counts)
    df = pd.DataFrame(
        [
            {
                "author":  author,
                "impact":  score,
                "lines":   line_counts[author],
                "commits": commit_counts.get(author, 0),
            }
            for author, score in ranking
        ]
    )
    print("\n── Impact Rankings ──────────────────────────────────────────────────────")
    print(df.to_string(index=False))


# ─────────────────────────────────────────────────────────────────────────────
# Main
# ─────────────────────────────────────────────────────────────────────────────

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Rank merge request contributors by lines added and commits.",
    )
    parser.add_argument("--source", help="Source branch (default: $SOURCE_BRANCH or 'release')")
    parser.add_argument("--target", help="Target branch (default: $TARGET_BRANCH or 'master')")
    parser.add_argument(
        "--create-if-missing", action="store_true",
        help="Open a merge request when none exists (default: $GITLAB_CREATE_MR)",
    )
    parser.add_argument(
        "--output", default=OUTPUT_FILE,
        help=f"Snapshot JSON path (default: {OUTPUT_FILE})",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the snapshot JSON to stdout instead of the text report",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config()
    except EnvironmentError as exc:
        log.error(str(exc))
        return 2

    source = args.source or config.source_branch
    target = args.target or config.target_branch
    create = args.create_if_missing or config.create_if_missing

    with GitLabGateway(config) as gateway:
        log.info(f"Looking up merge request {source} → {target} in project {config.project_id}…")
        mr = resolve_merge_request(gateway, source, target, create)
        if mr is None:
            log.error("Cannot proceed without a merge request IID.")
            return 1

        log.info(f"Fetching commits of !{mr.iid}…")
        commits = gateway.list_merge_request_commits(mr.iid)
        if not commits:
            log.warning(f"Merge request !{mr.iid} has no commits.")
        else:
            log.info(f"Attributing added lines across {len(commits)} commits…")

        author_line_map, skipped = build_author_line_map(gateway, commits)

    if skipped:
        log.warning(f"{len(skipped)} of {len(commits)} commits skipped")

    snapshot = build_snapshot(config, source, target, mr, commits, author_line_map, skipped)
    if snapshot["top_contributor"] is None:
        log.warning("No lines were added by anyone; nothing to rank.")

    output_path = Path(args.output)
    with output_path.open("w") as f:
        json.dump(snapshot, f, indent=2, default=str)
    log.info(f"✓ Saved {output_path} ({output_path.stat().st_size / 1024:.1f} KB)")

    if args.json:
        print(json.dumps(snapshot, indent=2, default=str))
    else:
        print_report(
            count_lines_per_contributor(author_line_map),
            count_commits_per_contributor(commits),
            snapshot["top_contributor"],
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
