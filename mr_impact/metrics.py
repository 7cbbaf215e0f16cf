"""
Metric computation:
  - lines added per contributor (from the attribution map)
  - commits per contributor
  - impact score = lines added + COMMIT_WEIGHT × commits, and the ranking on it
"""

from __future__ import annotations

from typing import Iterable, Optional

from mr_impact.config import COMMIT_WEIGHT
from mr_impact.diffs import AuthorLineMap
from mr_impact.gitlab import Commit


# ── Counting ──────────────────────────────────────────────────────────────────

def count_lines_per_contributor(author_line_map: AuthorLineMap) -> dict[str, int]:
    return {author: len(lines) for author, lines in author_line_map.items()}


def count_commits_per_contributor(commits: Iterable[Commit]) -> dict[str, int]:
    """Commits per author name (exact match), keys in first-seen order."""
    counts: dict[str, int] = {}
    for commit in commits:
        counts[commit.author_name] = counts.get(commit.author_name, 0) + 1
    return counts


# ── Impact ────────────────────────────────────────────────────────────────────

def compute_impact_scores(
    line_counts: dict[str, int],
    commit_counts: dict[str, int],
    commit_weight: int = COMMIT_WEIGHT,
) -> dict[str, int]:
    """
    Score every contributor in line_counts.

    Contributors that only appear in commit_counts (e.g. authors of merge
    commits with no added lines) are not scored.
    """
    return {
        author: lines + commit_counts.get(author, 0) * commit_weight
        for author, lines in line_counts.items()
    }


def rank_contributors(
    line_counts: dict[str, int],
    commit_counts: dict[str, int],
    commit_weight: int = COMMIT_WEIGHT,
) -> list[tuple[str, int]]:
    """(author, score) pairs, highest first; ties keep first-seen order."""
    scores = compute_impact_scores(line_counts, commit_counts, commit_weight)
    return sorted(scores.items(), key=lambda kv: -kv[1])


def get_contributor_with_most_impact(
    line_counts: dict[str, int],
    commit_counts: dict[str, int],
    commit_weight: int = COMMIT_WEIGHT,
) -> Optional[str]:
    """Top contributor by impact score, or None when nobody added a line."""
    top: Optional[str] = None
    best = None
    for author, score in compute_impact_scores(
        line_counts, commit_counts, commit_weight
    ).items():
        if best is None or score > best:
            best, top = score, author
    return top
