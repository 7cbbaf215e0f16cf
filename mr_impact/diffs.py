"""
Unified-diff line classification and per-author added-line attribution.

GitLab's commit diff endpoint returns one record per file whose `diff` text
starts directly at the first `@@` hunk header. Anything before the first
header (e.g. `diff --git`, `index`, `---`/`+++`) is file-level metadata and is
skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from mr_impact.gitlab import FileDiff


class LineKind(Enum):
    ADDED       = "added"
    REMOVED     = "removed"
    CONTEXT     = "context"
    HUNK_HEADER = "hunk_header"
    NOISE       = "noise"


@dataclass(frozen=True)
class ClassifiedLine:
    kind: LineKind
    content: Optional[str] = None   # set for ADDED / REMOVED only


class LineAttribution(NamedTuple):
    file_path: str
    line_content: str


AuthorLineMap = dict[str, list[LineAttribution]]

_HUNK = ClassifiedLine(LineKind.HUNK_HEADER)
_NOISE = ClassifiedLine(LineKind.NOISE)
_CONTEXT = ClassifiedLine(LineKind.CONTEXT)


def classify_line(line: str, in_hunk: bool) -> ClassifiedLine:
    if line.startswith("@@"):
        return _HUNK
    if not in_hunk:
        return _NOISE
    # File-path markers never count, even inside a hunk
    if line.startswith("+++") or line.startswith("---"):
        return _NOISE
    if line.startswith("+"):
        return ClassifiedLine(LineKind.ADDED, line[1:])
    if line.startswith("-"):
        return ClassifiedLine(LineKind.REMOVED, line[1:])
    return _CONTEXT


def split_diff_lines(text: Optional[str]) -> list[str]:
    """
    Split on "\n" only; other Unicode line boundaries (form feed, U+2028, ...)
    are part of the line content. A trailing "\r" is dropped from each line.
    """
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def classify_diff(text: Optional[str]) -> list[ClassifiedLine]:
    """Classify every line of one file's diff text, in order."""
    classified: list[ClassifiedLine] = []
    in_hunk = False
    for line in split_diff_lines(text):
        cl = classify_line(line, in_hunk)
        if cl.kind is LineKind.HUNK_HEADER:
            in_hunk = True
        classified.append(cl)
    return classified


def added_lines(text: Optional[str]) -> list[str]:
    return [cl.content for cl in classify_diff(text) if cl.kind is LineKind.ADDED]


def attribute_added_lines(
    author_name: str,
    diffs: Iterable[FileDiff],
    author_line_map: AuthorLineMap,
) -> int:
    """
    Append every added line of one commit's diffs to author_line_map[author_name].

    Order within the author's list follows diff order then line order; calling
    this once per commit in commit order keeps the whole list in discovery
    order. The author key is only created once a line is actually attributed.
    Returns the number of lines appended.
    """
    appended = 0
    for diff in diffs:
        for content in added_lines(diff.diff):
            author_line_map.setdefault(author_name, []).append(
                LineAttribution(diff.new_path, content)
            )
            appended += 1
    return appended
