"""
GitLab REST (v4) gateway.

Every public method degrades to None / [] on failure and logs the error, so a
single failed call never aborts the whole run. Response records are typed
dataclasses; fields the API returns beyond those listed are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import requests

from mr_impact.config import GitLabConfig

log = logging.getLogger(__name__)

PER_PAGE = 100


class GitLabAPIError(RuntimeError):
    """A GitLab request failed (network, HTTP status or bad payload)."""


# Malformed records surface as one of these while parsing
_FAILURES = (GitLabAPIError, AttributeError, KeyError, TypeError, ValueError)


# ─────────────────────────────────────────────────────────────────────────────
# Response records
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class MergeRequest:
    id: int
    iid: int
    title: str
    state: str
    web_url: str

    @classmethod
    def from_api(cls, data: dict) -> "MergeRequest":
        return cls(
            id=int(data["id"]),
            iid=int(data["iid"]),
            title=data.get("title") or "",
            state=data.get("state") or "",
            web_url=data.get("web_url") or "",
        )


@dataclass(frozen=True)
class Commit:
    id: str
    short_id: str
    title: str
    author_name: str

    @classmethod
    def from_api(cls, data: dict) -> "Commit":
        sha = data["id"]
        return cls(
            id=sha,
            short_id=data.get("short_id") or sha[:8],
            title=data.get("title") or "",
            author_name=data.get("author_name") or "",
        )


@dataclass(frozen=True)
class CommitDetail:
    id: str
    author_name: str

    @classmethod
    def from_api(cls, data: dict) -> "CommitDetail":
        return cls(id=data["id"], author_name=data.get("author_name") or "")


@dataclass(frozen=True)
class FileDiff:
    old_path: str
    new_path: str
    diff: str
    new_file: bool = False
    renamed_file: bool = False
    deleted_file: bool = False

    @classmethod
    def from_api(cls, data: dict) -> "FileDiff":
        return cls(
            old_path=data.get("old_path") or "",
            new_path=data.get("new_path") or "",
            diff=data.get("diff") or "",
            new_file=bool(data.get("new_file", False)),
            renamed_file=bool(data.get("renamed_file", False)),
            deleted_file=bool(data.get("deleted_file", False)),
        )


# ─────────────────────────────────────────────────────────────────────────────
# Gateway
# ─────────────────────────────────────────────────────────────────────────────

class GitLabGateway:
    """Thin client for the handful of merge-request endpoints we need."""

    def __init__(
        self,
        config: GitLabConfig,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.config = config
        self.session = session if session is not None else requests.Session()
        self.session.headers.update({"Private-Token": config.token})

    def __enter__(self) -> "GitLabGateway":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    # ── HTTP plumbing ────────────────────────────────────────────────────────

    def _project_url(self, path: str) -> str:
        project = quote(str(self.config.project_id), safe="")
        return f"{self.config.api_url}/projects/{project}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = self._project_url(path)
        try:
            resp = self.session.request(
                method, url, timeout=self.config.timeout, **kwargs
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise GitLabAPIError(
                f"{method} {path} failed: {_error_message(exc.response) or exc}"
            ) from exc
        except requests.RequestException as exc:
            raise GitLabAPIError(f"{method} {path} failed: {exc}") from exc
        return resp

    def _json(self, method: str, path: str, **kwargs):
        resp = self._request(method, path, **kwargs)
        try:
            return resp.json()
        except ValueError as exc:
            raise GitLabAPIError(f"{method} {path} returned invalid JSON") from exc

    def _get_all(self, path: str, params: Optional[dict] = None) -> list[dict]:
        """GET a list endpoint, following X-Next-Page until exhausted."""
        items: list[dict] = []
        page: Optional[str] = "1"
        while page:
            query = dict(params or {}, page=page, per_page=PER_PAGE)
            resp = self._request("GET", path, params=query)
            try:
                data = resp.json()
            except ValueError as exc:
                raise GitLabAPIError(f"GET {path} returned invalid JSON") from exc
            if not isinstance(data, list):
                raise GitLabAPIError(f"GET {path} returned {type(data).__name__}, expected list")
            items.extend(data)
            page = (resp.headers.get("X-Next-Page") or "").strip() or None
        return items

    # ── Operations ───────────────────────────────────────────────────────────

    def find_open_merge_request(
        self, source_branch: str, target_branch: str
    ) -> Optional[MergeRequest]:
        try:
            data = self._get_all(
                "merge_requests",
                params={
                    "source_branch": source_branch,
                    "target_branch": target_branch,
                    "state": "opened",
                },
            )
            # GitLab allows only one open MR per source/target pair
            return MergeRequest.from_api(data[0]) if data else None
        except _FAILURES as exc:
            log.error(f"Error fetching merge requests: {exc}")
            return None

    def create_merge_request(
        self, source_branch: str, target_branch: str, title: str
    ) -> Optional[MergeRequest]:
        try:
            data = self._json(
                "POST", "merge_requests",
                json={
                    "source_branch": source_branch,
                    "target_branch": target_branch,
                    "title": title,
                },
            )
            return MergeRequest.from_api(data)
        except _FAILURES as exc:
            log.error(f"Error creating merge request: {exc}")
            return None

    def list_merge_request_commits(self, mr_iid: int) -> list[Commit]:
        try:
            return [
                Commit.from_api(c)
                for c in self._get_all(f"merge_requests/{mr_iid}/commits")
            ]
        except _FAILURES as exc:
            log.error(f"Error fetching merge request commits: {exc}")
            return []

    def get_commit(self, commit_sha: str) -> Optional[CommitDetail]:
        try:
            return CommitDetail.from_api(
                self._json("GET", f"repository/commits/{commit_sha}")
            )
        except _FAILURES as exc:
            log.error(f"Error fetching commit {commit_sha}: {exc}")
            return None

    def get_commit_diff(self, commit_sha: str) -> Optional[list[FileDiff]]:
        try:
            return [
                FileDiff.from_api(d)
                for d in self._get_all(f"repository/commits/{commit_sha}/diff")
            ]
        except _FAILURES as exc:
            log.error(f"Error fetching diff for commit {commit_sha}: {exc}")
            return None


def _error_message(resp: Optional[requests.Response]) -> str:
    """Pull GitLab's `message`/`error` field out of an error response."""
    if resp is None:
        return ""
    try:
        body = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        msg = body.get("message") or body.get("error")
        if msg:
            return f"HTTP {resp.status_code}: {msg}"
    return f"HTTP {resp.status_code}"
