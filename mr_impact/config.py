"""Shared constants and environment-driven run configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_URL       = "https://gitlab.com/api/v4"
DEFAULT_SOURCE_BRANCH = "release"
DEFAULT_TARGET_BRANCH = "master"
DEFAULT_TIMEOUT       = 60.0     # seconds per request
OUTPUT_FILE           = "impact_snapshot.json"

# One commit counts as much as ten added lines.
COMMIT_WEIGHT = 10

COLOR_LINES   = "#4361EE"   # Lines added
COLOR_COMMITS = "#F72585"   # Weighted commits
COLOR_IMPACT  = "#F77F00"   # Impact

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class GitLabConfig:
    api_url: str
    token: str
    project_id: str
    source_branch: str = DEFAULT_SOURCE_BRANCH
    target_branch: str = DEFAULT_TARGET_BRANCH
    create_if_missing: bool = False
    timeout: float = DEFAULT_TIMEOUT


def _required(env: Mapping[str, str], name: str, hint: str) -> str:
    value = env.get(name, "").strip()
    if not value:
        raise EnvironmentError(
            f"{name} environment variable is required but not set. {hint}"
        )
    return value


def load_config(environ: Optional[Mapping[str, str]] = None) -> GitLabConfig:
    """Build a GitLabConfig from environment variables."""
    env = os.environ if environ is None else environ

    token = _required(
        env, "GITLAB_TOKEN",
        "Create a personal access token with the read_api scope (api to create MRs).",
    )
    project_id = _required(
        env, "GITLAB_PROJECT_ID",
        "Use the numeric project id or its full path, e.g. group/project.",
    )

    raw_timeout = env.get("GITLAB_TIMEOUT", "").strip()
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        raise EnvironmentError(
            f"GITLAB_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
        ) from None

    return GitLabConfig(
        api_url=(env.get("GITLAB_API_URL", "").strip() or DEFAULT_API_URL).rstrip("/"),
        token=token,
        project_id=project_id,
        source_branch=env.get("SOURCE_BRANCH", "").strip() or DEFAULT_SOURCE_BRANCH,
        target_branch=env.get("TARGET_BRANCH", "").strip() or DEFAULT_TARGET_BRANCH,
        create_if_missing=env.get("GITLAB_CREATE_MR", "").strip().lower() in _TRUTHY,
        timeout=timeout,
    )
