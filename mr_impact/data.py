"""Snapshot loading and score-recomputation helpers."""

from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import streamlit as st

from mr_impact.config import OUTPUT_FILE


@st.cache_data(ttl=300)
def load_snapshot(path: str = OUTPUT_FILE) -> dict:
    p = Path(path)
    if not p.exists():
        st.error(f"'{path}' not found. Run `python generate_impact.py` first.")
        st.stop()
    with p.open() as f:
        return json.load(f)


def build_contributors_df(contributors: dict) -> pd.DataFrame:
    """
    One row per contributor. `ranked` is False for authors with commits but
    no added lines; they carry no impact score.
    """
    rows = []
    for name, v in contributors.items():
        rows.append({
            "contributor": name,
            "lines_added": v.get("lines_added", 0),
            "commits":     v.get("commits", 0),
            "impact":      v.get("impact"),
            "ranked":      v.get("impact") is not None,
        })
    df = pd.DataFrame(
        rows, columns=["contributor", "lines_added", "commits", "impact", "ranked"]
    )
    return df.reset_index(drop=True)


def build_files_df(files: dict) -> pd.DataFrame:
    rows = []
    for name, per_file in files.items():
        for path, count in per_file.items():
            rows.append({"contributor": name, "file_path": path, "lines_added": count})
    return pd.DataFrame(rows, columns=["contributor", "file_path", "lines_added"])


def recompute_scores(
    base_df: pd.DataFrame,
    commit_weight: float,
    min_lines: int = 0,
) -> pd.DataFrame:
    """
    Re-score ranked contributors with a what-if commit weight.

    Only contributors with added lines are ranked. The sort is stable so
    equal scores keep snapshot (first-seen) order.
    """
    mask = base_df["ranked"].astype(bool) & (base_df["lines_added"] >= min_lines)
    df = base_df[mask].copy()
    df["custom_impact"] = df["lines_added"] + commit_weight * df["commits"]
    df["weighted_commits"] = commit_weight * df["commits"]
    return df.sort_values(
        "custom_impact", ascending=False, kind="stable"
    ).reset_index(drop=True)
