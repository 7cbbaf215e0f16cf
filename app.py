"""
Merge Request Impact Dashboard — thin orchestrator
"""

from __future__ import annotations

import streamlit as st

st.set_page_config(
    page_title="MR Impact Dashboard",
    page_icon="⚡",
    layout="wide",
    initial_sidebar_state="expanded",
)

from mr_impact.data import (
    build_contributors_df,
    build_files_df,
    load_snapshot,
    recompute_scores,
)
from mr_impact.sections.sidebar import render_sidebar
from mr_impact.sections.leaderboard import render_leaderboard
from mr_impact.sections.detail import render_detail_panel
from mr_impact.sections.full_leaderboard import render_full_leaderboard


def main() -> None:
    snap = load_snapshot()

    contributors_df = build_contributors_df(snap.get("contributors", {}))
    files_df        = build_files_df(snap.get("files", {}))

    commit_weight, min_lines = render_sidebar(snap)
    scored_df = recompute_scores(contributors_df, commit_weight, min_lines)

    mr = snap.get("merge_request", {})
    st.title("⚡ Merge Request Impact Dashboard")
    st.caption(
        f"{snap.get('project_id', '?')} · !{mr.get('iid', '?')} "
        f"{snap.get('source_branch', '?')} → {snap.get('target_branch', '?')} · "
        f"{len(scored_df)} ranked contributors · {snap.get('total_commits', '?')} commits"
    )
    skipped = snap.get("skipped_commits", [])
    if skipped:
        st.warning(
            f"{len(skipped)} commit(s) could not be fetched and contribute no lines: "
            + ", ".join(sha[:8] for sha in skipped)
        )

    render_leaderboard(scored_df, snap)
    render_detail_panel(scored_df, files_df)
    render_full_leaderboard(scored_df, contributors_df)


if __name__ == "__main__":
    main()
