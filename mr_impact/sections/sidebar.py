"""Sidebar controls — commit weight, filters, snapshot info."""

from __future__ import annotations

import streamlit as st

from mr_impact.config import COMMIT_WEIGHT


def render_sidebar(snap: dict) -> tuple[int, int]:
    """
    Render the sidebar and return:
        commit_weight – lines one commit is worth (snapshot default: 10)
        min_lines     – int filter on lines added
    """
    mr = snap.get("merge_request", {})
    with st.sidebar:
        st.markdown("## ⚙️ Controls")

        st.markdown("### Scoring")
        commit_weight = st.slider(
            "Lines per commit", 0, 50,
            int(snap.get("commit_weight", COMMIT_WEIGHT)), 1,
            key="commit_weight",
            help="Impact = lines added + weight × commits",
        )

        st.markdown("---")
        st.markdown("### Filters")
        min_lines = st.number_input(
            "Min lines added", min_value=0, max_value=10_000, value=0
        )

        st.markdown("---")
        st.info(
            f"**Merge request**: !{mr.get('iid', '?')} {mr.get('title', '')}  \n"
            f"**Branches**: {snap.get('source_branch', '?')} → {snap.get('target_branch', '?')}  \n"
            f"**Generated**: {snap.get('generated_at', '')[:10]}  \n"
            f"**Commits**: {snap.get('processed_commits', '?')} of "
            f"{snap.get('total_commits', '?')} processed"
        )
        if mr.get("web_url"):
            st.markdown(f"[Open in GitLab]({mr['web_url']})")

    return commit_weight, int(min_lines)
