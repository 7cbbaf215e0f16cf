"""Full leaderboard table — every contributor, plus unranked commit-only authors."""

from __future__ import annotations

import pandas as pd
import streamlit as st


def render_full_leaderboard(scored_df: pd.DataFrame, contributors_df: pd.DataFrame) -> None:
    st.markdown("---")
    st.markdown("## 📊 Full Leaderboard")

    full_display = scored_df[[
        "contributor", "custom_impact", "lines_added", "commits",
    ]].copy()
    full_display.index = range(1, len(full_display) + 1)
    full_display.columns = ["Contributor", "Impact ⚡", "Lines Added", "Commits"]

    if full_display.empty:
        st.info("No ranked contributors match the current filters.")
    else:
        st.dataframe(
            full_display.style
            .background_gradient(subset=["Impact ⚡"], cmap="YlOrRd")
            .background_gradient(subset=["Lines Added", "Commits"], cmap="Blues")
            .format({"Impact ⚡": "{:.0f}"}),
            use_container_width=True,
            height=min(600, 40 + 35 * len(full_display)),
        )

    unranked = contributors_df[~contributors_df["ranked"].astype(bool)]
    if not unranked.empty:
        st.caption(
            "Not ranked (commits without added lines, e.g. merge commits): "
            + ", ".join(
                f"{r.contributor} ({r.commits} commits)" for r in unranked.itertuples()
            )
        )

    st.markdown("---")
    st.caption(
        "Built with Streamlit · Data: GitLab REST API · "
        "Metrics defined in `mr_impact/metrics.py`"
    )
