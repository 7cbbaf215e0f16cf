"""Top-5 contributor cards, impact breakdown and lines-vs-commits scatter."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from mr_impact.charts import make_impact_breakdown, make_lines_vs_commits


def render_leaderboard(scored_df: pd.DataFrame, snap: dict) -> None:
    st.markdown("---")
    mr = snap.get("merge_request", {})
    st.markdown(f"## 🏆 Most Impactful Contributors — !{mr.get('iid', '?')}")

    if scored_df.empty:
        st.warning("No contributor added any lines in this merge request.")
        return

    top5 = scored_df.head(5).reset_index(drop=True)
    cols = st.columns(5)
    for i, (_, row) in enumerate(top5.iterrows()):
        with cols[i]:
            st.metric(
                label=f"#{i + 1} {row.contributor}",
                value=f"{row.custom_impact:.0f}",
                delta=f"+{row.lines_added} lines · {row.commits} commits",
                delta_color="off",
            )

    tab_breakdown, tab_scatter = st.tabs(
        ["📊 Impact Breakdown (top 15)", "🎯 Lines vs Commits"]
    )
    with tab_breakdown:
        st.plotly_chart(
            make_impact_breakdown(scored_df, top_n=15),
            use_container_width=True,
            key="impact_breakdown",
        )
    with tab_scatter:
        st.plotly_chart(
            make_lines_vs_commits(scored_df),
            use_container_width=True,
            key="lines_vs_commits",
        )
