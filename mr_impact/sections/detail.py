"""Contributor detail panel — totals and lines added per file."""

from __future__ import annotations

import pandas as pd
import streamlit as st

from mr_impact.charts import make_files_chart


def render_detail_panel(scored_df: pd.DataFrame, files_df: pd.DataFrame) -> None:
    st.markdown("---")
    st.markdown("## 🔍 Contributor Detail Panel")

    if scored_df.empty:
        return

    selected = st.selectbox(
        "Select contributor:", scored_df["contributor"].tolist(), index=0, key="contrib_select"
    )
    row = scored_df[scored_df["contributor"] == selected].iloc[0]
    own_files = files_df[files_df["contributor"] == selected]

    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Impact",      f"{row.custom_impact:.0f}")
    m2.metric("Lines added", f"{row.lines_added}")
    m3.metric("Commits",     f"{row.commits}")
    m4.metric("Files",       f"{len(own_files)}")

    st.markdown("#### Lines Added per File")
    if own_files.empty:
        st.info("No per-file data in the snapshot for this contributor.")
        return
    st.plotly_chart(
        make_files_chart(files_df, selected),
        use_container_width=True,
        key="files_chart",
    )
