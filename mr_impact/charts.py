"""All Plotly chart-builder functions."""

from __future__ import annotations

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from mr_impact.config import COLOR_COMMITS, COLOR_IMPACT, COLOR_LINES


# ── Impact breakdown ──────────────────────────────────────────────────────────

def make_impact_breakdown(scored_df: pd.DataFrame, top_n: int = 15) -> go.Figure:
    df = scored_df.head(top_n).iloc[::-1]
    fig = go.Figure()
    for col, name, color in [
        ("lines_added",      "Lines added",      COLOR_LINES),
        ("weighted_commits", "Weighted commits", COLOR_COMMITS),
    ]:
        fig.add_trace(go.Bar(
            y=df["contributor"], x=df[col],
            name=name, orientation="h",
            marker_color=color, opacity=0.85,
            hovertemplate=f"{name}: %{{x:.0f}}<extra>%{{y}}</extra>",
        ))
    fig.update_layout(
        barmode="stack",
        xaxis=dict(title="Impact (stacked)"),
        yaxis=dict(title="", tickfont_size=11),
        legend=dict(orientation="h", y=1.05, x=0),
        margin=dict(t=40, b=40, l=120, r=20),
        height=max(300, min(top_n, len(df)) * 28),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        xaxis_gridcolor="#2a2a3a",
    )
    return fig


# ── Lines vs commits scatter ──────────────────────────────────────────────────

def make_lines_vs_commits(scored_df: pd.DataFrame) -> go.Figure:
    fig = px.scatter(
        scored_df,
        x="commits", y="lines_added",
        size="custom_impact", color="custom_impact",
        hover_name="contributor", text="contributor",
        color_continuous_scale="YlOrRd",
        size_max=30,
        labels={
            "commits": "Commits", "lines_added": "Lines added",
            "custom_impact": "Impact",
        },
        height=420,
    )
    fig.update_traces(textposition="top center", textfont_size=9)
    fig.update_layout(
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        xaxis=dict(gridcolor="#2a2a3a"),
        yaxis=dict(gridcolor="#2a2a3a"),
        margin=dict(t=30, b=40, l=40, r=20),
        coloraxis_colorbar=dict(title="Impact"),
    )
    return fig


# ── Per-file lines for one contributor ────────────────────────────────────────

def make_files_chart(files_df: pd.DataFrame, contributor: str, top_n: int = 20) -> go.Figure:
    df = (
        files_df[files_df["contributor"] == contributor]
        .sort_values("lines_added", ascending=False)
        .head(top_n)
        .iloc[::-1]
    )
    fig = go.Figure(go.Bar(
        y=df["file_path"], x=df["lines_added"],
        orientation="h",
        marker_color=COLOR_IMPACT,
        hovertemplate="%{y}<br>+%{x} lines<extra></extra>",
    ))
    fig.update_layout(
        xaxis_title="Lines added",
        yaxis=dict(title="", tickfont_size=10),
        margin=dict(t=20, b=40, l=220, r=20),
        height=max(260, len(df) * 24),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        xaxis_gridcolor="#2a2a3a",
    )
    return fig
