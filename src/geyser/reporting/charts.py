"""Chart generation using Plotly."""

from typing import List

import plotly.graph_objects as go

from ..engine.accounting import GeyserState
from ..engine.events import Event, TokensClaimed

THEME = {
    "text": "#e8eaed",
    "text_secondary": "#9aa0a6",
    "grid": "rgba(30, 33, 36, 0.8)",
    "cyan": "#00d4ff",
    "cyan_fill": "rgba(0, 212, 255, 0.12)",
    "amber": "#ffab00",
    "amber_fill": "rgba(255, 171, 0, 0.12)",
    "green": "#00e676",
}

SECONDS_PER_DAY = 86400


def apply_dark_layout(fig: go.Figure, title: str, x_title: str, y_title: str, showlegend: bool = True) -> None:
    """Apply dark theme layout for charts."""
    fig.update_layout(
        title={
            "text": title,
            "x": 0,
            "xanchor": "left",
            "font": {"size": 11, "color": THEME["text_secondary"]}
        },
        xaxis_title=x_title,
        yaxis_title=y_title,
        hovermode="x unified",
        template="plotly_dark",
        height=340,
        margin=dict(l=50, r=20, t=40, b=40),
        showlegend=showlegend,
        legend=dict(orientation="h", yanchor="bottom", y=1.02, xanchor="left", x=0),
        plot_bgcolor="rgba(8, 9, 10, 1)",
        paper_bgcolor="rgba(8, 9, 10, 1)",
        font={"color": THEME["text"], "size": 11},
        xaxis=dict(gridcolor=THEME["grid"], zerolinecolor=THEME["grid"]),
        yaxis=dict(gridcolor=THEME["grid"], zerolinecolor=THEME["grid"]),
    )


def create_pool_chart(states: List[GeyserState], decimals: int = 18) -> go.Figure:
    """Locked, unlocked and staked balances over time (days since first state)."""
    if not states:
        fig = go.Figure()
        apply_dark_layout(fig, "POOL BALANCES", "Days", "Tokens")
        return fig

    start = states[0].t
    scale = 10**decimals
    days = [(s.t - start) / SECONDS_PER_DAY for s in states]

    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=days, y=[s.total_locked / scale for s in states],
        name="Locked", mode="lines",
        line=dict(color=THEME["amber"], width=2),
        fill="tozeroy", fillcolor=THEME["amber_fill"],
    ))
    fig.add_trace(go.Scatter(
        x=days, y=[s.total_unlocked / scale for s in states],
        name="Unlocked", mode="lines",
        line=dict(color=THEME["cyan"], width=2),
        fill="tozeroy", fillcolor=THEME["cyan_fill"],
    ))
    fig.add_trace(go.Scatter(
        x=days, y=[s.total_staked / scale for s in states],
        name="Staked", mode="lines",
        line=dict(color=THEME["green"], width=2, dash="dot"),
    ))
    apply_dark_layout(fig, "POOL BALANCES", "Days", "Tokens")
    return fig


def create_claims_chart(events: List[Event], decimals: int = 18) -> go.Figure:
    """Total reward claimed per account."""
    totals = {}
    for event in events:
        if isinstance(event, TokensClaimed):
            totals[event.user] = totals.get(event.user, 0) + event.amount

    scale = 10**decimals
    accounts = sorted(totals)
    fig = go.Figure(go.Bar(
        x=accounts,
        y=[totals[a] / scale for a in accounts],
        marker_color=THEME["cyan"],
    ))
    apply_dark_layout(fig, "REWARDS CLAIMED", "Account", "Tokens", showlegend=False)
    return fig
