# src/tools/report_charts.py
from __future__ import annotations

from decimal import Decimal
from typing import Dict, Union

import plotly.graph_objects as go

from tools.report_aggregation import comparison_series, labelled

PALETTE = ["#36A2EB", "#FF6384", "#FFCE56", "#4BC0C0", "#A78BFA", "#F472B6"]
LINE_COLOR = "#6366F1"
LINE_FILL = "rgba(165, 180, 252, 0.5)"
GRID = "#e5e7eb"


def format_currency(value: Union[Decimal, float, int]) -> str:
    """$1,234.56 / -$40.00"""
    v = float(value)
    sign = "-" if v < 0 else ""
    return f"{sign}${abs(v):,.2f}"


def _layout(fig: go.Figure, title: str) -> go.Figure:
    fig.update_layout(
        title=title,
        legend=dict(orientation="h", yanchor="top", y=-0.15),
        margin=dict(l=20, r=20, t=50, b=20),
        plot_bgcolor="white",
    )
    return fig


def _floats(values) -> list[float]:
    return [float(v) for v in values]


def monthly_line(totals: Dict[str, Decimal]) -> go.Figure:
    months = list(totals)
    values = _floats(totals.values())
    fig = go.Figure()
    if months:
        fig.add_trace(go.Scatter(
            x=months,
            y=values,
            name="Total per Month",
            mode="lines+markers",
            line=dict(color=LINE_COLOR, shape="spline", smoothing=0.6),
            fill="tozeroy",
            fillcolor=LINE_FILL,
            hovertext=[format_currency(v) for v in values],
            hoverinfo="x+text",
        ))
    fig.update_xaxes(type="category", gridcolor=GRID)
    fig.update_yaxes(tickprefix="$", tickformat=",.2f", gridcolor=GRID)
    return _layout(fig, "Totals per Month")


def category_bar(totals: Dict[str, Decimal]) -> go.Figure:
    """One trace per category so each legend entry toggles on its own."""
    labels, series = comparison_series(totals)
    fig = go.Figure()
    for i, s in enumerate(series):
        values = _floats(s.values)
        fig.add_trace(go.Bar(
            x=labels,
            y=values,
            name=s.label,
            marker_color=PALETTE[i % len(PALETTE)],
            hovertext=[format_currency(v) for v in values],
            hoverinfo="name+text",
        ))
    # overlay: every other trace is zero at this slot, so each bar gets the full column
    fig.update_layout(barmode="overlay", bargap=0.05)
    fig.update_yaxes(tickprefix="$", tickformat=",.2f", gridcolor=GRID)
    return _layout(fig, "Totals by Category")


def _pie(totals: Dict[str, Decimal], title: str, hole: float) -> go.Figure:
    named = labelled(totals)
    # pie slices need magnitudes; hover shows the signed value
    values = _floats(named.values())
    fig = go.Figure()
    if named:
        fig.add_trace(go.Pie(
            labels=list(named),
            values=[abs(v) for v in values],
            hole=hole,
            marker=dict(colors=[PALETTE[i % len(PALETTE)] for i in range(len(named))]),
            hovertext=[format_currency(v) for v in values],
            hoverinfo="label+text+percent",
            sort=False,
        ))
    return _layout(fig, title)


def income_pie(totals: Dict[str, Decimal]) -> go.Figure:
    return _pie(totals, "Income by Category", hole=0.0)


def expense_doughnut(totals: Dict[str, Decimal]) -> go.Figure:
    return _pie(totals, "Expenses by Category", hole=0.5)
