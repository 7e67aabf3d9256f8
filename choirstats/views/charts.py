"""
ChoirStats - Statistics Charts

Plotly figures for the region breakdown and the home/other split.
"""

import logging
from typing import Any, Dict, List, Mapping

import plotly.graph_objects as go

from choirstats.models.aggregates import RegionCount, WindowStatistics


logger = logging.getLogger(__name__)


COLORS = {
    "home": "#4A90E2",
    "other": "#34C759",
    "background": "#1a1a1a",
    "accent": "#FFD700"
}


def region_breakdown(by_city: Mapping[str, RegionCount], total: int) -> List[Dict[str, Any]]:
    """
    Rows for a region list, largest first.

    Args:
        by_city: Region breakdown
        total: Total concerts used for the share (0 gives 0% everywhere)

    Returns:
        List of dicts with region, count, color and share_pct
    """
    rows = [
        {
            "region": region,
            "count": entry.count,
            "color": entry.color,
            "share_pct": round(entry.count / total * 100, 1) if total else 0.0
        }
        for region, entry in by_city.items()
    ]
    # Ties keep alphabetical order so output is stable
    rows.sort(key=lambda row: (-row["count"], row["region"]))
    return rows


def build_region_chart(by_city: Mapping[str, RegionCount], title: str = "") -> go.Figure:
    """Build a horizontal bar chart of concerts per region."""
    total = sum(entry.count for entry in by_city.values())
    rows = region_breakdown(by_city, total)
    if not rows:
        rows = [{"region": "Нет данных", "count": 0, "color": "#888888", "share_pct": 0.0}]

    # Plotly draws the first category at the bottom, so reverse for largest on top
    rows = list(reversed(rows))

    fig = go.Figure(data=[
        go.Bar(
            x=[row["count"] for row in rows],
            y=[row["region"] for row in rows],
            orientation="h",
            marker_color=[row["color"] for row in rows],
            customdata=[row["share_pct"] for row in rows],
            hovertemplate="<b>%{y}</b><br>Концертов: %{x}<br>Доля: %{customdata}%<extra></extra>"
        )
    ])

    fig.update_layout(
        template="plotly_dark",
        title=title or None,
        margin=dict(l=160, r=20, t=40 if title else 20, b=40),
        xaxis_title="Концертов",
        paper_bgcolor=COLORS["background"]
    )
    return fig


def build_home_other_chart(windows: WindowStatistics, home_label: str) -> go.Figure:
    """Build a grouped bar chart of home vs. other counts per window."""
    window_names = ["Месяц", "Квартал", "4 месяца"]
    counts = [windows.monthly, windows.quarterly, windows.last_4_months]

    fig = go.Figure(data=[
        go.Bar(
            name=home_label,
            x=window_names,
            y=[count.home_count for count in counts],
            marker_color=COLORS["home"]
        ),
        go.Bar(
            name="Другие регионы",
            x=window_names,
            y=[count.other_count for count in counts],
            marker_color=COLORS["other"]
        )
    ])

    fig.update_layout(
        template="plotly_dark",
        barmode="group",
        margin=dict(l=40, r=20, t=20, b=40),
        yaxis_title="Концертов",
        paper_bgcolor=COLORS["background"]
    )
    return fig
