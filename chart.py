"""Altair chart of the current weight distribution."""
from __future__ import annotations

import json
from typing import Sequence

import altair as alt
import pandas as pd

from engine import TOTAL_WEIGHT, Item, round_half_up

UNLOCKED_COLOR = "#ff007f"
LOCKED_COLOR = "#f59e0b"
REFERENCE_COLOR = "#666666"


def build_chart_frame(items: Sequence[Item]) -> pd.DataFrame:
    """One row per item, in presentation order."""
    return pd.DataFrame(
        {
            "position": list(range(len(items))),
            "name": [item.name for item in items],
            "weight": [item.weight for item in items],
            "locked": [item.locked for item in items],
            "status": ["Locked (fixed)" if item.locked else "Unlocked (adjustable)" for item in items],
        }
    )


def equal_share(items: Sequence[Item]) -> float:
    return TOTAL_WEIGHT / len(items) if items else 0.0


def build_weight_chart(items: Sequence[Item], height: int = 340) -> alt.LayerChart:
    """
    Layered chart: curve through the weights, lock-coloured points and a
    dashed reference rule at the equal share.
    """
    frame = build_chart_frame(items)
    # Label the ordinal x positions with item names; names need not be unique
    label_expr = f"{json.dumps([item.name for item in items])}[datum.value]"
    x = alt.X(
        "position:O",
        title=None,
        axis=alt.Axis(labelExpr=label_expr, labelAngle=0),
    )
    y = alt.Y(
        "weight:Q",
        title=None,
        scale=alt.Scale(domain=(0, TOTAL_WEIGHT)),
        axis=alt.Axis(values=[0, 25, 50, 75, 100], format="d", labelExpr="datum.value + '%'"),
    )

    line = alt.Chart(frame).mark_line(
        color=UNLOCKED_COLOR, strokeWidth=3, interpolate="monotone"
    ).encode(x=x, y=y)

    points = alt.Chart(frame).mark_circle(size=160, stroke="#ffffff", strokeWidth=2, opacity=1).encode(
        x=x,
        y=y,
        color=alt.Color(
            "status:N",
            scale=alt.Scale(
                domain=["Unlocked (adjustable)", "Locked (fixed)"],
                range=[UNLOCKED_COLOR, LOCKED_COLOR],
            ),
            legend=alt.Legend(title=None, orient="top"),
        ),
        tooltip=[
            alt.Tooltip("name:N", title="Item"),
            alt.Tooltip("weight:Q", title="Weight (%)"),
            alt.Tooltip("locked:N", title="Locked"),
        ],
    )

    share = equal_share(items)
    reference = pd.DataFrame({"weight": [share], "label": [f"Equal ({round_half_up(share)}%)"]})
    rule = alt.Chart(reference).mark_rule(color=REFERENCE_COLOR, strokeDash=[6, 4]).encode(y="weight:Q")
    rule_label = alt.Chart(reference).mark_text(
        align="left", dy=-6, color="#888888", fontSize=12
    ).encode(y="weight:Q", x=alt.value(4), text="label:N")

    return alt.layer(line, points, rule, rule_label).properties(height=height)
