from __future__ import annotations

import json
from typing import Any, Dict

import altair as alt
import pandas as pd

from streamgraph.config import ChartConfig
from streamgraph.pipeline import ChartModel

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def layers_frame(chart: ChartModel) -> pd.DataFrame:
    """Long table of stacked layers: one row per (category, record)."""
    dates = chart.dataset.dates
    rows = []
    for layer in chart.layers:
        for slot, (date, value, lo, hi) in enumerate(zip(dates, layer.values, layer.baseline, layer.topline)):
            rows.append(
                {
                    "key": layer.key,
                    "order": layer.index,
                    "slot": slot,
                    "date": date,
                    "month": date.strftime("%b"),
                    "value": float(value),
                    "baseline": float(lo),
                    "topline": float(hi),
                }
            )
    return pd.DataFrame(rows, columns=["key", "order", "slot", "date", "month", "value", "baseline", "topline"])


def build_streamgraph_chart(chart: ChartModel, config: ChartConfig = ChartConfig()) -> alt.VConcatChart:
    """Streamgraph with a hover-driven detail bar chart underneath.

    Hovering a layer selects its key; the detail chart shows only that key with
    its own y scale and one ordinal slot per record.
    """
    long_df = layers_frame(chart)
    keys = list(chart.keys)
    colors = [p.color for p in chart.paths]
    color_scale = alt.Scale(domain=keys, range=colors)
    lo, hi = chart.scales.value_to_y.domain

    hover = alt.selection_point(fields=["key"], on="mouseover", clear="mouseout", empty=False)
    areas = (
        alt.Chart(long_df)
        .mark_area(interpolate="cardinal")
        .encode(
            x=alt.X("date:T", title=None, axis=alt.Axis(format="%b", tickCount="month", grid=False)),
            y=alt.Y("baseline:Q", axis=None, scale=alt.Scale(domain=[lo, hi], nice=False, zero=False)),
            y2="topline:Q",
            color=alt.Color("key:N", title=None, scale=color_scale, sort=keys),
            order=alt.Order("order:Q"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.85)),
            tooltip=[
                alt.Tooltip("key:N", title="Category"),
                alt.Tooltip("date:T", title="Date", format="%Y-%m-%d"),
                alt.Tooltip("value:Q", title="Value", format=",.2f"),
            ],
        )
        .add_params(hover)
        .properties(width=chart.width, height=chart.height)
    )

    hc = config.hover
    month_labels = json.dumps([d.strftime("%b") for d in chart.dataset.dates])
    bars = (
        alt.Chart(long_df)
        .transform_filter(hover)
        .mark_bar()
        .encode(
            x=alt.X(
                "slot:O",
                title=None,
                scale=alt.Scale(paddingInner=hc.band_padding, paddingOuter=hc.band_padding),
                axis=alt.Axis(labelExpr=f"{month_labels}[datum.value]", labelAngle=0),
            ),
            y=alt.Y("value:Q", title=None, axis=alt.Axis(tickCount=hc.y_ticks), scale=alt.Scale(zero=True)),
            color=alt.Color("key:N", scale=color_scale, legend=None),
            tooltip=[alt.Tooltip("month:N", title="Month"), alt.Tooltip("value:Q", title="Value", format=",.2f")],
        )
        .properties(width=hc.width - hc.band_start, height=hc.height - hc.top_padding)
    )
    return alt.vconcat(areas, bars).resolve_scale(x="independent", y="independent")
