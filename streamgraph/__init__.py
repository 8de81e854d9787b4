"""Core (UI-agnostic) streamgraph logic.

This package contains:
- CSV parsing (text -> Dataset)
- wiggle stacking, scales, layer paths and legend layout
- hover detail state and mini bar chart geometry
- draw steps (static SVG, Altair -> Vega-Lite spec dict)
"""

from __future__ import annotations

from streamgraph.data import Dataset, Record, parse_csv
from streamgraph.errors import EmptyDatasetError, ParseError, StaleUploadError, StreamgraphError
from streamgraph.hover import compute_hover_series
from streamgraph.render import render_layers
from streamgraph.scales import make_scales
from streamgraph.stack import Layer, build_stack

__all__ = [
    "Dataset",
    "EmptyDatasetError",
    "Layer",
    "ParseError",
    "Record",
    "StaleUploadError",
    "StreamgraphError",
    "build_stack",
    "compute_hover_series",
    "make_scales",
    "parse_csv",
    "render_layers",
]
