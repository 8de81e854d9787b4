from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from streamgraph.config import ChartConfig
from streamgraph.data import Dataset
from streamgraph.errors import EmptyDatasetError
from streamgraph.legend import LegendItem, render_legend
from streamgraph.render import LayerPath, render_layers
from streamgraph.scales import Scales, Tick, make_scales
from streamgraph.stack import Layer, build_stack

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ChartModel:
    dataset: Dataset
    layers: Tuple[Layer, ...]
    scales: Scales
    paths: Tuple[LayerPath, ...]
    legend: Tuple[LegendItem, ...]
    x_ticks: Tuple[Tick, ...]
    width: int
    height: int

    @property
    def keys(self) -> Tuple[str, ...]:
        return tuple(layer.key for layer in self.layers)

    def color_of(self, key: str) -> Optional[str]:
        for path in self.paths:
            if path.key == key:
                return path.color
        return None


def build_chart(dataset: Dataset, config: ChartConfig = ChartConfig(), keys: Optional[Sequence[str]] = None) -> ChartModel:
    if dataset.empty:
        raise EmptyDatasetError("no records to chart")
    keys = list(dataset.keys if keys is None else keys)
    width, height = config.inner_width, config.inner_height

    layers = build_stack(dataset, keys)
    scales = make_scales(dataset, layers, width, height)
    paths = render_layers(layers, scales, config.palette)
    legend = render_legend(keys, config)
    logger.info("built chart: %d records, %d layers", len(dataset), len(layers))
    return ChartModel(
        dataset=dataset,
        layers=tuple(layers),
        scales=scales,
        paths=tuple(paths),
        legend=tuple(legend),
        x_ticks=tuple(scales.time_to_x.month_ticks()),
        width=width,
        height=height,
    )


def chart_payload(chart: ChartModel) -> Dict[str, Any]:
    """JSON-friendly summary of a chart (records, stacked layers, paths, legend)."""
    records: List[Dict[str, Any]] = [
        {"date": r.timestamp.isoformat(), "values": r.values} for r in chart.dataset.records()
    ]
    return {
        "keys": list(chart.keys),
        "records": records,
        "width": chart.width,
        "height": chart.height,
        "value_domain": list(chart.scales.value_to_y.domain),
        "layers": [
            {
                "key": p.key,
                "color": p.color,
                "path": p.d,
                "pairs": layer.pairs(),
            }
            for layer, p in zip(chart.layers, chart.paths)
        ],
        "legend": [{"key": item.key, "color": item.color, "swatch": list(item.swatch)} for item in chart.legend],
        "x_ticks": [{"label": t.label, "position": t.position} for t in chart.x_ticks],
    }
