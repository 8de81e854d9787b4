from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from streamgraph.config import ChartConfig
from streamgraph.render import color_for


@dataclass(frozen=True)
class LegendItem:
    key: str
    color: str
    swatch: Tuple[float, float, float, float]  # x, y, width, height
    label_pos: Tuple[float, float]


def legend_origin(config: ChartConfig) -> Tuple[float, float]:
    """Top-left of the legend group, relative to the plot group."""
    return float(config.inner_width + config.legend_x_offset), float(config.legend_y_offset)


def render_legend(keys: Sequence[str], config: ChartConfig) -> List[LegendItem]:
    # first key at the bottom, matching the stacking order on screen
    size = config.legend_swatch
    items: List[LegendItem] = []
    for i, key in enumerate(keys):
        y = config.legend_base_y - i * config.legend_step
        items.append(
            LegendItem(
                key=key,
                color=color_for(i, config.palette),
                swatch=(10.0, float(y), float(size), float(size)),
                label_pos=(35.0, float(y + size / 2)),
            )
        )
    return items
