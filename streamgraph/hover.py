"""Hover detail: the per-category mini bar chart shown while a layer is hovered.

The floating panel is modelled as an explicit state value: `HoverHidden` or
`HoverVisible(category, color, anchor)`. Transitions are pure functions so the
UI layer only renders whatever state it currently holds.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, NamedTuple, Tuple, Union

import pandas as pd

from streamgraph.config import HoverConfig
from streamgraph.data import Dataset
from streamgraph.scales import BandScale, LinearScale, Tick


class HoverPoint(NamedTuple):
    date: pd.Timestamp
    value: float


@dataclass(frozen=True)
class HoverHidden:
    visible: bool = False


@dataclass(frozen=True)
class HoverVisible:
    category: str
    color: str
    anchor: Tuple[float, float]  # left, top
    visible: bool = True


HoverState = Union[HoverHidden, HoverVisible]
HIDDEN = HoverHidden()


@dataclass(frozen=True)
class Bar:
    index: int
    date: pd.Timestamp
    value: float
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class HoverDetail:
    category: str
    color: str
    anchor: Tuple[float, float]
    panel_size: Tuple[int, int]
    background: str
    series: Tuple[HoverPoint, ...]
    x_scale: BandScale
    y_scale: LinearScale
    bars: Tuple[Bar, ...]
    x_ticks: Tuple[Tick, ...]
    y_ticks: Tuple[Tick, ...]
    axis_y: float
    duration_ms: int


def compute_hover_series(dataset: Dataset, key: str) -> List[HoverPoint]:
    values = dataset.values(key)
    return [HoverPoint(date=ts, value=float(v)) for ts, v in zip(dataset.dates, values)]


def hover_enter(state: HoverState, key: str, color: str, pointer: Tuple[float, float], config: HoverConfig = HoverConfig()) -> HoverVisible:
    """Show the panel for `key`, anchored once at the pointer position plus the fixed offset.

    Re-entering the category that is already shown keeps the existing panel where it is.
    """
    if isinstance(state, HoverVisible) and state.category == key and state.color == color:
        return state
    anchor = (float(pointer[0]) + config.offset_x, float(pointer[1]) + config.offset_y)
    return HoverVisible(category=key, color=color, anchor=anchor)


def hover_leave() -> HoverHidden:
    return HIDDEN


def build_hover_detail(dataset: Dataset, state: HoverVisible, config: HoverConfig = HoverConfig()) -> HoverDetail:
    series = compute_hover_series(dataset, state.category)
    x_scale = BandScale(
        domain=tuple(range(len(series))),
        range=(float(config.band_start), float(config.width)),
        padding=config.band_padding,
    )
    top = max((p.value for p in series), default=0.0)
    # an all-zero category keeps zero-height bars instead of collapsing to the midpoint
    y_scale = LinearScale(domain=(0.0, top if top > 0 else 1.0), range=(float(config.height), float(config.top_padding)))

    zero_y = y_scale(0.0)
    positions = x_scale.positions()
    bars = []
    for i, point in enumerate(series):
        y = y_scale(point.value)
        bars.append(
            Bar(
                index=i,
                date=point.date,
                value=point.value,
                x=positions[i],
                y=min(y, zero_y),
                width=x_scale.bandwidth,
                height=abs(zero_y - y),
            )
        )
    x_ticks = tuple(
        Tick(value=p.date, position=positions[i] + x_scale.bandwidth / 2, label=p.date.strftime("%b"))
        for i, p in enumerate(series)
    )
    return HoverDetail(
        category=state.category,
        color=state.color,
        anchor=state.anchor,
        panel_size=(config.width + config.panel_padding, config.height + config.panel_padding),
        background=config.background,
        series=tuple(series),
        x_scale=x_scale,
        y_scale=y_scale,
        bars=tuple(bars),
        x_ticks=x_ticks,
        y_ticks=tuple(y_scale.ticks(config.y_ticks)),
        axis_y=float(config.height),
        duration_ms=config.duration_ms,
    )


def ease_cubic_in_out(t: float) -> float:
    t = min(1.0, max(0.0, t)) * 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def animate_bars(detail: HoverDetail, elapsed_ms: float) -> List[Bar]:
    """Bars as drawn `elapsed_ms` after hover-enter, growing up from the axis."""
    if detail.duration_ms <= 0:
        return list(detail.bars)
    k = ease_cubic_in_out(elapsed_ms / detail.duration_ms)
    zero_y = detail.y_scale(0.0)
    out = []
    for bar in detail.bars:
        height = bar.height * k
        y = zero_y - height if bar.y < zero_y else bar.y
        out.append(replace(bar, y=y, height=height))
    return out
