from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

PALETTE: Tuple[str, ...] = ("#e41a1c", "#377eb8", "#4daf4a", "#984ea3", "#ff7f00")


@dataclass(frozen=True)
class Margins:
    top: int = 20
    right: int = 300
    bottom: int = 50
    left: int = 50


@dataclass(frozen=True)
class HoverConfig:
    width: int = 240
    height: int = 150
    panel_padding: int = 50
    band_start: int = 30
    top_padding: int = 20
    band_padding: float = 0.1
    y_ticks: int = 5
    offset_x: int = -120
    offset_y: int = 5
    duration_ms: int = 500
    background: str = "#f0f0f0"


@dataclass(frozen=True)
class ChartConfig:
    width: int = 800
    height: int = 400
    margins: Margins = field(default_factory=Margins)
    palette: Tuple[str, ...] = PALETTE
    axis_offset: int = 5
    legend_x_offset: int = 10
    legend_y_offset: int = 20
    legend_base_y: int = 200
    legend_step: int = 25
    legend_swatch: int = 20
    legend_font_size: int = 12
    hover: HoverConfig = field(default_factory=HoverConfig)

    @property
    def inner_width(self) -> int:
        return max(0, self.width - self.margins.left - self.margins.right)

    @property
    def inner_height(self) -> int:
        return max(0, self.height - self.margins.top - self.margins.bottom)


def _as_int(value: object, default: int, *, lo: Optional[int] = None, hi: Optional[int] = None) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        out = default
    if lo is not None:
        out = max(lo, out)
    if hi is not None:
        out = min(hi, out)
    return out


def _as_palette(values: Optional[Iterable[object]]) -> Tuple[str, ...]:
    if not values:
        return PALETTE
    out = tuple(str(v).strip() for v in values if v is not None and str(v).strip())
    return out or PALETTE


def normalize_config(raw: Optional[dict] = None) -> ChartConfig:
    raw = raw or {}
    defaults = ChartConfig()

    m = raw.get("margins") or {}
    margins = Margins(
        top=_as_int(m.get("top"), defaults.margins.top, lo=0),
        right=_as_int(m.get("right"), defaults.margins.right, lo=0),
        bottom=_as_int(m.get("bottom"), defaults.margins.bottom, lo=0),
        left=_as_int(m.get("left"), defaults.margins.left, lo=0),
    )

    h = raw.get("hover") or {}
    hd = defaults.hover
    try:
        band_padding = float(h.get("band_padding", hd.band_padding))
    except Exception:
        band_padding = hd.band_padding
    hover = HoverConfig(
        width=_as_int(h.get("width"), hd.width, lo=1),
        height=_as_int(h.get("height"), hd.height, lo=1),
        panel_padding=_as_int(h.get("panel_padding"), hd.panel_padding, lo=0),
        band_start=_as_int(h.get("band_start"), hd.band_start, lo=0),
        top_padding=_as_int(h.get("top_padding"), hd.top_padding, lo=0),
        band_padding=max(0.0, min(1.0, band_padding)),
        y_ticks=_as_int(h.get("y_ticks"), hd.y_ticks, lo=1, hi=20),
        offset_x=_as_int(h.get("offset_x"), hd.offset_x),
        offset_y=_as_int(h.get("offset_y"), hd.offset_y),
        duration_ms=_as_int(h.get("duration_ms"), hd.duration_ms, lo=0, hi=10_000),
        background=str(h.get("background") or hd.background),
    )

    return ChartConfig(
        width=_as_int(raw.get("width"), defaults.width, lo=1, hi=10_000),
        height=_as_int(raw.get("height"), defaults.height, lo=1, hi=10_000),
        margins=margins,
        palette=_as_palette(raw.get("palette")),
        hover=hover,
    )
