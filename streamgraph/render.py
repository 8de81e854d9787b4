from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from streamgraph.config import PALETTE
from streamgraph.scales import Scales
from streamgraph.stack import Layer

Point = Tuple[float, float]

# tension 0: control points sit a sixth of the neighbour chord away from each sample
CARDINAL_K = 1.0 / 6.0


def color_for(index: int, palette: Sequence[str] = PALETTE) -> str:
    return palette[index % len(palette)]


def fmt_num(value: float) -> str:
    out = f"{float(value):.3f}".rstrip("0").rstrip(".")
    return "0" if out in ("-0", "") else out


def _pt(p: Point) -> str:
    return f"{fmt_num(p[0])},{fmt_num(p[1])}"


def cardinal_segments(points: Sequence[Point], k: float = CARDINAL_K) -> List[str]:
    """Path commands continuing a cardinal spline from points[0] through every point.

    The curve passes through each sample; the endpoints mirror their neighbour so
    the first and last control points coincide with the endpoints.
    """
    n = len(points)
    if n < 2:
        return []
    if n == 2:
        return [f"L{_pt(points[1])}"]
    pts = np.asarray(points, dtype=float)
    out: List[str] = []
    for i in range(n - 1):
        p0 = pts[i - 1] if i > 0 else pts[i + 1]
        p1, p2 = pts[i], pts[i + 1]
        p3 = pts[i + 2] if i + 2 < n else pts[i]
        c1 = p1 + k * (p2 - p0)
        c2 = p2 - k * (p3 - p1)
        out.append(f"C{_pt(c1)},{_pt(c2)},{_pt(p2)}")
    return out


def cardinal_path(points: Sequence[Point]) -> str:
    if not len(points):
        return ""
    return "".join([f"M{_pt(points[0])}", *cardinal_segments(points)])


def area_path(top: Sequence[Point], bottom: Sequence[Point]) -> str:
    """Closed region: `top` left to right, then `bottom` right to left."""
    if not len(top):
        return ""
    back = list(bottom)[::-1]
    parts = [f"M{_pt(top[0])}", *cardinal_segments(top), f"L{_pt(back[0])}", *cardinal_segments(back), "Z"]
    return "".join(parts)


@dataclass(frozen=True)
class LayerPath:
    key: str
    index: int
    color: str
    d: str
    top: Tuple[Point, ...] = ()
    bottom: Tuple[Point, ...] = ()

    def hover_payload(self) -> Tuple[str, str]:
        return self.key, self.color


def render_layers(layers: Sequence[Layer], scales: Scales, palette: Sequence[str] = PALETTE) -> List[LayerPath]:
    out: List[LayerPath] = []
    for layer in layers:
        if len(layer) == 0:
            out.append(LayerPath(key=layer.key, index=layer.index, color=color_for(layer.index, palette), d=""))
            continue
        xs = np.atleast_1d(scales.time_to_x(layer.dates))
        y_top = np.atleast_1d(scales.value_to_y(layer.topline))
        y_bottom = np.atleast_1d(scales.value_to_y(layer.baseline))
        top = tuple((float(x), float(y)) for x, y in zip(xs, y_top))
        bottom = tuple((float(x), float(y)) for x, y in zip(xs, y_bottom))
        out.append(
            LayerPath(
                key=layer.key,
                index=layer.index,
                color=color_for(layer.index, palette),
                d=area_path(top, bottom),
                top=top,
                bottom=bottom,
            )
        )
    return out
