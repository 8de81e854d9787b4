from __future__ import annotations

from html import escape
from typing import List, Optional

from streamgraph.config import ChartConfig
from streamgraph.hover import HoverDetail, animate_bars
from streamgraph.legend import legend_origin
from streamgraph.pipeline import ChartModel
from streamgraph.render import fmt_num


def _axis_bottom(chart: ChartModel, y: float) -> List[str]:
    out = [f'<g class="x-axis" transform="translate(0,{fmt_num(y)})">']
    out.append(f'<path class="domain" stroke="currentColor" d="M0,6V0H{fmt_num(chart.width)}V6"/>')
    for tick in chart.x_ticks:
        out.append(
            f'<g class="tick" transform="translate({fmt_num(tick.position)},0)">'
            f'<line stroke="currentColor" y2="6"/>'
            f'<text fill="currentColor" y="9" dy="0.71em" text-anchor="middle">{escape(tick.label)}</text></g>'
        )
    out.append("</g>")
    return out


def render_svg(chart: ChartModel, config: ChartConfig = ChartConfig()) -> str:
    """Static SVG document for the full logical canvas: axis, layers and legend."""
    m = config.margins
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{config.width}" height="{config.height}" '
        f'viewBox="0 0 {config.width} {config.height}">',
        f'<g transform="translate({m.left},{m.top})">',
    ]
    parts.extend(_axis_bottom(chart, chart.height + config.axis_offset))
    for path in chart.paths:
        parts.append(f'<path class="layer" data-key="{escape(path.key)}" d="{path.d}" style="fill: {path.color}"/>')

    lx, ly = legend_origin(config)
    parts.append(f'<g class="legend" transform="translate({fmt_num(lx)}, {fmt_num(ly)})">')
    for item in chart.legend:
        x, y, w, h = item.swatch
        parts.append(
            f'<rect x="{fmt_num(x)}" y="{fmt_num(y)}" width="{fmt_num(w)}" height="{fmt_num(h)}" style="fill: {item.color}"/>'
        )
        parts.append(
            f'<text x="{fmt_num(item.label_pos[0])}" y="{fmt_num(item.label_pos[1])}" '
            f'style="font-size: {config.legend_font_size}px; alignment-baseline: middle">{escape(item.key)}</text>'
        )
    parts.append("</g></g></svg>")
    return "".join(parts)


def render_hover_svg(detail: HoverDetail, elapsed_ms: Optional[float] = None) -> str:
    """Mini bar chart for the hover panel; `elapsed_ms` picks an animation frame."""
    w, h = detail.panel_size
    bars = detail.bars if elapsed_ms is None else animate_bars(detail, elapsed_ms)
    parts = [f'<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" style="background-color: {detail.background}">']
    parts.append(f'<g class="x-axis" transform="translate(0,{fmt_num(detail.axis_y)})">')
    for tick in detail.x_ticks:
        parts.append(
            f'<g class="tick" transform="translate({fmt_num(tick.position)},0)"><line stroke="currentColor" y2="6"/>'
            f'<text fill="currentColor" y="9" dy="0.71em" text-anchor="middle">{escape(tick.label)}</text></g>'
        )
    parts.append("</g>")
    parts.append(f'<g class="y-axis" transform="translate({fmt_num(detail.x_scale.range[0])},0)">')
    for tick in detail.y_ticks:
        parts.append(
            f'<g class="tick" transform="translate(0,{fmt_num(tick.position)})"><line stroke="currentColor" x2="-6"/>'
            f'<text fill="currentColor" x="-9" dy="0.32em" text-anchor="end">{escape(tick.label)}</text></g>'
        )
    parts.append("</g>")
    for bar in bars:
        parts.append(
            f'<rect class="bar" x="{fmt_num(bar.x)}" y="{fmt_num(bar.y)}" width="{fmt_num(bar.width)}" '
            f'height="{fmt_num(bar.height)}" style="fill: {detail.color}"/>'
        )
    parts.append("</svg>")
    return "".join(parts)
