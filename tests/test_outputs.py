"""Tests for the chart pipeline, config normalization and the draw steps (SVG, Vega-Lite)."""

import json

import pytest

from streamgraph.charts import build_streamgraph_chart, layers_frame, to_vega_spec
from streamgraph.config import PALETTE, ChartConfig, normalize_config
from streamgraph.data import parse_csv
from streamgraph.errors import EmptyDatasetError
from streamgraph.hover import HIDDEN, build_hover_detail, hover_enter
from streamgraph.pipeline import build_chart, chart_payload
from streamgraph.svg import render_hover_svg, render_svg


class TestConfig:
    def test_defaults(self):
        config = ChartConfig()
        assert (config.width, config.height) == (800, 400)
        assert (config.margins.top, config.margins.right, config.margins.bottom, config.margins.left) == (20, 300, 50, 50)
        assert (config.inner_width, config.inner_height) == (450, 330)
        assert config.palette == PALETTE

    def test_normalize_falls_back_and_clamps(self):
        config = normalize_config({"width": "wide", "height": -5, "palette": [], "hover": {"duration_ms": 99999, "band_padding": 3}})
        assert config.width == 800
        assert config.height == 1
        assert config.palette == PALETTE
        assert config.hover.duration_ms == 10_000
        assert config.hover.band_padding == 1.0

    def test_normalize_empty(self):
        assert normalize_config(None) == ChartConfig()
        assert normalize_config({}) == ChartConfig()


class TestPipeline:
    def test_build_chart(self, seasonal_dataset):
        chart = build_chart(seasonal_dataset)
        assert chart.keys == ("Coffee", "Tea", "Juice")
        assert (chart.width, chart.height) == (450, 330)
        assert len(chart.paths) == len(chart.legend) == 3
        assert chart.color_of("Tea") == "#377eb8"
        assert chart.color_of("nope") is None

    def test_empty_dataset(self):
        with pytest.raises(EmptyDatasetError):
            build_chart(parse_csv("Date,A\n"))

    def test_payload_is_json_serializable(self, sample_dataset):
        payload = chart_payload(build_chart(sample_dataset))
        text = json.dumps(payload)
        assert payload["keys"] == ["A", "B"]
        assert payload["records"][0] == {"date": "2024-01-01T00:00:00", "values": {"A": 1.0, "B": 2.0}}
        assert payload["layers"][0]["pairs"][0] == (0.0, 1.0)
        assert "#e41a1c" in text


class TestSvg:
    def test_document(self, seasonal_dataset):
        svg = render_svg(build_chart(seasonal_dataset))
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" width="800" height="400"')
        assert '<g transform="translate(50,20)">' in svg
        assert svg.count('class="layer"') == 3
        assert 'data-key="Coffee"' in svg
        assert 'translate(0,335)' in svg
        assert ">Jan<" in svg and ">May<" in svg
        assert 'translate(460, 20)' in svg
        assert svg.endswith("</svg>")

    def test_escapes_labels(self):
        svg = render_svg(build_chart(parse_csv("Date,<b>&\n2024-01-01,1\n")))
        assert "&lt;b&gt;&amp;" in svg
        assert "<b>&" not in svg

    def test_hover_svg(self, seasonal_dataset):
        detail = build_hover_detail(seasonal_dataset, hover_enter(HIDDEN, "Tea", "#377eb8", (0.0, 0.0)))
        svg = render_hover_svg(detail)
        assert 'width="290" height="200"' in svg
        assert svg.count('class="bar"') == 5
        assert "fill: #377eb8" in svg
        first_frame = render_hover_svg(detail, elapsed_ms=0)
        assert 'height="0"' in first_frame


class TestVegaSpec:
    def test_layers_frame(self, sample_dataset):
        df = layers_frame(build_chart(sample_dataset))
        assert len(df) == 4
        assert list(df["key"]) == ["A", "A", "B", "B"]
        assert ((df["topline"] - df["baseline"]) == df["value"]).all()

    def test_spec_structure(self, seasonal_dataset):
        chart = build_chart(seasonal_dataset)
        spec = to_vega_spec(build_streamgraph_chart(chart))
        text = json.dumps(spec)
        assert len(spec["vconcat"]) == 2
        assert spec["vconcat"][0]["mark"]["type"] == "area"
        assert spec["vconcat"][0]["mark"]["interpolate"] == "cardinal"
        assert spec["vconcat"][1]["mark"]["type"] == "bar"
        assert "mouseover" in text and "mouseout" in text
        for color in PALETTE[:3]:
            assert color in text
