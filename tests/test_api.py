"""HTTP API tests using FastAPI's TestClient with a fresh session per test."""

import pytest
from fastapi.testclient import TestClient

import api.main
from streamgraph.session import ChartSession

from tests.conftest import SEASONAL_CSV


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(api.main, "session", ChartSession())
    return TestClient(api.main.app)


def _upload(client, text, name="data.csv"):
    return client.post("/upload", files={"file": (name, text.encode("utf-8"), "text/csv")})


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "generation": 0, "has_chart": False}


def test_upload_ok(client):
    resp = _upload(client, SEASONAL_CSV)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["keys"] == ["Coffee", "Tea", "Juice"]
    assert len(body["records"]) == 5
    assert [layer["color"] for layer in body["layers"]] == ["#e41a1c", "#377eb8", "#4daf4a"]
    assert "vconcat" in body["vega_spec"]
    assert client.get("/health").json()["has_chart"] is True


def test_upload_with_bom(client):
    resp = client.post("/upload", files={"file": ("d.csv", ("\ufeff" + SEASONAL_CSV).encode("utf-8"), "text/csv")})
    assert resp.json()["keys"] == ["Coffee", "Tea", "Juice"]


def test_upload_parse_error(client):
    resp = _upload(client, "Date,A\n2024-01-01,abc\n")
    assert resp.status_code == 422
    body = resp.json()
    assert body["type"] == "ParseError"
    assert body["line"] == 2
    assert body["column"] == "A"


def test_upload_not_utf8(client):
    resp = client.post("/upload", files={"file": ("d.csv", b"\xff\xfe\x00D", "text/csv")})
    assert resp.status_code == 422


def test_upload_empty(client):
    _upload(client, SEASONAL_CSV)
    resp = _upload(client, "Date,A,B\n")
    assert resp.status_code == 200
    assert resp.json() == {"status": "empty", "keys": ["A", "B"]}
    assert client.get("/chart.svg").status_code == 404


def test_chart_svg(client):
    assert client.get("/chart.svg").status_code == 404
    _upload(client, SEASONAL_CSV)
    resp = client.get("/chart.svg")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("image/svg+xml")
    assert 'data-key="Juice"' in resp.text


def test_hover_roundtrip(client):
    _upload(client, SEASONAL_CSV)
    resp = client.get("/hover/Tea", params={"x": 300, "y": 100})
    assert resp.status_code == 200
    body = resp.json()
    assert body["key"] == "Tea"
    assert body["color"] == "#377eb8"
    assert body["anchor"] == [180.0, 105.0]
    assert [p["value"] for p in body["series"]] == [5.0, 4.0, 6.0, 3.0, 9.0]
    assert len(body["bars"]) == 5
    assert body["svg"].startswith("<svg")

    assert client.delete("/hover").json() == {"visible": False}


def test_hover_unknown_key(client):
    assert client.get("/hover/Tea").status_code == 404
    _upload(client, SEASONAL_CSV)
    assert client.get("/hover/Nope").status_code == 404


def test_config_rebuilds_chart(client):
    _upload(client, SEASONAL_CSV)
    resp = client.post("/config", json={"width": 1000, "palette": ["#111111", "#222222"]})
    assert resp.status_code == 200
    assert resp.json()["width"] == 1000
    svg = client.get("/chart.svg").text
    assert 'width="1000"' in svg
    assert "#111111" in svg
