from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, File, Query, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import BarModel, ChartConfigModel, HoverPointModel, HoverResponse, ParseErrorResponse
from streamgraph.charts import build_streamgraph_chart, to_vega_spec
from streamgraph.config import normalize_config
from streamgraph.errors import EmptyDatasetError, ParseError, StaleUploadError
from streamgraph.pipeline import chart_payload
from streamgraph.session import ChartSession
from streamgraph.svg import render_hover_svg, render_svg


app = FastAPI(title="Streamgraph API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

session = ChartSession()


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        )
    )


def _error(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/health")
def health():
    return {"status": "ok", "generation": session.generation, "has_chart": session.chart is not None}


@app.post("/config")
def set_config(config: ChartConfigModel):
    session.reconfigure(normalize_config(config.model_dump()))
    return _json({"width": session.config.width, "height": session.config.height, "palette": list(session.config.palette)})


@app.post("/upload")
async def upload(file: UploadFile = File(...)):
    token = session.begin_upload()
    try:
        raw = await file.read()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"file is not UTF-8 text: {exc.reason}") from exc
        chart = session.complete_upload(token, text)
        spec = to_vega_spec(build_streamgraph_chart(chart, session.config))
        return _json({"status": "ok", **chart_payload(chart), "vega_spec": spec})
    except StaleUploadError as exc:
        logger.debug("discarding superseded upload: %s", exc)
        return _json({"status": "superseded"})
    except ParseError as exc:
        body = ParseErrorResponse(error=str(exc), type=type(exc).__name__, line=exc.line, column=exc.column)
        return JSONResponse(status_code=422, content=body.model_dump())
    except EmptyDatasetError:
        keys = list(session.dataset.keys) if session.dataset is not None else []
        return _json({"status": "empty", "keys": keys})
    except Exception as exc:
        logger.exception("upload failed")
        return _error(500, exc)


@app.get("/chart.svg")
def chart_svg():
    if session.chart is None:
        return JSONResponse(status_code=404, content={"error": "no chart loaded", "type": "NotFound"})
    return Response(content=render_svg(session.chart, session.config), media_type="image/svg+xml")


@app.get("/hover/{key}")
def hover(key: str, x: float = Query(default=0.0), y: float = Query(default=0.0)):
    try:
        visible = session.enter(key, (x, y))
        if visible is None:
            return JSONResponse(status_code=404, content={"error": f"unknown category {key!r}", "type": "NotFound"})
        detail = session.hover_detail()
        response = HoverResponse(
            key=visible.category,
            color=visible.color,
            anchor=list(visible.anchor),
            series=[HoverPointModel(date=p.date.isoformat(), value=p.value) for p in detail.series],
            bars=[
                BarModel(index=b.index, date=b.date.isoformat(), value=b.value, x=b.x, y=b.y, width=b.width, height=b.height)
                for b in detail.bars
            ],
            svg=render_hover_svg(detail),
        )
        return _json(response.model_dump())
    except Exception as exc:
        logger.exception("hover failed")
        return _error(500, exc)


@app.delete("/hover")
def hover_clear():
    session.leave()
    return {"visible": False}


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="127.0.0.1", port=8000)
