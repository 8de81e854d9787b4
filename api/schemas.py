from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from streamgraph.config import PALETTE


class MarginsModel(BaseModel):
    top: int = 20
    right: int = 300
    bottom: int = 50
    left: int = 50


class HoverConfigModel(BaseModel):
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


class ChartConfigModel(BaseModel):
    width: int = 800
    height: int = 400
    margins: MarginsModel = Field(default_factory=MarginsModel)
    palette: List[str] = Field(default_factory=lambda: list(PALETTE))
    hover: HoverConfigModel = Field(default_factory=HoverConfigModel)


class ParseErrorResponse(BaseModel):
    error: str
    type: str
    line: Optional[int] = None
    column: Optional[str] = None


class HoverPointModel(BaseModel):
    date: str
    value: float


class BarModel(BaseModel):
    index: int
    date: str
    value: float
    x: float
    y: float
    width: float
    height: float


class HoverResponse(BaseModel):
    key: str
    color: str
    anchor: List[float]
    series: List[HoverPointModel]
    bars: List[BarModel]
    svg: str
