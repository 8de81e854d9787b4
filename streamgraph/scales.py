from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import numpy as np
import pandas as pd

from streamgraph.data import Dataset
from streamgraph.errors import EmptyDatasetError
from streamgraph.stack import Layer

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _tick_spec(start: float, stop: float, count: float) -> Tuple[int, int, float]:
    step = (stop - start) / max(0.0, count)
    power = math.floor(math.log10(step))
    error = step / (10 ** power)
    factor = 10 if error >= _E10 else 5 if error >= _E5 else 2 if error >= _E2 else 1
    if power < 0:
        inc = (10 ** -power) / factor
        i1, i2 = math.floor(start * inc + 0.5), math.floor(stop * inc + 0.5)
        if i1 / inc < start:
            i1 += 1
        if i2 / inc > stop:
            i2 -= 1
        inc = -inc
    else:
        inc = (10 ** power) * factor
        i1, i2 = math.floor(start / inc + 0.5), math.floor(stop / inc + 0.5)
        if i1 * inc < start:
            i1 += 1
        if i2 * inc > stop:
            i2 -= 1
    if i2 < i1 and 0.5 <= count < 2:
        return _tick_spec(start, stop, count * 2)
    return int(i1), int(i2), float(inc)


def nice_ticks(start: float, stop: float, count: int = 10) -> List[float]:
    """Evenly spaced round values (1, 2 or 5 times a power of ten) covering [start, stop]."""
    if not count > 0 or not (math.isfinite(start) and math.isfinite(stop)):
        return []
    if start == stop:
        return [float(start)]
    reverse = stop < start
    if reverse:
        start, stop = stop, start
    i1, i2, inc = _tick_spec(start, stop, count)
    if i2 < i1:
        return []
    if inc < 0:
        ticks = [(i1 + i) / -inc for i in range(i2 - i1 + 1)]
    else:
        ticks = [(i1 + i) * inc for i in range(i2 - i1 + 1)]
    return ticks[::-1] if reverse else ticks


def _scalar_or_array(out: np.ndarray) -> Any:
    return float(out) if out.ndim == 0 else out


@dataclass(frozen=True)
class Tick:
    value: Any
    position: float
    label: str


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]
    clamp: bool = False

    @property
    def degenerate(self) -> bool:
        return self.domain[0] == self.domain[1]

    def __call__(self, value: Any) -> Any:
        d0, d1 = self.domain
        r0, r1 = self.range
        arr = np.asarray(value, dtype=float)
        if self.degenerate:
            return _scalar_or_array(np.full_like(arr, (r0 + r1) / 2.0))
        t = (arr - d0) / (d1 - d0)
        if self.clamp:
            t = np.clip(t, 0.0, 1.0)
        return _scalar_or_array(r0 + t * (r1 - r0))

    def invert(self, value: Any) -> Any:
        d0, d1 = self.domain
        r0, r1 = self.range
        arr = np.asarray(value, dtype=float)
        if r0 == r1:
            return _scalar_or_array(np.full_like(arr, (d0 + d1) / 2.0))
        t = (arr - r0) / (r1 - r0)
        if self.clamp:
            t = np.clip(t, 0.0, 1.0)
        return _scalar_or_array(d0 + t * (d1 - d0))

    def ticks(self, count: int = 10) -> List[Tick]:
        return [Tick(value=v, position=float(self(v)), label=f"{v:g}") for v in nice_ticks(self.domain[0], self.domain[1], count)]


def _to_ns(value: Any) -> np.ndarray:
    if isinstance(value, (pd.DatetimeIndex, pd.Series, list, tuple, np.ndarray)):
        return pd.DatetimeIndex(pd.to_datetime(value)).asi8.astype(float)
    return np.asarray(float(pd.Timestamp(value).value))


@dataclass(frozen=True)
class TimeScale:
    domain: Tuple[pd.Timestamp, pd.Timestamp]
    range: Tuple[float, float]
    clamp: bool = False

    @property
    def _linear(self) -> LinearScale:
        return LinearScale(
            domain=(float(self.domain[0].value), float(self.domain[1].value)),
            range=self.range,
            clamp=self.clamp,
        )

    def __call__(self, value: Any) -> Any:
        return self._linear(_to_ns(value))

    def invert(self, value: Any) -> Any:
        ns = self._linear.invert(value)
        if isinstance(ns, np.ndarray):
            return pd.to_datetime(ns.astype("int64"))
        return pd.Timestamp(int(ns))

    def month_ticks(self, fmt: str = "%b") -> List[Tick]:
        """One tick per month start inside the domain."""
        months = pd.date_range(start=self.domain[0], end=self.domain[1], freq="MS")
        return [Tick(value=m, position=float(self(m)), label=m.strftime(fmt)) for m in months]


@dataclass(frozen=True)
class BandScale:
    """Ordinal scale splitting the range into equal bands, one per domain entry."""

    domain: Tuple[Any, ...]
    range: Tuple[float, float]
    padding: float = 0.1
    align: float = 0.5

    @property
    def step(self) -> float:
        r0, r1 = self.range
        n = len(self.domain)
        return (max(r0, r1) - min(r0, r1)) / max(1.0, n - self.padding + self.padding * 2)

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    def positions(self) -> List[float]:
        r0, r1 = self.range
        start, stop = min(r0, r1), max(r0, r1)
        n = len(self.domain)
        step = self.step
        start += (stop - start - step * (n - self.padding)) * self.align
        values = [start + step * i for i in range(n)]
        return values[::-1] if r1 < r0 else values

    def __call__(self, item: Any) -> float:
        try:
            idx = list(self.domain).index(item)
        except ValueError:
            raise KeyError(item) from None
        return self.positions()[idx]


@dataclass(frozen=True)
class Scales:
    time_to_x: TimeScale
    value_to_y: LinearScale


def value_extent(layers: Sequence[Layer]) -> Tuple[float, float]:
    if not layers:
        return 0.0, 0.0
    lo = min(float(np.min(layer.baseline)) for layer in layers)
    hi = max(float(np.max(layer.topline)) for layer in layers)
    return lo, hi


def make_scales(dataset: Dataset, layers: Sequence[Layer], width: float, height: float) -> Scales:
    if dataset.empty:
        raise EmptyDatasetError("cannot scale an empty dataset")
    dates = dataset.dates
    time_to_x = TimeScale(domain=(dates.min(), dates.max()), range=(0.0, float(width)))
    value_to_y = LinearScale(domain=value_extent(layers), range=(float(height), 0.0))
    return Scales(time_to_x=time_to_x, value_to_y=value_to_y)
