from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from streamgraph.data import Dataset
from streamgraph.errors import EmptyDatasetError

logger = logging.getLogger(__name__)

_OFFSET_GRID = 2.0**16


@dataclass(frozen=True, eq=False)
class Layer:
    key: str
    index: int
    dates: pd.DatetimeIndex
    values: np.ndarray
    baseline: np.ndarray
    topline: np.ndarray

    def __len__(self) -> int:
        return int(len(self.values))

    def pairs(self) -> List[tuple]:
        return [(float(b), float(t)) for b, t in zip(self.baseline, self.topline)]


def wiggle_offsets(values: np.ndarray) -> np.ndarray:
    """Per-record baseline offset minimizing the weighted wiggle of the layer midlines.

    `values` has shape (k, n): k layers stacked bottom-up, n records. For j > 0:

        s3_i = d_i / 2 + sum_{m < i} d_m        (d_i = v_i[j] - v_i[j-1])
        offset[j] = offset[j-1] - sum_i(s3_i * v_i[j]) / sum_i(v_i[j])

    offset[0] is 0 and a record with a zero column total keeps the previous offset.
    Offsets are snapped to a 2**-16 grid, so adding them to stacked integer or
    short binary-fraction values is exact and topline - baseline == value.
    """
    k, n = values.shape
    offsets = np.zeros(n, dtype=float)
    if k == 0 or n < 2:
        return offsets
    deltas = np.diff(values, axis=1)
    below = np.vstack([np.zeros((1, n - 1)), np.cumsum(deltas, axis=0)[:-1]])
    s3 = 0.5 * deltas + below
    current = values[:, 1:]
    num = (s3 * current).sum(axis=0)
    den = current.sum(axis=0)
    correction = np.divide(num, den, out=np.zeros_like(num), where=den != 0)
    offsets[1:] = -np.cumsum(correction)
    return np.round(offsets * _OFFSET_GRID) / _OFFSET_GRID


def build_stack(dataset: Dataset, keys: Optional[Sequence[str]] = None) -> List[Layer]:
    if dataset.empty:
        raise EmptyDatasetError("cannot stack an empty dataset")
    keys = list(dataset.keys if keys is None else keys)
    unknown = [k for k in keys if k not in dataset.frame.columns]
    if unknown:
        logger.debug("stacking unknown categories as zero: %s", unknown)

    values = dataset.value_matrix(keys)
    offsets = wiggle_offsets(values)
    tops = offsets + np.cumsum(values, axis=0) if len(keys) else np.zeros((0, len(dataset)))
    bottoms = np.vstack([offsets, tops[:-1]]) if len(keys) else tops

    dates = dataset.dates
    layers = [
        Layer(key=key, index=i, dates=dates, values=values[i], baseline=bottoms[i], topline=tops[i])
        for i, key in enumerate(keys)
    ]
    logger.debug("stacked %d layers over %d records", len(layers), len(dataset))
    return layers
