from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from streamgraph.errors import ParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Record:
    timestamp: pd.Timestamp
    values: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True, eq=False)
class Dataset:
    """Ordered records of one uploaded file, in file row order.

    `frame` holds the date column first and one float column per category key.
    Instances are never mutated; a new upload produces a new Dataset.
    """

    frame: pd.DataFrame
    date_field: str
    keys: Tuple[str, ...]

    def __len__(self) -> int:
        return int(len(self.frame))

    @property
    def empty(self) -> bool:
        return len(self) == 0

    @property
    def dates(self) -> pd.DatetimeIndex:
        return pd.DatetimeIndex(self.frame[self.date_field])

    def values(self, key: str) -> np.ndarray:
        """Values of one category, with missing cells and unknown keys read as 0."""
        if key not in self.frame.columns or key == self.date_field:
            return np.zeros(len(self), dtype=float)
        series = pd.to_numeric(self.frame[key], errors="coerce").fillna(0.0)
        return series.to_numpy(dtype=float)

    def value_matrix(self, keys: Optional[Sequence[str]] = None) -> np.ndarray:
        """Shape (len(keys), len(self)) matrix of category values."""
        keys = list(self.keys if keys is None else keys)
        if not keys:
            return np.zeros((0, len(self)), dtype=float)
        return np.vstack([self.values(k) for k in keys])

    def records(self) -> List[Record]:
        out: List[Record] = []
        matrix = self.value_matrix()
        for j, ts in enumerate(self.dates):
            out.append(Record(timestamp=ts, values={k: float(matrix[i, j]) for i, k in enumerate(self.keys)}))
        return out

    @classmethod
    def from_records(cls, records: Iterable[Record], keys: Optional[Sequence[str]] = None, date_field: str = "Date") -> "Dataset":
        records = list(records)
        if keys is None:
            keys = list(records[0].values.keys()) if records else []
        rows = [{date_field: pd.Timestamp(r.timestamp), **{k: r.values.get(k, np.nan) for k in keys}} for r in records]
        frame = pd.DataFrame(rows, columns=[date_field, *keys])
        frame[date_field] = pd.to_datetime(frame[date_field])
        return cls(frame=frame, date_field=date_field, keys=tuple(keys))


def _header(raw: pd.DataFrame) -> List[str]:
    # a short header row is padded with NaN; a literal "NaN" is a real name
    header = ["" if pd.isna(h) else str(h).strip() for h in raw.iloc[0].tolist()]
    for pos, name in enumerate(header):
        if not name:
            raise ParseError("blank column name in header", line=1, column=f"#{pos + 1}")
    seen = set()
    for name in header:
        if name in seen:
            raise ParseError("duplicate column name in header", line=1, column=name)
        seen.add(name)
    return header


def _parse_dates(values: pd.Series) -> pd.Series:
    try:
        dates = pd.to_datetime(values, errors="coerce", format="mixed")
    except ValueError:
        dates = None
    if dates is None or not pd.api.types.is_datetime64_any_dtype(dates):
        # values with different UTC offsets (e.g. across a DST change) share one UTC axis
        dates = pd.to_datetime(values, errors="coerce", format="mixed", utc=True)
    return dates


def parse_csv(text: str) -> Dataset:
    """Parse comma-delimited text into a Dataset, rejecting the whole file on the first bad cell.

    The first column is the date field; every other column is a numeric category.
    Line numbers in errors count the header as line 1 and skip blank lines.
    """
    if text is None or not str(text).strip():
        raise ParseError("empty input, a header row is required", line=1)
    try:
        raw = pd.read_csv(
            io.StringIO(str(text)),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
        )
    except pd.errors.EmptyDataError as exc:
        raise ParseError("empty input, a header row is required", line=1) from exc
    except pd.errors.ParserError as exc:
        raise ParseError(f"malformed row: {exc}") from exc

    header = _header(raw)
    date_field, keys = header[0], header[1:]

    body = raw.iloc[1:].reset_index(drop=True)
    body.columns = header

    missing = body.isna()
    if missing.to_numpy().any():
        row = int(missing.any(axis=1).to_numpy().argmax())
        col = str(missing.columns[missing.iloc[row].to_numpy().argmax()])
        raise ParseError(f"expected {len(header)} fields", line=row + 2, column=col)

    if not body.empty:
        body = body.apply(lambda s: s.str.strip())

    try:
        dates = _parse_dates(body[date_field])
    except (ValueError, TypeError) as exc:
        raise ParseError(f"unparseable dates: {exc}", column=date_field) from exc
    bad_dates = dates.isna().to_numpy()
    if bad_dates.any():
        row = int(bad_dates.argmax())
        raise ParseError(f"unparseable date {body[date_field].iloc[row]!r}", line=row + 2, column=date_field)

    columns: Dict[str, object] = {date_field: dates}
    for key in keys:
        nums = pd.to_numeric(body[key], errors="coerce").astype(float)
        bad = ~np.isfinite(nums.to_numpy())
        if bad.any():
            row = int(bad.argmax())
            raise ParseError(f"non-numeric value {body[key].iloc[row]!r}", line=row + 2, column=key)
        columns[key] = nums

    frame = pd.DataFrame(columns, columns=header)
    logger.debug("parsed %d records with %d categories", len(frame), len(keys))
    return Dataset(frame=frame, date_field=date_field, keys=tuple(keys))
