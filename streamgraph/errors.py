from __future__ import annotations

from typing import Optional


class StreamgraphError(Exception):
    """Base class for errors raised by the streamgraph pipeline."""


class ParseError(StreamgraphError, ValueError):
    """The uploaded CSV could not be turned into a Dataset. No partial data is kept."""

    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[str] = None) -> None:
        self.line = line
        self.column = column
        where = []
        if line is not None:
            where.append(f"line {line}")
        if column is not None:
            where.append(f"column {column!r}")
        super().__init__(f"{message} ({', '.join(where)})" if where else message)


class EmptyDatasetError(StreamgraphError, ValueError):
    """Raised when a dataset has no records, so extents are undefined."""


class StaleUploadError(StreamgraphError, RuntimeError):
    """A newer upload started or finished before this one completed."""

    def __init__(self, token: int, current: int) -> None:
        self.token = token
        self.current = current
        super().__init__(f"upload {token} superseded by upload {current}")
