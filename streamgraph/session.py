"""Upload session: the one shared chart state, replaced wholesale per upload.

Every upload takes a token from a monotonically increasing generation counter.
An upload may only commit while its token is still the newest one, so a slow
read that finishes after a newer upload is discarded (last write wins).
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Optional, Tuple

from streamgraph.config import ChartConfig
from streamgraph.data import Dataset, parse_csv
from streamgraph.errors import EmptyDatasetError, StaleUploadError
from streamgraph.hover import HIDDEN, HoverDetail, HoverState, HoverVisible, build_hover_detail, hover_enter, hover_leave
from streamgraph.pipeline import ChartModel, build_chart

logger = logging.getLogger(__name__)


class ChartSession:
    def __init__(self, config: Optional[ChartConfig] = None) -> None:
        self.config = config or ChartConfig()
        self._generation = 0
        self._committed = 0
        self._dataset: Optional[Dataset] = None
        self._chart: Optional[ChartModel] = None
        self.hover: HoverState = HIDDEN

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def committed_generation(self) -> int:
        return self._committed

    @property
    def dataset(self) -> Optional[Dataset]:
        return self._dataset

    @property
    def chart(self) -> Optional[ChartModel]:
        return self._chart

    def begin_upload(self) -> int:
        self._generation += 1
        logger.debug("upload %d started", self._generation)
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def complete_upload(self, token: int, text: str) -> ChartModel:
        """Parse and chart `text`, then commit it if `token` is still the newest upload.

        Raises StaleUploadError when superseded, ParseError for a malformed file
        (the previous chart stays), and EmptyDatasetError for a file without
        records (the chart is cleared to the empty state).
        """
        if not self.is_current(token):
            raise StaleUploadError(token, self._generation)
        dataset = parse_csv(text)
        chart = build_chart(dataset, self.config) if not dataset.empty else None
        self._commit(token, dataset, chart)
        if chart is None:
            raise EmptyDatasetError("uploaded file has no records")
        return chart

    def reconfigure(self, config: ChartConfig) -> None:
        """Swap the config and rebuild the committed chart with it."""
        if config == self.config:
            return
        self.config = config
        if self._dataset is not None and not self._dataset.empty:
            self._chart = build_chart(self._dataset, config)
        self.hover = HIDDEN

    async def load(self, reader: Callable[[], Awaitable[str]]) -> ChartModel:
        token = self.begin_upload()
        text = await reader()
        return self.complete_upload(token, text)

    def _commit(self, token: int, dataset: Dataset, chart: Optional[ChartModel]) -> None:
        self._dataset, self._chart = dataset, chart
        self._committed = token
        self.hover = HIDDEN
        logger.info("upload %d committed (%d records)", token, len(dataset))

    # hover transitions only read the committed chart

    def enter(self, key: str, pointer: Tuple[float, float]) -> Optional[HoverVisible]:
        if self._chart is None:
            return None
        color = self._chart.color_of(key)
        if color is None:
            return None
        self.hover = hover_enter(self.hover, key, color, pointer, self.config.hover)
        return self.hover

    def leave(self) -> None:
        self.hover = hover_leave()

    def hover_detail(self) -> Optional[HoverDetail]:
        if self._chart is None or not isinstance(self.hover, HoverVisible):
            return None
        return build_hover_detail(self._chart.dataset, self.hover, self.config.hover)

    def category_detail(self, key: str) -> Optional[HoverDetail]:
        """Detail chart for `key` built straight from the committed chart; hover state is untouched."""
        if self._chart is None:
            return None
        color = self._chart.color_of(key)
        if color is None:
            return None
        state = HoverVisible(category=key, color=color, anchor=(0.0, 0.0))
        return build_hover_detail(self._chart.dataset, state, self.config.hover)
