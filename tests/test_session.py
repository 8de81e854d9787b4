"""Tests for the upload session: generation guard, atomic commits, hover transitions."""

import asyncio

import pytest

from streamgraph.config import ChartConfig, normalize_config
from streamgraph.errors import EmptyDatasetError, ParseError, StaleUploadError
from streamgraph.hover import HoverHidden, HoverVisible
from streamgraph.session import ChartSession

CSV_A = "Date,A1,A2\n2024-01-01,1,2\n2024-02-01,3,4\n"
CSV_B = "Date,B1\n2024-01-01,5\n2024-02-01,6\n2024-03-01,7\n"


class TestGenerationGuard:
    def test_later_upload_wins_when_it_completes_first(self):
        session = ChartSession()

        async def scenario():
            release_a = asyncio.Event()

            async def read_a():
                await release_a.wait()
                return CSV_A

            async def read_b():
                return CSV_B

            task_a = asyncio.create_task(session.load(read_a))
            await asyncio.sleep(0)
            chart_b = await session.load(read_b)
            release_a.set()
            with pytest.raises(StaleUploadError):
                await task_a
            return chart_b

        chart_b = asyncio.run(scenario())
        assert session.chart is chart_b
        assert session.dataset.keys == ("B1",)
        assert session.committed_generation == 2

    def test_stale_token_is_rejected_even_if_completed_first(self):
        session = ChartSession()
        token_a = session.begin_upload()
        token_b = session.begin_upload()
        with pytest.raises(StaleUploadError) as exc:
            session.complete_upload(token_a, CSV_A)
        assert (exc.value.token, exc.value.current) == (token_a, token_b)
        assert session.chart is None
        session.complete_upload(token_b, CSV_B)
        assert session.dataset.keys == ("B1",)

    def test_tokens_increase(self):
        session = ChartSession()
        assert [session.begin_upload() for _ in range(3)] == [1, 2, 3]
        assert session.is_current(3)
        assert not session.is_current(2)


class TestCommit:
    def test_parse_error_keeps_previous_chart(self):
        session = ChartSession()
        first = session.complete_upload(session.begin_upload(), CSV_A)
        with pytest.raises(ParseError):
            session.complete_upload(session.begin_upload(), "Date,A\n2024-01-01,x\n")
        assert session.chart is first

    def test_empty_file_clears_chart(self):
        session = ChartSession()
        session.complete_upload(session.begin_upload(), CSV_A)
        with pytest.raises(EmptyDatasetError):
            session.complete_upload(session.begin_upload(), "Date,A\n")
        assert session.chart is None
        assert session.dataset is not None and session.dataset.empty

    def test_new_upload_hides_hover(self):
        session = ChartSession()
        session.complete_upload(session.begin_upload(), CSV_A)
        session.enter("A1", (10.0, 10.0))
        session.complete_upload(session.begin_upload(), CSV_B)
        assert isinstance(session.hover, HoverHidden)

    def test_reconfigure_rebuilds_chart(self):
        session = ChartSession()
        session.complete_upload(session.begin_upload(), CSV_A)
        session.reconfigure(normalize_config({"width": 1000}))
        assert session.chart.width == 650
        assert session.config.width == 1000

    def test_reconfigure_same_config_is_noop(self):
        session = ChartSession()
        chart = session.complete_upload(session.begin_upload(), CSV_A)
        session.reconfigure(ChartConfig())
        assert session.chart is chart


class TestSessionHover:
    def test_enter_detail_leave(self):
        session = ChartSession()
        session.complete_upload(session.begin_upload(), CSV_A)
        visible = session.enter("A2", (200.0, 40.0))
        assert isinstance(visible, HoverVisible)
        assert visible.color == "#377eb8"
        detail = session.hover_detail()
        assert [p.value for p in detail.series] == [2.0, 4.0]
        session.leave()
        assert session.hover_detail() is None

    def test_enter_unknown_key_or_no_chart(self):
        session = ChartSession()
        assert session.enter("A1", (0.0, 0.0)) is None
        session.complete_upload(session.begin_upload(), CSV_A)
        assert session.enter("nope", (0.0, 0.0)) is None

    def test_reenter_same_key_keeps_panel(self):
        session = ChartSession()
        session.complete_upload(session.begin_upload(), CSV_A)
        first = session.enter("A1", (300.0, 100.0))
        assert session.enter("A1", (5.0, 5.0)) is first

    def test_category_detail_leaves_hover_state(self):
        session = ChartSession()
        assert session.category_detail("A1") is None
        session.complete_upload(session.begin_upload(), CSV_A)
        detail = session.category_detail("A2")
        assert detail.color == "#377eb8"
        assert [p.value for p in detail.series] == [2.0, 4.0]
        assert isinstance(session.hover, HoverHidden)
        assert session.category_detail("nope") is None
