import logging
from contextlib import contextmanager
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

from streamgraph.charts import build_streamgraph_chart
from streamgraph.config import normalize_config
from streamgraph.errors import EmptyDatasetError, ParseError, StaleUploadError
from streamgraph.session import ChartSession
from streamgraph.svg import render_hover_svg, render_svg

alt.data_transformers.disable_max_rows()
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("streamgraph.app")


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .upload-bar {background: #f0f0f0;padding: 20px;border-radius: 8px;margin-bottom: 12px;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.9rem;color: #6b7280;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_session() -> ChartSession:
    if "chart_session" not in st.session_state:
        st.session_state["chart_session"] = ChartSession()
    return st.session_state["chart_session"]


def load_upload(session: ChartSession, uploaded) -> None:
    """Parse and commit a newly selected file; errors are kept for display across reruns."""
    file_id = getattr(uploaded, "file_id", None) or uploaded.name
    if st.session_state.get("_loaded_file") == file_id:
        return
    st.session_state["_loaded_file"] = file_id
    st.session_state["_upload_error"] = None
    token = session.begin_upload()
    try:
        session.complete_upload(token, uploaded.getvalue().decode("utf-8-sig"))
    except StaleUploadError as exc:
        logger.debug("discarding superseded upload: %s", exc)
    except EmptyDatasetError:
        pass
    except (ParseError, UnicodeDecodeError) as exc:
        st.session_state["_upload_error"] = str(exc)


# ---------- UI setup ----------
st.set_page_config(page_title="Streamgraph Explorer", layout="wide")
inject_base_styles()
st.title("Streamgraph Explorer")
st.caption("Upload a CSV time series: first column is the date, every other column is a category.")

session = get_session()

with st.sidebar:
    st.markdown("### Chart settings")
    with st.expander("Advanced settings", expanded=False):
        width = st.slider("Canvas width", min_value=400, max_value=1600, value=800, step=50)
        height = st.slider("Canvas height", min_value=200, max_value=900, value=400, step=50)
        duration_ms = st.slider("Hover bar animation (ms)", min_value=0, max_value=2000, value=500, step=100)
session.reconfigure(normalize_config({"width": width, "height": height, "hover": {"duration_ms": duration_ms}}))

st.markdown("<div class='upload-bar'><h4>Upload a CSV File</h4></div>", unsafe_allow_html=True)
uploaded = st.file_uploader("Upload a CSV File", type=["csv"], label_visibility="collapsed")
if uploaded is None:
    st.info("No file selected yet.")
    st.stop()

load_upload(session, uploaded)
if st.session_state.get("_upload_error"):
    st.error(f"Could not parse the CSV: {st.session_state['_upload_error']}")
    st.stop()

chart = session.chart
if chart is None:
    st.info("The file has a header row but no records to chart.")
    st.stop()

with card("Streamgraph", actions="Hover a layer to see its breakdown"):
    st.altair_chart(build_streamgraph_chart(chart, session.config), use_container_width=False)
    st.download_button(
        "Export SVG",
        data=render_svg(chart, session.config).encode("utf-8"),
        file_name="streamgraph.svg",
        mime="image/svg+xml",
    )

with card("Category detail"):
    key = st.selectbox("Category", options=list(chart.keys))
    detail = session.category_detail(key) if key else None
    if detail is not None:
        st.markdown(render_hover_svg(detail), unsafe_allow_html=True)
        st.dataframe(
            pd.DataFrame([{"date": p.date, "value": p.value} for p in detail.series]),
            hide_index=True,
            use_container_width=True,
        )
