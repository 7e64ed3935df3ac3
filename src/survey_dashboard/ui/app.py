from __future__ import annotations

import logging
import os
import traceback
from typing import Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from survey_dashboard.config import (
    APP_NAME,
    APP_VERSION,
    SURVEY_WORKBOOK_PATH,
    VIEW_CHOICES,
    DashboardConfig,
    load_config,
)
from survey_dashboard.core.chart_assembler import ChartDatum
from survey_dashboard.core.engine import DashboardPage, build_dashboard
from survey_dashboard.core.tabular_source import SurveySourceError

ALL_SEGMENTS_LABEL = "All respondents"


def _configure_logging() -> None:
    level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Figures
# ---------------------------------------------------------------------------

def _pie_figure(chart: ChartDatum) -> go.Figure:
    fig = go.Figure(
        data=[
            go.Pie(
                labels=chart.labels,
                values=chart.values,
                marker=dict(colors=chart.colors),
                sort=False,
                textinfo="label+percent",
            )
        ]
    )
    fig.update_layout(title=dict(text=chart.title, font=dict(size=16)), margin=dict(t=60, b=20))
    return fig


def _stacked_bar_figure(chart: ChartDatum) -> go.Figure:
    fig = go.Figure()
    for series in chart.series or []:
        fig.add_trace(go.Bar(
            x=series.values,
            y=chart.labels,
            orientation="h",
            name=series.name,
            marker_color=series.color,
            text=series.values,
            textposition="inside",
        ))
    fig.update_layout(
        barmode="stack",
        showlegend=True,
        legend=dict(orientation="h", yanchor="top", y=-0.15, xanchor="center", x=0.5),
        title=dict(text=chart.title, font=dict(size=16)),
        yaxis=dict(autorange="reversed"),
        height=max(250, 70 * len(chart.labels) + 140),
        margin=dict(t=60, b=100),
    )
    return fig


# ---------------------------------------------------------------------------
# Page sections
# ---------------------------------------------------------------------------

def _selected_segment() -> Optional[str]:
    choice = st.session_state.get("segment")
    if not choice or choice == ALL_SEGMENTS_LABEL:
        return None
    return choice


def _render_selectors(page: DashboardPage, config: DashboardConfig) -> None:
    with st.sidebar:
        st.header("Filters")

        default_index = 0
        for i, name in enumerate(VIEW_CHOICES):
            if name.casefold() == config.default_view.casefold():
                default_index = i
        st.radio("View", options=list(VIEW_CHOICES), index=default_index, key="view")

        options = [ALL_SEGMENTS_LABEL] + page.segments
        index = 0
        for i, name in enumerate(options):
            if i > 0 and page.is_segment_selected(name):
                index = i
        st.selectbox("Segment", options=options, index=index, key="segment")


def _render_other_texts(chart: ChartDatum) -> None:
    if not chart.other_texts:
        return
    with st.expander(f"Other answers ({len(chart.other_texts)})", expanded=False):
        for text in chart.other_texts:
            st.markdown(f"- {text}")


def _render_chart(chart: ChartDatum, idx: int) -> None:
    key = f"chart-{idx}"

    if chart.chart_type == "pie":
        st.plotly_chart(_pie_figure(chart), use_container_width=True, key=key)
        _render_other_texts(chart)
        return

    if chart.chart_type == "bar-stacked":
        st.plotly_chart(_stacked_bar_figure(chart), use_container_width=True, key=key)
        _render_other_texts(chart)
        return

    st.subheader(chart.title)
    if not chart.texts:
        st.caption("No answers.")
        return
    st.dataframe(pd.DataFrame({"Answer": chart.texts}), use_container_width=True, hide_index=True)


def _render_charts(page: DashboardPage) -> None:
    if not page.charts:
        st.info("No chart data for this selection.")
        return

    for idx, chart in enumerate(page.charts):
        with st.container(border=True):
            _render_chart(chart, idx)


def _render_developer_view(page: DashboardPage) -> None:
    with st.expander("Chart data (developer view)", expanded=False):
        st.write(f"Workbook: {page.workbook_path}")
        st.write(f"View: {page.current_view} | Segment: {page.selected_segment or ALL_SEGMENTS_LABEL}")
        st.write(f"Charts: {len(page.charts)} | Segments: {len(page.segments)}")
        st.json([c.to_dict() for c in page.charts], expanded=False)


def run_app() -> None:
    _configure_logging()
    config = load_config()

    st.set_page_config(page_title=APP_NAME, page_icon="📊", layout="wide")
    st.title(APP_NAME)
    st.caption(f"Version {APP_VERSION}")

    # Widgets keep their value in session state, so the page is computed
    # for the current selection before the selectors are drawn.
    try:
        page = build_dashboard(
            SURVEY_WORKBOOK_PATH,
            segment=_selected_segment(),
            view=st.session_state.get("view"),
            config=config,
        )
    except SurveySourceError as err:
        st.error(f"Could not read the survey workbook: {err}")
        st.text_area("Traceback", value=traceback.format_exc(), height=220)
        return

    _render_selectors(page, config)

    if not page.segments and not page.charts:
        st.warning(f"No survey data found at {page.workbook_path}.")
        return

    _render_charts(page)
    _render_developer_view(page)
