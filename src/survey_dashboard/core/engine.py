from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import logging

from survey_dashboard.config import DEFAULT_CONFIG, SURVEY_WORKBOOK_PATH, DashboardConfig
from survey_dashboard.core.aggregator import collect_open_text, tally_grid, tally_single_choice
from survey_dashboard.core.chart_assembler import (
    ChartDatum,
    assemble_grid,
    assemble_open_text,
    assemble_single_choice,
)
from survey_dashboard.core.classifier import (
    KIND_GRID_STACKED,
    KIND_SINGLE_CHOICE,
    QuestionGroup,
    classify_columns,
)
from survey_dashboard.core.option_catalog import OptionCatalog, load_option_catalog
from survey_dashboard.core.segment_index import list_segments, normalize_segment
from survey_dashboard.core.tabular_source import SurveySource, load_survey_source

logger = logging.getLogger(__name__)


@dataclass
class DashboardPage:
    """Everything one page render needs."""
    workbook_path: Optional[Path]
    selected_segment: Optional[str]
    current_view: str
    segments: List[str] = field(default_factory=list)
    charts: List[ChartDatum] = field(default_factory=list)

    def is_segment_selected(self, segment: Optional[str]) -> bool:
        wanted = normalize_segment(segment)
        if wanted is None or self.selected_segment is None:
            return wanted is None and self.selected_segment is None
        return wanted.casefold() == self.selected_segment.casefold()


def aggregate_group(
    source: SurveySource,
    group: QuestionGroup,
    catalog: OptionCatalog,
    segment: Optional[str],
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Optional[ChartDatum]:
    if group.kind == KIND_GRID_STACKED:
        tally = tally_grid(source, group.columns, catalog, segment, group.multi_value, config)
        return assemble_grid(group, tally, catalog, config)

    position = group.positions[0]
    if group.kind == KIND_SINGLE_CHOICE:
        tally = tally_single_choice(source, position, catalog, segment, group.multi_value, config)
        return assemble_single_choice(group, tally, catalog, config)

    texts = collect_open_text(source, position, segment, group.multi_value, config)
    return assemble_open_text(group, texts)


def compute_chart_data(
    source: SurveySource,
    segment: Optional[str] = None,
    view: Optional[str] = None,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> List[ChartDatum]:
    """
    Chart data for every question in the selected view, in column order.

    Only rows of `segment` (case-insensitive) are counted; None or blank
    means all respondents. An empty source gives an empty list.
    """
    if source.is_empty:
        return []

    segment = normalize_segment(segment)
    catalog = load_option_catalog(source, config)
    groups = classify_columns(source.header_row(), view=view, catalog=catalog, config=config)

    charts: List[ChartDatum] = []
    for group in groups:
        chart = aggregate_group(source, group, catalog, segment, config)
        if chart is not None:
            charts.append(chart)

    logger.info(
        "Computed %d chart(s) from %d group(s) (segment=%r, view=%r).",
        len(charts), len(groups), segment, config.resolve_view(view),
    )
    return charts


def build_dashboard(
    path: Optional[Path | str] = None,
    segment: Optional[str] = None,
    view: Optional[str] = None,
    config: Optional[DashboardConfig] = None,
) -> DashboardPage:
    """
    Load the workbook and compute one page: the segment selector values and
    the charts for the chosen segment and view.
    """
    config = config or DEFAULT_CONFIG
    workbook_path = Path(path) if path is not None else SURVEY_WORKBOOK_PATH

    source = load_survey_source(workbook_path)
    selected = normalize_segment(segment)

    return DashboardPage(
        workbook_path=workbook_path,
        selected_segment=selected,
        current_view=config.resolve_view(view),
        segments=list_segments(source, config),
        charts=compute_chart_data(source, selected, view, config),
    )
