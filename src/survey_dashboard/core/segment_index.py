from __future__ import annotations

from typing import List, Optional

from survey_dashboard.config import DEFAULT_CONFIG, DashboardConfig
from survey_dashboard.core.tabular_source import SheetRow, SurveySource
from survey_dashboard.core.text import CaseInsensitiveSet, normalize_key, sort_case_insensitive


def normalize_segment(segment: Optional[str]) -> Optional[str]:
    """A blank selection means "all respondents"."""
    if segment is None:
        return None
    text = segment.strip()
    return text or None


def segment_matches(row: SheetRow, segment: Optional[str], config: DashboardConfig = DEFAULT_CONFIG) -> bool:
    if segment is None:
        return True
    return normalize_key(row.cell(config.segment_column)) == normalize_key(segment)


def list_segments(source: SurveySource, config: DashboardConfig = DEFAULT_CONFIG) -> List[str]:
    """
    Distinct segment codes in display order: the priority segments that are
    present (in priority order), then the rest alphabetically.
    """
    found = CaseInsensitiveSet()
    for row in source.data_rows():
        value = row.cell(config.segment_column).strip().upper()
        if value:
            found.add(value)

    ordered = [p for p in config.segment_priority if p in found]
    priority = CaseInsensitiveSet(config.segment_priority)
    ordered.extend(sort_case_insensitive(s for s in found if s not in priority))
    return ordered
