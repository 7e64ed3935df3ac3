from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Data directory (the survey workbook lives here)
DATA_DIR = PROJECT_ROOT / "data"

WORKBOOK_NAME = "Enquête_Totaal_ChatGPT.xlsx"

# Override with an absolute path if the workbook lives elsewhere.
SURVEY_WORKBOOK_PATH = Path(
    os.getenv("SURVEY_WORKBOOK_PATH", "").strip() or str(DATA_DIR / WORKBOOK_NAME)
)

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Survey Dashboard"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Questionnaire layout
#
# Column positions are 1-based, as in the spreadsheet (A=1, B=2, ...).
#   - column B holds the respondent segment (cohort code)
#   - questions start at column C
#   - columns AB (28) and further belong to the "Copilot" part of the survey
# ---------------------------------------------------------------------------

SEGMENT_COLUMN = 2
FIRST_QUESTION_COLUMN = 3

# Grids whose columns are known up front: G..I and J..M
GRID_COLUMN_SETS: Tuple[Tuple[int, ...], ...] = (
    (7, 8, 9),
    (10, 11, 12, 13),
)

# Every column whose header starts with one of these becomes one grid.
# Answers in these columns are comma-separated lists.
SHARED_PREFIXES: Tuple[str, ...] = (
    "Gebruik je wel eens verschillende chatbots?",
)

# "Question [item]" headers are grouped by stem from this column onward.
BRACKET_GROUP_THRESHOLD = 28

# Views
VIEW_SPLIT_COLUMN = 28
HIGH_VIEW = "Copilot"
DEFAULT_VIEW = "Chatbots"
VIEW_CHOICES: Tuple[str, ...] = (DEFAULT_VIEW, HIGH_VIEW)

# Standalone columns with comma-separated answers
MULTI_VALUE_COLUMNS: Tuple[int, ...] = (14,)
MULTI_VALUE_HEADERS: Tuple[str, ...] = (
    "Wanneer kies je voor gebruik van Github Copilot?",
)

# Segments shown first in the selector, in this order
SEGMENT_PRIORITY: Tuple[str, ...] = ("5HSD1", "5HSD2", "5HSD3", "5HSD4")

# Auxiliary sheet with the valid answer options per column
OPTIONS_SHEET_NAMES: Tuple[str, ...] = ("opties", "options")

OTHERS_LABEL = "Others"
LEGACY_OTHER_PREFIX = "other"

GRID_TITLE_FALLBACK = "Grid question"
QUESTION_TITLE_TEMPLATE = "Question {number}"
COLUMN_LABEL_TEMPLATE = "Column {position}"

COLOR_PALETTE: Tuple[str, ...] = (
    "#4e79a7", "#f28e2b", "#e15759", "#76b7b2", "#59a14f",
    "#edc949", "#af7aa1", "#ff9da7", "#9c755f", "#bab0ab",
    "#3b4b8c", "#c66a32", "#b03a48", "#4a9c9b", "#3f7f44",
)


@dataclass(frozen=True)
class DashboardConfig:
    """
    Every tunable of the classification and aggregation engine.

    Passed explicitly to the classifier, aggregator and assembler so that
    tests can use small synthetic layouts and palettes.
    """
    segment_column: int = SEGMENT_COLUMN
    first_question_column: int = FIRST_QUESTION_COLUMN
    grid_column_sets: Tuple[Tuple[int, ...], ...] = GRID_COLUMN_SETS
    shared_prefixes: Tuple[str, ...] = SHARED_PREFIXES
    bracket_group_threshold: int = BRACKET_GROUP_THRESHOLD
    view_split_column: int = VIEW_SPLIT_COLUMN
    high_view: str = HIGH_VIEW
    default_view: str = DEFAULT_VIEW
    multi_value_columns: Tuple[int, ...] = MULTI_VALUE_COLUMNS
    multi_value_headers: Tuple[str, ...] = MULTI_VALUE_HEADERS
    segment_priority: Tuple[str, ...] = SEGMENT_PRIORITY
    options_sheet_names: Tuple[str, ...] = OPTIONS_SHEET_NAMES
    others_label: str = OTHERS_LABEL
    legacy_other_prefix: str = LEGACY_OTHER_PREFIX
    grid_title_fallback: str = GRID_TITLE_FALLBACK
    question_title_template: str = QUESTION_TITLE_TEMPLATE
    column_label_template: str = COLUMN_LABEL_TEMPLATE
    color_palette: Tuple[str, ...] = field(default=COLOR_PALETTE)

    def resolve_view(self, view: Optional[str]) -> str:
        text = (view or "").strip()
        return text or self.default_view

    def is_high_view(self, view: Optional[str]) -> bool:
        return self.resolve_view(view).casefold() == self.high_view.casefold()


DEFAULT_CONFIG = DashboardConfig()


def _split_env_list(raw: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def load_config() -> DashboardConfig:
    """
    Build the dashboard configuration, applying environment overrides:
      - SURVEY_DEFAULT_VIEW      view shown when none is selected
      - SURVEY_SEGMENT_PRIORITY  comma-separated segments listed first
    """
    config = DEFAULT_CONFIG

    default_view = os.getenv("SURVEY_DEFAULT_VIEW", "").strip()
    if default_view:
        config = replace(config, default_view=default_view)

    priority = _split_env_list(os.getenv("SURVEY_SEGMENT_PRIORITY", ""))
    if priority:
        config = replace(config, segment_priority=tuple(p.upper() for p in priority))

    return config
