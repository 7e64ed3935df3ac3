from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path

import pytest

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from survey_dashboard.config import DEFAULT_CONFIG  # noqa: E402
from survey_dashboard.core.tabular_source import SurveySource  # noqa: E402

# A small questionnaire:
#   C      single choice (options Yes/No/Maybe)
#   D      multi-value single choice (options ChatGPT/Gemini)
#   E..F   explicit grid, E has options, F does not
#   G..H   shared-prefix grid, multi-value, no options
#   I..J   bracket grid in the high view
#   K, L   open questions in the high view (K has no header)
SURVEY_ROWS = [
    ["Timestamp", "Class", "Do you use AI?", "Which tools?", "Rate [Speed]", "Rate [Accuracy]",
     "Which bots? [School]", "Which bots? [Home]", "Copilot use [Daily]", "Copilot use [Weekly]",
     "", "Comments on Copilot"],
    ["t1", "5hsd1", "Yes", "ChatGPT, Gemini", "Good", "Bad",
     "ChatGPT, Claude", "ChatGPT", "Often", "Never", "", "Great tool"],
    ["t2", "5HSD2", "yes", "ChatGPT, Bard", "Good", "Good",
     "Other: Mistral", "", "Sometimes", "", "", "great tool"],
    ["t3", "X1", "No", "", "Bad", "Good",
     "Claude", "Claude, ChatGPT", "", "Never", "Extra note", "Too slow"],
]

OPTIONS_ROWS = [
    ["Do you use AI?", "D", "E", "ZZ9", "Unknown header"],
    ["Yes", "ChatGPT", "Good", "x", "y"],
    ["No", "Gemini", "Bad", "", ""],
    ["Maybe", "", "", "", ""],
]

TEST_CONFIG = replace(
    DEFAULT_CONFIG,
    grid_column_sets=((5, 6),),
    shared_prefixes=("Which bots?",),
    bracket_group_threshold=9,
    view_split_column=9,
    multi_value_columns=(4,),
    multi_value_headers=(),
    color_palette=("#111", "#222", "#333"),
)


@pytest.fixture
def config():
    return TEST_CONFIG


@pytest.fixture
def survey_source():
    return SurveySource.from_rows(SURVEY_ROWS, sheets={"Opties": OPTIONS_ROWS})


@pytest.fixture
def survey_rows():
    return [list(r) for r in SURVEY_ROWS]


@pytest.fixture
def options_rows():
    return [list(r) for r in OPTIONS_ROWS]
