from __future__ import annotations

from survey_dashboard.core.option_catalog import (
    OptionCatalog,
    column_letter_to_number,
    load_option_catalog,
)
from survey_dashboard.core.tabular_source import SurveySource


def test_column_letters():
    assert column_letter_to_number("A") == 1
    assert column_letter_to_number("z") == 26
    assert column_letter_to_number("AA") == 27
    assert column_letter_to_number("AB") == 28
    assert column_letter_to_number("A1") == -1
    assert column_letter_to_number("  ") == -1


def test_catalog_resolves_header_text_and_letters(survey_source, config):
    catalog = load_option_catalog(survey_source, config)

    assert catalog.positions() == [3, 4, 5]
    assert catalog.options_for(3) == ["Yes", "No", "Maybe"]
    assert catalog.options_for(4) == ["ChatGPT", "Gemini"]
    assert catalog.options_for(5) == ["Good", "Bad"]
    assert not catalog.has_entry(6)


def test_catalog_match_is_exact_and_case_insensitive(survey_source, config):
    catalog = load_option_catalog(survey_source, config)

    assert catalog.match(3, "yes") == "Yes"
    assert catalog.match(3, " MAYBE ") == "Maybe"
    assert catalog.match(3, "Ye") is None
    assert catalog.match(6, "Good") is None


def test_header_text_wins_over_column_letters():
    # The main sheet has a question literally called "B"
    source = SurveySource.from_rows(
        [["Id", "Segment", "B"], ["1", "X", "One"]],
        sheets={"options": [["B"], ["One"], ["Two"]]},
    )
    catalog = load_option_catalog(source)
    assert catalog.has_entry(3)
    assert not catalog.has_entry(2)


def test_empty_option_columns_are_dropped():
    source = SurveySource.from_rows(
        [["Id", "Segment", "Q"], ["1", "X", "a"]],
        sheets={"opties": [["C", "D"], ["", "x"], ["  ", ""]]},
    )
    catalog = load_option_catalog(source)
    assert not catalog.has_entry(3)
    assert catalog.options_for(4) == ["x"]


def test_missing_options_sheet_gives_empty_catalog():
    source = SurveySource.from_rows([["Id", "Segment", "Q"], ["1", "X", "a"]])
    assert len(load_option_catalog(source)) == 0


def test_duplicate_options_keep_first_casing():
    catalog = OptionCatalog({3: ["Yes", "yes", "No", ""]})
    assert catalog.options_for(3) == ["Yes", "No"]
