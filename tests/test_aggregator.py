from __future__ import annotations

from survey_dashboard.core.aggregator import (
    collect_open_text,
    resolve_legacy_token,
    split_tokens,
    tally_grid,
    tally_single_choice,
)
from survey_dashboard.core.option_catalog import OptionCatalog, load_option_catalog
from survey_dashboard.core.tabular_source import HeaderCell, SurveySource


def test_split_tokens():
    assert split_tokens(" a, b ,,c ", multi_value=True) == ["a", "b", "c"]
    assert split_tokens(" a, b ", multi_value=False) == ["a, b"]
    assert split_tokens("   ", multi_value=False) == []


def test_legacy_other_convention(config):
    assert resolve_legacy_token("Other: Mistral", config) == ("Others", "Mistral")
    assert resolve_legacy_token("other", config) == ("Others", None)
    assert resolve_legacy_token("Other:", config) == ("Others", None)
    assert resolve_legacy_token("Others: a: b", config) == ("Others", "a: b")
    assert resolve_legacy_token("Claude", config) == ("Claude", None)


def test_single_choice_counts_and_zero_fill(survey_source, config):
    catalog = load_option_catalog(survey_source, config)
    tally = tally_single_choice(survey_source, 3, catalog, config=config)

    assert tally.counts == {"Yes": 2, "No": 1, "Maybe": 0}
    assert tally.tokens_counted == sum(tally.counts.values())
    assert tally.other_texts.to_list() == []


def test_single_choice_multi_value_others(survey_source, config):
    catalog = load_option_catalog(survey_source, config)
    tally = tally_single_choice(survey_source, 4, catalog, multi_value=True, config=config)

    assert tally.counts == {"ChatGPT": 2, "Gemini": 1, "Others": 1}
    assert tally.other_texts.to_list() == ["Bard"]
    assert tally.tokens_counted == 4


def test_single_choice_segment_filter(survey_source, config):
    catalog = load_option_catalog(survey_source, config)
    tally = tally_single_choice(survey_source, 3, catalog, segment="5HSD1", config=config)
    assert tally.counts == {"Yes": 1, "No": 0, "Maybe": 0}


def test_others_option_in_catalog_merges_with_bucket(config):
    source = SurveySource.from_rows([["Id", "Seg", "Q"], ["1", "A", "others"], ["2", "A", "Purple"]])
    catalog = OptionCatalog({3: ["Red", "others"]})
    tally = tally_single_choice(source, 3, catalog, config=config)
    assert tally.counts == {"others": 2, "Red": 0}
    assert tally.other_texts.to_list() == ["Purple"]


def test_open_text_is_case_insensitively_distinct(config):
    source = SurveySource.from_rows([
        ["Id", "Seg", "Q"],
        ["1", "A", "Alpha"], ["2", "A", " alpha "], ["3", "B", "Beta"], ["4", "B", ""],
    ])
    assert collect_open_text(source, 3, config=config) == ["Alpha", "Beta"]
    assert collect_open_text(source, 3, segment="b", config=config) == ["Beta"]


def test_open_text_multi_value(config):
    source = SurveySource.from_rows([["Id", "Seg", "Q"], ["1", "A", "x, y"], ["2", "A", "Y,z"]])
    assert collect_open_text(source, 3, multi_value=True, config=config) == ["x", "y", "z"]


def test_grid_counts_per_member(survey_source, config):
    catalog = load_option_catalog(survey_source, config)
    columns = [h for h in survey_source.header_row() if h.position in (5, 6)]
    tally = tally_grid(survey_source, columns, catalog, config=config)

    assert tally.choices.to_list() == ["Good", "Bad"]
    assert tally.counts_for("Good") == [2, 2]
    assert tally.counts_for("bad") == [1, 1]
    assert tally.counts_for("Missing") == [0, 0]


def test_grid_multi_value_counts_respondents_once(config):
    source = SurveySource.from_rows([
        ["Id", "Seg", "Q [A]"],
        ["1", "S", "x, X, y"],
        ["2", "S", "x"],
    ])
    columns = [HeaderCell(3, "Q [A]")]
    tally = tally_grid(source, columns, OptionCatalog(), multi_value=True, config=config)
    assert tally.counts_for("x") == [2]
    assert tally.counts_for("y") == [1]


def test_grid_legacy_others_text(survey_source, config):
    catalog = load_option_catalog(survey_source, config)
    columns = [h for h in survey_source.header_row() if h.position in (7, 8)]
    tally = tally_grid(survey_source, columns, catalog, multi_value=True, config=config)

    assert tally.counts_for("ChatGPT") == [1, 2]
    assert tally.counts_for("Claude") == [2, 1]
    assert tally.counts_for("Others") == [1, 0]
    assert tally.other_texts.to_list() == ["Mistral"]


def test_grid_catalog_unmatched_records_text(config):
    source = SurveySource.from_rows([["Id", "Seg", "Q [A]"], ["1", "S", "Purple"], ["2", "S", "red"]])
    catalog = OptionCatalog({3: ["Red", "Blue"]})
    tally = tally_grid(source, [HeaderCell(3, "Q [A]")], catalog, config=config)

    assert tally.counts_for("Others") == [1]
    assert tally.counts_for("Red") == [1]
    assert tally.other_texts.to_list() == ["Purple"]
