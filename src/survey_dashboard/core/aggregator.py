from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from survey_dashboard.config import DEFAULT_CONFIG, DashboardConfig
from survey_dashboard.core.option_catalog import OptionCatalog
from survey_dashboard.core.tabular_source import HeaderCell, SurveySource
from survey_dashboard.core.segment_index import segment_matches
from survey_dashboard.core.text import CaseInsensitiveSet, is_blank, normalize_key


@dataclass
class ChoiceTally:
    """Counts per resolved key for one standalone column (insertion order)."""
    counts: Dict[str, int] = field(default_factory=dict)
    other_texts: CaseInsensitiveSet = field(default_factory=CaseInsensitiveSet)
    tokens_counted: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.counts


@dataclass
class GridTally:
    """
    Per-member counts for a grid.

    counts maps a normalized choice key to one count per member column;
    choices holds the display form of every key, first seen first.
    """
    columns: Tuple[HeaderCell, ...]
    choices: CaseInsensitiveSet = field(default_factory=CaseInsensitiveSet)
    counts: Dict[str, List[int]] = field(default_factory=dict)
    other_texts: CaseInsensitiveSet = field(default_factory=CaseInsensitiveSet)

    def counts_for(self, choice: str) -> List[int]:
        return list(self.counts.get(normalize_key(choice), [0] * len(self.columns)))


# ---------------------------------------------------------------------------
# Cells and tokens
# ---------------------------------------------------------------------------

def split_tokens(raw: str, multi_value: bool) -> List[str]:
    if multi_value:
        return [p.strip() for p in raw.split(",") if p.strip()]
    text = raw.strip()
    return [text] if text else []


def qualifying_cells(
    source: SurveySource,
    position: int,
    segment: Optional[str],
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Iterator[str]:
    """Non-blank cells of one column, for rows in the selected segment."""
    for row in source.data_rows():
        if not segment_matches(row, segment, config):
            continue
        raw = row.cell(position)
        if is_blank(raw):
            continue
        yield raw


def resolve_catalog_token(token: str, options_match: Optional[str], config: DashboardConfig) -> Tuple[str, Optional[str]]:
    """(key, other text) for a token checked against a column's options."""
    if options_match is not None:
        return options_match, None
    return config.others_label, token


def resolve_legacy_token(token: str, config: DashboardConfig) -> Tuple[str, Optional[str]]:
    """
    Columns without options: "Other: free text" answers go to the Others
    bucket with the text after the first colon; anything else is its own key.
    """
    if not token.casefold().startswith(config.legacy_other_prefix.casefold()):
        return token, None

    other_text: Optional[str] = None
    idx = token.find(":")
    if 0 <= idx < len(token) - 1:
        other_text = token[idx + 1:].strip() or None
    return config.others_label, other_text


def resolve_grid_token(
    token: str,
    position: int,
    catalog: OptionCatalog,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Tuple[str, Optional[str]]:
    if catalog.has_entry(position):
        return resolve_catalog_token(token, catalog.match(position, token), config)
    return resolve_legacy_token(token, config)


# ---------------------------------------------------------------------------
# Standalone columns
# ---------------------------------------------------------------------------

def collect_open_text(
    source: SurveySource,
    position: int,
    segment: Optional[str] = None,
    multi_value: bool = False,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> List[str]:
    texts = CaseInsensitiveSet()
    for raw in qualifying_cells(source, position, segment, config):
        for token in split_tokens(raw, multi_value):
            texts.add(token)
    return texts.to_list()


def tally_single_choice(
    source: SurveySource,
    position: int,
    catalog: OptionCatalog,
    segment: Optional[str] = None,
    multi_value: bool = False,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> ChoiceTally:
    """
    Count answers against the column's options. Unmatched answers count as
    Others and keep their text. Options nobody picked are present with 0.
    """
    tally = ChoiceTally()
    # An "Others" option in the sheet and the Others bucket are one key
    others_key = catalog.match(position, config.others_label) or config.others_label

    for raw in qualifying_cells(source, position, segment, config):
        for token in split_tokens(raw, multi_value):
            key, other_text = resolve_catalog_token(token, catalog.match(position, token), config)
            if key == config.others_label:
                key = others_key
            if other_text:
                tally.other_texts.add(other_text)
            tally.counts[key] = tally.counts.get(key, 0) + 1
            tally.tokens_counted += 1

    for option in catalog.options_for(position):
        tally.counts.setdefault(option, 0)

    return tally


# ---------------------------------------------------------------------------
# Grids
# ---------------------------------------------------------------------------

def tally_grid(
    source: SurveySource,
    columns: Sequence[HeaderCell],
    catalog: OptionCatalog,
    segment: Optional[str] = None,
    multi_value: bool = False,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> GridTally:
    """
    For every member column, count the respondents whose answers resolve to
    each choice. A respondent counts at most once per choice per column.
    """
    tally = GridTally(columns=tuple(columns))
    width = len(tally.columns)

    for idx, column in enumerate(tally.columns):
        for raw in qualifying_cells(source, column.position, segment, config):
            row_keys = set()
            for token in split_tokens(raw, multi_value):
                key, other_text = resolve_grid_token(token, column.position, catalog, config)
                if other_text:
                    tally.other_texts.add(other_text)
                tally.choices.add(key)
                row_keys.add(normalize_key(key))

            for key in row_keys:
                tally.counts.setdefault(key, [0] * width)[idx] += 1

    return tally
