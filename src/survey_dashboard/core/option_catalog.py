from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Sequence

import logging

from survey_dashboard.config import DEFAULT_CONFIG, DashboardConfig
from survey_dashboard.core.tabular_source import HeaderCell, SheetTable, SurveySource
from survey_dashboard.core.text import CaseInsensitiveSet, is_blank, normalize_key

logger = logging.getLogger(__name__)


def column_letter_to_number(text: str) -> int:
    """
    Convert a column designator ("A", "ab") to its 1-based position.
    Returns -1 when the text is blank or not made of letters A-Z.
    """
    if is_blank(text):
        return -1

    result = 0
    for ch in text.strip().upper():
        if ch < "A" or ch > "Z":
            return -1
        result = result * 26 + (ord(ch) - ord("A") + 1)
    return result


class OptionCatalog:
    """
    Valid answer options per column position.

    A column without an entry has no whitelist and is treated as an open
    question. Read-only once built.
    """

    def __init__(self, options_by_column: Optional[Mapping[int, Sequence[str]]] = None) -> None:
        self._options: Dict[int, List[str]] = {}
        self._lookup: Dict[int, Dict[str, str]] = {}
        for position, options in (options_by_column or {}).items():
            unique = CaseInsensitiveSet(o.strip() for o in options if not is_blank(o)).to_list()
            if not unique:
                continue
            self._options[int(position)] = unique
            self._lookup[int(position)] = {normalize_key(o): o for o in unique}

    def has_entry(self, position: int) -> bool:
        return position in self._options

    def options_for(self, position: int) -> List[str]:
        return list(self._options.get(position, []))

    def match(self, position: int, token: str) -> Optional[str]:
        """Canonical option for `token` (exact, case-insensitive), or None."""
        lookup = self._lookup.get(position)
        if not lookup:
            return None
        return lookup.get(normalize_key(token))

    def positions(self) -> List[int]:
        return sorted(self._options)

    def __iter__(self) -> Iterator[int]:
        return iter(self.positions())

    def __len__(self) -> int:
        return len(self._options)

    def __repr__(self) -> str:
        return f"OptionCatalog({self._options!r})"


# ---------------------------------------------------------------------------
# Loading from the options sheet
# ---------------------------------------------------------------------------

def _find_options_sheet(source: SurveySource, config: DashboardConfig) -> Optional[SheetTable]:
    for name in config.options_sheet_names:
        sheet = source.sheet(name)
        if sheet is not None:
            return sheet
    return None


def _resolve_column(header_text: str, main_headers: Dict[str, int]) -> int:
    position = main_headers.get(normalize_key(header_text))
    if position is not None:
        return position
    return column_letter_to_number(header_text)


def _main_header_index(header: Sequence[HeaderCell]) -> Dict[str, int]:
    index: Dict[str, int] = {}
    for cell in header:
        if is_blank(cell.text):
            continue
        index.setdefault(normalize_key(cell.text), cell.position)
    return index


def load_option_catalog(source: SurveySource, config: DashboardConfig = DEFAULT_CONFIG) -> OptionCatalog:
    """
    Build the catalog from the auxiliary options sheet.

    Each header cell of that sheet names a main column, either by its exact
    header text (case-insensitive) or by its column letters. The cells below
    it are the valid options, in display order. Headers that resolve to no
    column are skipped.
    """
    sheet = _find_options_sheet(source, config)
    if sheet is None:
        logger.info("No options sheet (%s) in survey workbook.", ", ".join(config.options_sheet_names))
        return OptionCatalog()

    main_headers = _main_header_index(source.header_row())
    options_by_column: Dict[int, List[str]] = {}

    for cell in sheet.header_row():
        header = cell.text.strip()
        if not header:
            continue

        position = _resolve_column(header, main_headers)
        if position <= 0:
            logger.debug("Skipping options header %r: no matching column.", header)
            continue

        options = [v.strip() for v in sheet.column_values(cell.position) if not is_blank(v)]
        if options:
            options_by_column[position] = options

    catalog = OptionCatalog(options_by_column)
    logger.info("Loaded answer options for %d column(s).", len(catalog))
    return catalog
