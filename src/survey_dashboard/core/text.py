from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List

import pandas as pd


def clean_cell(value: Any) -> str:
    """
    Render a raw spreadsheet value as display text.

    Empty cells (None/NaN) become "", whole floats lose their ".0" and
    non-breaking spaces are replaced before trimming.
    """
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).replace("\u00A0", " ").strip()


def normalize_key(text: str) -> str:
    """Identity of a label: trimmed and casefolded."""
    return (text or "").strip().casefold()


def is_blank(text: str | None) -> bool:
    return text is None or not str(text).strip()


def sort_case_insensitive(labels: Iterable[str]) -> List[str]:
    return sorted(labels, key=lambda s: (s.casefold(), s))


class CaseInsensitiveSet:
    """
    Insertion-ordered set of strings with case-insensitive identity.

    The first casing seen for a value is the one kept for display.
    """

    def __init__(self, values: Iterable[str] = ()) -> None:
        self._items: Dict[str, str] = {}
        for v in values:
            self.add(v)

    def add(self, value: str) -> bool:
        key = normalize_key(value)
        if key in self._items:
            return False
        self._items[key] = value
        return True

    def get(self, value: str) -> str | None:
        return self._items.get(normalize_key(value))

    def __contains__(self, value: object) -> bool:
        return isinstance(value, str) and normalize_key(value) in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def to_list(self) -> List[str]:
        return list(self._items.values())
