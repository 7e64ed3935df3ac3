from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import logging

import pandas as pd

from survey_dashboard.core.text import clean_cell

logger = logging.getLogger(__name__)


class SurveySourceError(Exception):
    """Raised when an existing workbook cannot be read."""


@dataclass(frozen=True)
class HeaderCell:
    position: int  # 1-based, A=1
    text: str


class SheetRow:
    """One respondent row; cells are addressed by 1-based column position."""

    __slots__ = ("_cells",)

    def __init__(self, cells: Sequence[str]) -> None:
        self._cells = tuple(cells)

    def cell(self, position: int) -> str:
        if position < 1 or position > len(self._cells):
            return ""
        return self._cells[position - 1]

    def is_blank(self) -> bool:
        return not any(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"SheetRow({list(self._cells)!r})"


@dataclass
class SheetTable:
    """
    A single sheet: the first used row is the header, the remaining
    non-blank rows are data rows.
    """
    name: str
    header: List[HeaderCell] = field(default_factory=list)
    rows: List[SheetRow] = field(default_factory=list)

    def header_row(self) -> List[HeaderCell]:
        return list(self.header)

    def data_rows(self) -> List[SheetRow]:
        return list(self.rows)

    def column_values(self, position: int) -> List[str]:
        return [row.cell(position) for row in self.rows]

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]]) -> "SheetTable":
        cleaned = [SheetRow([clean_cell(v) for v in r]) for r in rows]
        used = [r for r in cleaned if not r.is_blank()]
        if not used:
            return cls(name=name)

        header_row = used[0]
        width = max(len(r) for r in used)
        header = [HeaderCell(position=i, text=header_row.cell(i)) for i in range(1, width + 1)]

        # Drop trailing blank header cells that carry no data either
        while header and not header[-1].text and not any(r.cell(header[-1].position) for r in used[1:]):
            header.pop()

        return cls(name=name, header=header, rows=used[1:])

    @classmethod
    def from_frame(cls, name: str, df: pd.DataFrame) -> "SheetTable":
        """Build from a frame read with header=None (column 0 is column A)."""
        return cls.from_rows(name, df.itertuples(index=False, name=None))


class SurveySource:
    """
    The survey workbook: the first sheet holds the responses, further sheets
    (e.g. "opties") are auxiliary and looked up by name.
    """

    def __init__(
        self,
        main: Optional[SheetTable] = None,
        sheets: Optional[Dict[str, SheetTable]] = None,
        path: Optional[Path] = None,
    ) -> None:
        self.main = main or SheetTable(name="")
        self._sheets: Dict[str, SheetTable] = dict(sheets or {})
        self.path = path

    @classmethod
    def empty(cls, path: Optional[Path] = None) -> "SurveySource":
        return cls(path=path)

    @classmethod
    def from_rows(
        cls,
        rows: Sequence[Sequence[Any]],
        sheets: Optional[Dict[str, Sequence[Sequence[Any]]]] = None,
        main_name: str = "Responses",
    ) -> "SurveySource":
        main = SheetTable.from_rows(main_name, rows)
        aux = {name: SheetTable.from_rows(name, r) for name, r in (sheets or {}).items()}
        return cls(main=main, sheets=aux)

    @property
    def is_empty(self) -> bool:
        return not self.main.header

    def header_row(self) -> List[HeaderCell]:
        return self.main.header_row()

    def data_rows(self) -> List[SheetRow]:
        return self.main.data_rows()

    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def sheet(self, name: str) -> Optional[SheetTable]:
        wanted = name.strip().casefold()
        for sheet_name, table in self._sheets.items():
            if sheet_name.strip().casefold() == wanted:
                return table
        return None


def load_survey_source(path: Path | str) -> SurveySource:
    """
    Load the survey workbook with pandas.

    A missing file (or a workbook without sheets) gives an empty source;
    a file that exists but is not a readable workbook raises
    SurveySourceError.
    """
    path = Path(path)
    if not path.exists():
        logger.warning("Survey workbook not found: %s", path)
        return SurveySource.empty(path=path)

    logger.info("Loading survey workbook: %s", path)
    try:
        xls = pd.ExcelFile(path)
        frames = {
            name: xls.parse(name, header=None, dtype=object)
            for name in xls.sheet_names
        }
    except Exception as exc:
        raise SurveySourceError(f"Could not read survey workbook {path}: {exc}") from exc

    if not frames:
        logger.warning("Survey workbook %s has no sheets.", path)
        return SurveySource.empty(path=path)

    logger.info("Survey workbook sheets: %s", list(frames))

    names = list(frames)
    main = SheetTable.from_frame(names[0], frames[names[0]])
    aux = {name: SheetTable.from_frame(name, frames[name]) for name in names[1:]}
    return SurveySource(main=main, sheets=aux, path=path)
