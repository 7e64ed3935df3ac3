from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from survey_dashboard.config import DEFAULT_CONFIG, DashboardConfig
from survey_dashboard.core.aggregator import ChoiceTally, GridTally
from survey_dashboard.core.classifier import (
    KIND_GRID_STACKED,
    KIND_OPEN_TEXT,
    KIND_SINGLE_CHOICE,
    QuestionGroup,
    extract_bracket_label,
)
from survey_dashboard.core.option_catalog import OptionCatalog
from survey_dashboard.core.tabular_source import HeaderCell
from survey_dashboard.core.text import CaseInsensitiveSet, sort_case_insensitive

# How each kind is drawn
CHART_TYPES = {
    KIND_SINGLE_CHOICE: "pie",
    KIND_OPEN_TEXT: "text",
    KIND_GRID_STACKED: "bar-stacked",
}


@dataclass(frozen=True)
class SeriesData:
    name: str
    values: List[int]
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "values": list(self.values), "color": self.color}


@dataclass(frozen=True)
class ChartDatum:
    """
    Chart-ready data for one question.

      - single-choice: labels / values / colors
      - grid-stacked:  labels are the grid rows, one series per choice
      - open-text:     the collected answers, in other_texts

    other_texts also carries the literal "Others" answers of the other kinds.
    """
    title: str
    kind: str
    labels: List[str] = field(default_factory=list)
    values: List[int] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    series: Optional[List[SeriesData]] = None
    other_texts: List[str] = field(default_factory=list)

    @property
    def chart_type(self) -> str:
        return CHART_TYPES.get(self.kind, "text")

    @property
    def texts(self) -> List[str]:
        return list(self.other_texts) if self.kind == KIND_OPEN_TEXT else []

    def to_dict(self) -> Dict[str, Any]:
        """External shape, camelCase keys."""
        out: Dict[str, Any] = {
            "title": self.title,
            "kind": self.kind,
            "chartType": self.chart_type,
            "labels": list(self.labels),
            "values": list(self.values),
            "colors": list(self.colors),
        }
        if self.series is not None:
            out["series"] = [s.to_dict() for s in self.series]
        if self.other_texts:
            out["otherTexts"] = list(self.other_texts)
        return out


# ---------------------------------------------------------------------------
# Ordering and colors
# ---------------------------------------------------------------------------

def order_labels(labels: Iterable[str], options: Sequence[str] = ()) -> List[str]:
    """
    Catalog options first, in catalog order (only those present in
    `labels`), then every remaining label alphabetically, case-insensitive.
    """
    remaining = CaseInsensitiveSet(labels)
    taken = CaseInsensitiveSet()
    ordered: List[str] = []
    for option in options:
        label = remaining.get(option)
        if label is not None and taken.add(label):
            ordered.append(label)

    ordered.extend(sort_case_insensitive(l for l in remaining if l not in taken))
    return ordered


def assign_colors(count: int, palette: Sequence[str]) -> List[str]:
    if not palette:
        return [""] * count
    return [palette[i % len(palette)] for i in range(count)]


def grid_row_label(cell: HeaderCell, config: DashboardConfig = DEFAULT_CONFIG) -> str:
    label = extract_bracket_label(cell.text)
    if label:
        return label
    text = cell.text.strip()
    return text or config.column_label_template.format(position=cell.position)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def assemble_open_text(group: QuestionGroup, texts: Sequence[str]) -> ChartDatum:
    return ChartDatum(title=group.title, kind=KIND_OPEN_TEXT, other_texts=list(texts))


def assemble_single_choice(
    group: QuestionGroup,
    tally: ChoiceTally,
    catalog: OptionCatalog,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> Optional[ChartDatum]:
    if tally.is_empty:
        return None

    position = group.positions[0]
    labels = order_labels(tally.counts.keys(), catalog.options_for(position))
    return ChartDatum(
        title=group.title,
        kind=KIND_SINGLE_CHOICE,
        labels=labels,
        values=[tally.counts.get(l, 0) for l in labels],
        colors=assign_colors(len(labels), config.color_palette),
        other_texts=tally.other_texts.to_list(),
    )


def assemble_grid(
    group: QuestionGroup,
    tally: GridTally,
    catalog: OptionCatalog,
    config: DashboardConfig = DEFAULT_CONFIG,
) -> ChartDatum:
    first = group.positions[0] if group.positions else 0
    choices = order_labels(tally.choices, catalog.options_for(first))
    colors = assign_colors(len(choices), config.color_palette)

    series = [
        SeriesData(name=choice, values=tally.counts_for(choice), color=color)
        for choice, color in zip(choices, colors)
    ]
    return ChartDatum(
        title=group.title,
        kind=KIND_GRID_STACKED,
        labels=[grid_row_label(c, config) for c in group.columns],
        series=series,
        other_texts=tally.other_texts.to_list(),
    )
