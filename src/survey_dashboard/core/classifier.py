from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Set, Tuple

import logging

from survey_dashboard.config import DEFAULT_CONFIG, DashboardConfig
from survey_dashboard.core.option_catalog import OptionCatalog
from survey_dashboard.core.tabular_source import HeaderCell
from survey_dashboard.core.text import normalize_key

logger = logging.getLogger(__name__)

KIND_SINGLE_CHOICE = "single-choice"
KIND_OPEN_TEXT = "open-text"
KIND_GRID_STACKED = "grid-stacked"


@dataclass(frozen=True)
class QuestionGroup:
    """
    One logical question: a standalone column or the member columns of a
    grid, in left-to-right order.
    """
    kind: str
    columns: Tuple[HeaderCell, ...]
    title: str
    rule: str
    multi_value: bool = False

    @property
    def positions(self) -> Tuple[int, ...]:
        return tuple(c.position for c in self.columns)

    @property
    def is_grid(self) -> bool:
        return self.kind == KIND_GRID_STACKED


@dataclass(frozen=True)
class ClassifierContext:
    question_headers: Tuple[HeaderCell, ...]
    config: DashboardConfig
    catalog: OptionCatalog


@dataclass(frozen=True)
class ClassificationRule:
    name: str
    matches: Callable[[HeaderCell, ClassifierContext], bool]
    build: Callable[[HeaderCell, ClassifierContext], QuestionGroup]


# ---------------------------------------------------------------------------
# Header text helpers
# ---------------------------------------------------------------------------

def extract_bracket_label(header: Optional[str]) -> Optional[str]:
    """Text between the first "[" and the next "]", or None."""
    if not header or not header.strip():
        return None
    start = header.find("[")
    if start < 0:
        return None
    end = header.find("]", start + 1)
    if end < 0:
        return None
    inner = header[start + 1:end].strip()
    return inner or None


def extract_question_stem(header: Optional[str]) -> Optional[str]:
    """Text before the first "[", trimmed; None when that leaves nothing."""
    if not header or not header.strip():
        return None
    stem = header.split("[", 1)[0].strip()
    return stem or None


def has_bracket_segment(header: str) -> bool:
    start = header.find("[")
    return start >= 0 and header.find("]", start + 1) > start


def grid_title(columns: Sequence[HeaderCell], config: DashboardConfig) -> str:
    stem = extract_question_stem(columns[0].text) if columns else None
    return stem or config.grid_title_fallback


def standalone_title(cell: HeaderCell, config: DashboardConfig) -> str:
    text = cell.text.strip()
    return text or config.question_title_template.format(number=cell.position - 1)


def is_multi_value_column(cell: HeaderCell, config: DashboardConfig) -> bool:
    if cell.position in config.multi_value_columns:
        return True
    header = normalize_key(cell.text)
    return any(header == normalize_key(h) for h in config.multi_value_headers)


def _grid_group(rule: str, members: Sequence[HeaderCell], config: DashboardConfig, multi_value: bool = False) -> QuestionGroup:
    return QuestionGroup(
        kind=KIND_GRID_STACKED,
        columns=tuple(members),
        title=grid_title(members, config),
        rule=rule,
        multi_value=multi_value,
    )


# ---------------------------------------------------------------------------
# Rules, in precedence order
# ---------------------------------------------------------------------------

def _column_set_for(position: int, config: DashboardConfig) -> Optional[Tuple[int, ...]]:
    for column_set in config.grid_column_sets:
        if position in column_set:
            return column_set
    return None


def _explicit_range_matches(cell: HeaderCell, ctx: ClassifierContext) -> bool:
    return _column_set_for(cell.position, ctx.config) is not None


def _explicit_range_build(cell: HeaderCell, ctx: ClassifierContext) -> QuestionGroup:
    column_set = _column_set_for(cell.position, ctx.config) or ()
    members = [h for h in ctx.question_headers if h.position in column_set]
    return _grid_group("explicit-range", members, ctx.config)


def _prefix_for(cell: HeaderCell, config: DashboardConfig) -> Optional[str]:
    header = normalize_key(cell.text)
    for prefix in config.shared_prefixes:
        wanted = normalize_key(prefix)
        if wanted and header.startswith(wanted):
            return prefix
    return None


def _shared_prefix_matches(cell: HeaderCell, ctx: ClassifierContext) -> bool:
    return _prefix_for(cell, ctx.config) is not None


def _shared_prefix_build(cell: HeaderCell, ctx: ClassifierContext) -> QuestionGroup:
    wanted = normalize_key(_prefix_for(cell, ctx.config) or "")
    members = [h for h in ctx.question_headers if normalize_key(h.text).startswith(wanted)]
    return _grid_group("shared-prefix", members, ctx.config, multi_value=True)


def _bracket_stem_matches(cell: HeaderCell, ctx: ClassifierContext) -> bool:
    if cell.position < ctx.config.bracket_group_threshold:
        return False
    text = cell.text.strip()
    return has_bracket_segment(text) and extract_question_stem(text) is not None


def _bracket_stem_build(cell: HeaderCell, ctx: ClassifierContext) -> QuestionGroup:
    stem = normalize_key(extract_question_stem(cell.text) or "")
    members = [
        h for h in ctx.question_headers
        if h.position >= ctx.config.bracket_group_threshold
        and normalize_key(extract_question_stem(h.text) or "") == stem
    ]
    return _grid_group("bracket-stem", members, ctx.config)


DEFAULT_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("explicit-range", _explicit_range_matches, _explicit_range_build),
    ClassificationRule("shared-prefix", _shared_prefix_matches, _shared_prefix_build),
    ClassificationRule("bracket-stem", _bracket_stem_matches, _bracket_stem_build),
)


def build_standalone_group(cell: HeaderCell, ctx: ClassifierContext) -> QuestionGroup:
    kind = KIND_SINGLE_CHOICE if ctx.catalog.has_entry(cell.position) else KIND_OPEN_TEXT
    return QuestionGroup(
        kind=kind,
        columns=(cell,),
        title=standalone_title(cell, ctx.config),
        rule="standalone",
        multi_value=is_multi_value_column(cell, ctx.config),
    )


# ---------------------------------------------------------------------------
# Partition
# ---------------------------------------------------------------------------

def in_view(cell: HeaderCell, view: Optional[str], config: DashboardConfig) -> bool:
    is_high_column = cell.position >= config.view_split_column
    return is_high_column == config.is_high_view(view)


def classify_columns(
    header: Sequence[HeaderCell],
    view: Optional[str] = None,
    catalog: Optional[OptionCatalog] = None,
    config: DashboardConfig = DEFAULT_CONFIG,
    rules: Sequence[ClassificationRule] = DEFAULT_RULES,
) -> List[QuestionGroup]:
    """
    Partition the question columns of `header` into disjoint groups.

    Columns are visited left to right from the first question column. The
    first column of a multi-column group builds the whole group; its other
    members are skipped when reached. Columns outside the active view are
    neither emitted nor consumed.
    """
    ctx = ClassifierContext(
        question_headers=tuple(h for h in header if h.position >= config.first_question_column),
        config=config,
        catalog=catalog or OptionCatalog(),
    )

    groups: List[QuestionGroup] = []
    consumed: Set[int] = set()

    for cell in ctx.question_headers:
        if cell.position in consumed or not in_view(cell, view, config):
            continue

        rule = next((r for r in rules if r.matches(cell, ctx)), None)
        if rule is None:
            group = build_standalone_group(cell, ctx)
        else:
            group = rule.build(cell, ctx)
            # Members already emitted elsewhere stay with their first group
            members = tuple(c for c in group.columns if c.position not in consumed)
            if members != group.columns:
                group = _grid_group(group.rule, members, config, multi_value=group.multi_value)

        groups.append(group)
        consumed.update(group.positions)

    logger.debug(
        "Classified %d question column(s) into %d group(s) for view %r.",
        len(ctx.question_headers), len(groups), config.resolve_view(view),
    )
    return groups
