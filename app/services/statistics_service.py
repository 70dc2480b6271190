"""
app/services/statistics_service.py

Per-column statistics over an in-memory table.

Columns are grouped by their declared type:

number / currency / percentage
    count, sum, average, min, max over values that coerce to a finite
    number (``$``, ``,`` and ``%`` are stripped from strings first).
text
    distinct values in first-seen order, the most frequent value and
    up to five examples.
date
    count, earliest, latest and a coarse span label.

Malformed values are excluded from their own column and never raise.
Columns with no type or an unknown type are display-only.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.date_ranges import coerce_datetime
from llm_synthesis.schema import (
    DATE_COLUMN_TYPE,
    NUMERIC_COLUMN_TYPES,
    TEXT_COLUMN_TYPE,
    TableColumn,
)

logger = logging.getLogger(__name__)

MAX_EXAMPLES = 5
_SECONDS_PER_DAY = 24 * 60 * 60

_NUMBER_DECORATION = re.compile(r"[$,%]")
_NUMERIC_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


# ---------------------------------------------------------------------------
# Result dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NumericColumnStats:
    header: str
    count: int
    sum: float
    average: float
    min: float
    max: float
    type: str
    """Display subtype (number / currency / percentage). Never affects the arithmetic."""


@dataclass(frozen=True)
class MostCommonValue:
    value: str
    count: int


@dataclass(frozen=True)
class TextColumnStats:
    header: str
    unique_values: tuple[str, ...]
    most_common: MostCommonValue
    examples: tuple[str, ...]

    @property
    def unique_count(self) -> int:
        return len(self.unique_values)


@dataclass(frozen=True)
class DateColumnStats:
    header: str
    count: int
    earliest: datetime
    latest: datetime
    range: str


@dataclass(frozen=True)
class TableStatistics:
    total_rows: int
    numeric_columns: dict[str, NumericColumnStats] = field(default_factory=dict)
    text_columns: dict[str, TextColumnStats] = field(default_factory=dict)
    date_columns: dict[str, DateColumnStats] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "TableStatistics":
        return cls(total_rows=0)

    @property
    def is_empty(self) -> bool:
        return self.total_rows == 0


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def coerce_number(value: Any) -> float | None:
    """
    Best-effort numeric coercion.

    Strings are stripped of currency/percent decoration and parsed from
    their leading numeric prefix (``"12 units"`` -> 12.0). Returns None
    for anything that does not yield a finite number.
    """

    if value is None:
        return None
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(_NUMBER_DECORATION.sub("", value))
        if match is None:
            return None
        number = float(match.group(1))
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return None
    if not math.isfinite(number):
        return None
    return number


def stringify_value(value: Any) -> str:
    """
    Render a cell value as the dashboard displays it.
    """

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def describe_date_span(dates: Sequence[datetime]) -> str:
    """
    Coarse human label for the span covered by *dates*.
    """

    if len(dates) < 2:
        return "Single date"

    span_seconds = (max(dates) - min(dates)).total_seconds()
    days = math.ceil(span_seconds / _SECONDS_PER_DAY)
    if days < 30:
        return f"{days} days"
    if days < 365:
        return f"{math.ceil(days / 30)} months"
    return f"{math.ceil(days / 365)} years"


def most_common_value(values: Sequence[str]) -> MostCommonValue:
    """
    Most frequent value; on ties the first value to be seen wins.
    """

    frequency: dict[str, int] = {}
    for value in values:
        frequency[value] = frequency.get(value, 0) + 1

    leader = MostCommonValue(value="", count=0)
    for value, count in frequency.items():
        if count > leader.count:
            leader = MostCommonValue(value=value, count=count)
    return leader


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class StatisticsExtractor:
    """
    Stateless, single-pass statistics over rows and column metadata.
    """

    def extract(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
    ) -> TableStatistics:
        """
        Compute statistics for every typed column.

        Raises
        ------
        TypeError
            If *rows* is not a sequence of rows.
        """

        if isinstance(rows, (str, bytes, Mapping)) or not isinstance(rows, Sequence):
            raise TypeError(f"rows must be a sequence of mappings, got {type(rows).__name__}")

        if not rows:
            return TableStatistics.empty()

        stats = TableStatistics(total_rows=len(rows))

        for column in columns:
            values = [row.get(column.key) for row in rows if isinstance(row, Mapping)]
            values = [value for value in values if value is not None]

            if column.type in NUMERIC_COLUMN_TYPES:
                numeric = self._numeric_stats(column, values)
                if numeric is not None:
                    stats.numeric_columns[column.key] = numeric
            elif column.type == TEXT_COLUMN_TYPE:
                stats.text_columns[column.key] = self._text_stats(column, values)
            elif column.type == DATE_COLUMN_TYPE:
                temporal = self._date_stats(column, values)
                if temporal is not None:
                    stats.date_columns[column.key] = temporal

        logger.debug(
            "Extracted statistics rows=%d numeric=%d text=%d date=%d",
            stats.total_rows,
            len(stats.numeric_columns),
            len(stats.text_columns),
            len(stats.date_columns),
        )
        return stats

    @staticmethod
    def _numeric_stats(column: TableColumn, values: list[Any]) -> NumericColumnStats | None:
        numbers = [number for number in map(coerce_number, values) if number is not None]
        if not numbers:
            return None

        total = math.fsum(numbers)
        return NumericColumnStats(
            header=column.header,
            count=len(numbers),
            sum=total,
            average=total / len(numbers),
            min=min(numbers),
            max=max(numbers),
            type=str(column.type),
        )

    @staticmethod
    def _text_stats(column: TableColumn, values: list[Any]) -> TextColumnStats:
        rendered = [stringify_value(value) for value in values]
        unique_values = tuple(dict.fromkeys(rendered))
        return TextColumnStats(
            header=column.header,
            unique_values=unique_values,
            most_common=most_common_value(rendered),
            examples=unique_values[:MAX_EXAMPLES],
        )

    @staticmethod
    def _date_stats(column: TableColumn, values: list[Any]) -> DateColumnStats | None:
        dates = [parsed for parsed in map(coerce_datetime, values) if parsed is not None]
        if not dates:
            return None

        return DateColumnStats(
            header=column.header,
            count=len(dates),
            earliest=min(dates),
            latest=max(dates),
            range=describe_date_span(dates),
        )
