"""Structured prompt builder for table analysis."""

from collections.abc import Mapping, Sequence
from typing import Any, Dict, List, Optional

from app.domain.date_ranges import coerce_datetime
from app.services.statistics_service import StatisticsExtractor, TableStatistics
from llm_synthesis.formatting import (
    format_currency,
    format_long_date,
    format_month_year,
    format_number,
    format_short_date,
    format_value,
)
from llm_synthesis.schema import DATE_COLUMN_TYPE, AnalysisOptions, TableColumn

SAMPLE_ROW_CAP = 10
QUICK_INSIGHT_COUNT = 5

_RULE = "=" * 79

_PREAMBLE = """\
You are a senior business intelligence analyst specialising in Indian \
market dynamics, customer behaviour and revenue optimisation. You turn \
tabular business data into boardroom-ready analysis.
"""

_CONTEXT_TEMPLATE = """\
{rule}
DATA CONTEXT & OVERVIEW
{rule}

**Business Entity**: {table_name}
**Context**: {context}
**Dataset Size**: {total_rows} total records
**Analysis Framework**: {summary_type} deep-dive analysis
**Currency**: All financial figures in Indian Rupees (₹), presented in lakhs for amounts ≥ ₹1,00,000

{rule}
DATA STRUCTURE & SCHEMA
{rule}

**Columns Available for Analysis:**
{columns}

{rule}
STATISTICAL FOUNDATION
{rule}
"""

_NUMERIC_TEMPLATE = """\
**{header}**
   • Total Aggregate: {total}
   • Mean (Average): {average}
   • Range: {minimum} → {maximum}
   • Spread: {spread} ({variance} variance)
   • Sample Size: {count} data points
"""

_TEXT_TEMPLATE = """\
**{header}**
   • Unique Categories: {unique_count}
   • Distribution Leader: "{leader}" ({leader_count} occurrences, {share}% share)
   • Sample Categories: {examples}
"""

_DATE_TEMPLATE = """\
**{header}**
   • Analysis Period: {earliest} to {latest}
   • Duration: {span}
   • Data Points: {count} time-stamped records
"""

_SECTION_OUTLINE = """\
{rule}
ANALYSIS REQUIREMENTS
{rule}

Provide an executive-level analysis that follows this exact structure.
Use the section titles below as headings, each on its own line, numbered
as shown.

1. Executive Summary
   Six to eight sentences: what the data represents, the three or four
   most critical findings and the overall health of the business.

2. Key Insights
   Five to eight bullet points, each backed by a specific figure from the
   data, with percentages alongside absolute numbers.

3. Trends and Performance Assessment
   Month-over-month movement, growth rates, seasonality and the best and
   worst performing segments.

4. Financial Analysis
   Revenue concentration, average values and the spread between the
   highest and lowest figures.
{recommendations}
{forecast_number}. Outlook
   Expected trajectory for the next three months and the key questions
   leadership should answer.

{rule}
FORMATTING REQUIREMENTS
{rule}

- Support every claim with specific numbers from the data.
- Use Indian Rupee (₹) format with lakhs for amounts ≥ ₹1,00,000.
- Compare current and previous periods with ±X% change notation.
- Avoid generic statements that could apply to any business.
- Use bullet points beginning with "-" for list items.

YOUR ANALYSIS BEGINS BELOW:"""

_RECOMMENDATIONS_OUTLINE = """
5. Strategic Recommendations
   Five to eight specific, prioritised actions with the expected impact
   of each.
"""

_QUICK_TEMPLATE = """\
Analyze this {table_name} data with PRIMARY FOCUS on {month} performance \
and provide {count} detailed key insights:

Data: {total_rows} rows
Key metrics: {metrics}

FOCUS REQUIREMENTS for insights:
1. Start each insight with "{month}:" when referring to previous month data
2. Include month-over-month comparisons involving {month}
3. Show how {month} ranks against other months in the dataset
4. Compare {month} to historical averages and trends

Note: All currency figures are in Indian Rupees (₹) and large amounts \
should be presented in lakhs.

Provide exactly {count} bullet points focusing on {month} performance \
with specific numbers and percentages:"""

_COLUMN_PURPOSES = (
    (("revenue", "amount", "price"), "Financial metric for revenue analysis"),
    (("date", "time"), "Temporal dimension for trend analysis"),
    (("member", "customer", "user"), "Customer/member identifier or attribute"),
    (("name", "title"), "Categorical identifier for segmentation"),
    (("count", "quantity", "number"), "Volume or quantity metric"),
    (("rate", "percentage"), "Performance ratio or percentage metric"),
)
_DEFAULT_PURPOSE = "Business attribute for analysis and segmentation"


def column_purpose(column: TableColumn) -> str:
    """Guess what a column is for from its key."""
    key = column.key.lower()
    for fragments, purpose in _COLUMN_PURPOSES:
        if any(fragment in key for fragment in fragments):
            return purpose
    return _DEFAULT_PURPOSE


def sample_size(total_rows: int, max_rows: Optional[int]) -> int:
    """Number of rows rendered into the sample table."""
    limit = total_rows if max_rows is None else min(max_rows, total_rows)
    return min(limit, SAMPLE_ROW_CAP)


class TablePromptBuilder:
    """Builds the analysis prompt for a table.

    The builder is pure: it computes statistics, renders them with the
    display formatting rules and appends a fixed section outline that the
    model is asked to follow.
    """

    def __init__(self, extractor: Optional[StatisticsExtractor] = None) -> None:
        self._extractor = extractor or StatisticsExtractor()

    def build_prompt(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
        options: Optional[AnalysisOptions] = None,
    ) -> str:
        """Build the full analysis prompt.

        Args:
            rows: Table rows keyed by column key.
            columns: Column metadata, in display order.
            options: Title, context, analysis type, recommendation flag
                and row limit.

        Returns:
            A fully formatted prompt string ready for LLM consumption.
        """
        options = options or AnalysisOptions()
        stats = self._extractor.extract(rows, columns)

        parts = [
            _PREAMBLE,
            _CONTEXT_TEMPLATE.format(
                rule=_RULE,
                table_name=options.table_name or "Business Performance Analytics",
                context=options.context or "Comprehensive business performance tracking and optimization",
                total_rows=stats.total_rows,
                summary_type=options.summary_type,
                columns=self._format_columns(columns),
            ),
            self._format_statistics(stats),
        ]

        date_columns = [column for column in columns if column.type == DATE_COLUMN_TYPE]
        if date_columns:
            breakdown = self._format_monthly_breakdown(rows, date_columns[0])
            if breakdown:
                parts.append(f"\n**PERIOD-OVER-PERIOD BREAKDOWN:**\n\n{breakdown}")

        sample = [
            row for row in rows[: sample_size(len(rows), options.max_rows)] if isinstance(row, Mapping)
        ]
        if sample:
            parts.append(self._format_sample(sample, columns))

        parts.append(
            _SECTION_OUTLINE.format(
                rule=_RULE,
                recommendations=_RECOMMENDATIONS_OUTLINE if options.include_recommendations else "",
                forecast_number=6 if options.include_recommendations else 5,
            )
        )
        return "\n".join(parts)

    def build_quick_insights_prompt(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
        previous_month: str,
        table_name: Optional[str] = None,
    ) -> str:
        """Build the short prompt asking for previous-month insights."""
        stats = self._extractor.extract(rows, columns)
        metrics = ", ".join(
            f"{stat.header}: {format_currency(stat.sum)}"
            for stat in stats.numeric_columns.values()
        )
        return _QUICK_TEMPLATE.format(
            table_name=table_name or "business",
            month=previous_month,
            count=QUICK_INSIGHT_COUNT,
            total_rows=len(rows),
            metrics=metrics or "none",
        )

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    @staticmethod
    def _format_columns(columns: Sequence[TableColumn]) -> str:
        return "\n".join(
            f"{index}. **{column.header}** ({column.key})\n"
            f"   - Data Type: {column.display_type}\n"
            f"   - Purpose: {column_purpose(column)}"
            for index, column in enumerate(columns, start=1)
        )

    @staticmethod
    def _format_statistics(stats: TableStatistics) -> str:
        parts: List[str] = []

        if stats.numeric_columns:
            parts.append("\n**QUANTITATIVE METRICS & FINANCIAL INDICATORS:**\n")
            for stat in stats.numeric_columns.values():
                spread = stat.max - stat.min
                variance = (
                    f"{spread / stat.average * 100:.1f}%" if stat.average else "n/a"
                )
                parts.append(
                    _NUMERIC_TEMPLATE.format(
                        header=stat.header,
                        total=format_value(stat.sum, stat.type),
                        average=format_value(stat.average, stat.type),
                        minimum=format_value(stat.min, stat.type),
                        maximum=format_value(stat.max, stat.type),
                        spread=format_value(spread, stat.type),
                        variance=variance,
                        count=stat.count,
                    )
                )

        if stats.text_columns:
            parts.append("\n**CATEGORICAL DISTRIBUTION & SEGMENTATION:**\n")
            for stat in stats.text_columns.values():
                share = stat.most_common.count / stats.total_rows * 100
                parts.append(
                    _TEXT_TEMPLATE.format(
                        header=stat.header,
                        unique_count=stat.unique_count,
                        leader=stat.most_common.value,
                        leader_count=stat.most_common.count,
                        share=f"{share:.1f}",
                        examples=", ".join(stat.examples),
                    )
                )

        if stats.date_columns:
            parts.append("\n**TEMPORAL SCOPE & TIME-SERIES CONTEXT:**\n")
            for stat in stats.date_columns.values():
                parts.append(
                    _DATE_TEMPLATE.format(
                        header=stat.header,
                        earliest=format_long_date(stat.earliest),
                        latest=format_long_date(stat.latest),
                        span=stat.range,
                        count=stat.count,
                    )
                )

        return "\n".join(parts)

    @staticmethod
    def _format_monthly_breakdown(
        rows: Sequence[Mapping[str, Any]],
        date_column: TableColumn,
    ) -> str:
        """Record counts per calendar month with change vs the prior month."""
        counts: Dict[str, int] = {}
        labels: Dict[str, str] = {}
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            parsed = coerce_datetime(row.get(date_column.key))
            if parsed is None:
                continue
            month_key = f"{parsed.year}-{parsed.month:02d}"
            counts[month_key] = counts.get(month_key, 0) + 1
            labels.setdefault(month_key, format_month_year(parsed))

        lines = []
        previous: Optional[int] = None
        for month_key in sorted(counts):
            line = f"**{labels[month_key]}**: {counts[month_key]} records"
            if previous is not None:
                change = (counts[month_key] - previous) / previous * 100
                sign = "+" if change > 0 else ""
                line += f" ({sign}{change:.1f}% vs previous month)"
            lines.append(line)
            previous = counts[month_key]
        return "\n".join(lines) + "\n" if lines else ""

    @staticmethod
    def _format_sample(
        sample: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
    ) -> str:
        headers = " | ".join(column.header for column in columns)
        lines = [
            "",
            _RULE,
            f"SAMPLE DATA EXTRACT (First {len(sample)} Representative Records)",
            _RULE,
            "",
            headers,
            "-" * len(headers),
        ]
        for index, row in enumerate(sample, start=1):
            cells = [_format_cell(row.get(column.key), column) for column in columns]
            lines.append(f"{index}. " + " | ".join(cells))
        lines.append("")
        return "\n".join(lines)


def _format_cell(value: Any, column: TableColumn) -> str:
    if value is None:
        return "N/A"
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
    if column.type == "currency" and is_number:
        return format_currency(value)
    if column.type == "number" and is_number:
        return format_number(value)
    if column.type == DATE_COLUMN_TYPE:
        parsed = coerce_datetime(value)
        return format_short_date(parsed) if parsed is not None else "Invalid Date"
    return str(value)
