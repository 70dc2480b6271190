"""
tests/test_prompt_builder.py

Pytest unit tests for TablePromptBuilder and display formatting.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from llm_synthesis.formatting import (
    format_currency,
    format_indian_number,
    format_long_date,
    format_number,
    format_short_date,
)
from llm_synthesis.prompt_builder import (
    SAMPLE_ROW_CAP,
    TablePromptBuilder,
    column_purpose,
    sample_size,
)
from llm_synthesis.schema import AnalysisOptions, TableColumn


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def builder() -> TablePromptBuilder:
    return TablePromptBuilder()


@pytest.fixture()
def columns() -> list[TableColumn]:
    return [
        TableColumn(key="member_name", header="Member", type="text"),
        TableColumn(key="revenue", header="Revenue", type="currency"),
        TableColumn(key="visit_date", header="Visit Date", type="date"),
        TableColumn(key="notes", header="Notes"),
    ]


@pytest.fixture()
def rows() -> list[dict]:
    return [
        {
            "member_name": f"Row-{index:03d}",
            "revenue": 1000 + index * 10,
            "visit_date": f"2025-{1 + index % 2:02d}-{1 + index % 28:02d}",
            "notes": None,
        }
        for index in range(25)
    ]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


class TestCurrencyFormatting:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (100000, "₹1.00 lakhs"),
            (250000, "₹2.50 lakhs"),
            (99999, "₹100.0K"),
            (1500, "₹1.5K"),
            (1000, "₹1.0K"),
            (999, "₹999"),
            (0, "₹0"),
            (12.5, "₹12.5"),
            (-500000, "₹-5,00,000"),
        ],
    )
    def test_tiers(self, amount: float, expected: str) -> None:
        assert format_currency(amount) == expected

    def test_indian_grouping(self) -> None:
        assert format_indian_number(1234567.5) == "12,34,567.5"
        assert format_indian_number(100000) == "1,00,000"
        assert format_indian_number(0.1234) == "0.123"


class TestNumberAndDateFormatting:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (1234567.891, "1,234,567.89"),
            (12.0, "12"),
            (12.5, "12.5"),
            (-0.001, "0"),
        ],
    )
    def test_format_number(self, value: float, expected: str) -> None:
        assert format_number(value) == expected

    def test_dates(self) -> None:
        moment = datetime(2025, 9, 14, 10, 0)
        assert format_long_date(moment) == "14 September 2025"
        assert format_short_date(moment) == "14/9/2025"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "total_rows, max_rows, expected",
    [
        (25, None, SAMPLE_ROW_CAP),
        (25, 3, 3),
        (4, None, 4),
        (4, 50, 4),
        (0, None, 0),
    ],
)
def test_sample_size(total_rows: int, max_rows: int | None, expected: int) -> None:
    assert sample_size(total_rows, max_rows) == expected


@pytest.mark.parametrize(
    "key, purpose",
    [
        ("total_revenue", "Financial metric for revenue analysis"),
        ("visit_date", "Temporal dimension for trend analysis"),
        ("customer_id", "Customer/member identifier or attribute"),
        ("plan_title", "Categorical identifier for segmentation"),
        ("item_quantity", "Volume or quantity metric"),
        ("churn_rate", "Performance ratio or percentage metric"),
        ("region", "Business attribute for analysis and segmentation"),
    ],
)
def test_column_purpose(key: str, purpose: str) -> None:
    assert column_purpose(TableColumn(key=key, header=key)) == purpose


# ---------------------------------------------------------------------------
# Full prompt
# ---------------------------------------------------------------------------


class TestBuildPrompt:
    def test_every_column_is_described(
        self, builder: TablePromptBuilder, rows: list[dict], columns: list[TableColumn]
    ) -> None:
        prompt = builder.build_prompt(rows, columns)
        for column in columns:
            assert f"**{column.header}** ({column.key})" in prompt
        assert "- Data Type: text" in prompt
        assert "**Dataset Size**: 25 total records" in prompt

    def test_defaults_are_used_without_options(
        self, builder: TablePromptBuilder, rows: list[dict], columns: list[TableColumn]
    ) -> None:
        prompt = builder.build_prompt(rows, columns)
        assert "**Business Entity**: Business Performance Analytics" in prompt
        assert "comprehensive deep-dive analysis" in prompt
        assert "5. Strategic Recommendations" in prompt
        assert "6. Outlook" in prompt

    def test_sample_is_capped_at_ten_rows(
        self, builder: TablePromptBuilder, rows: list[dict], columns: list[TableColumn]
    ) -> None:
        prompt = builder.build_prompt(rows, columns)
        assert "SAMPLE DATA EXTRACT (First 10 Representative Records)" in prompt
        assert "\n10. Row-009 | " in prompt
        assert "\n11. Row-010 | " not in prompt

    def test_sample_respects_max_rows(
        self, builder: TablePromptBuilder, rows: list[dict], columns: list[TableColumn]
    ) -> None:
        prompt = builder.build_prompt(rows, columns, AnalysisOptions(max_rows=3))
        assert "SAMPLE DATA EXTRACT (First 3 Representative Records)" in prompt
        assert "\n3. Row-002 | " in prompt
        assert "\n4. Row-003 | " not in prompt

    def test_sample_cells_are_formatted(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [{"member_name": "Asha", "revenue": 250000, "visit_date": "2025-09-14", "notes": None}]
        prompt = builder.build_prompt(rows, columns)
        assert "\n1. Asha | ₹2.50 lakhs | 14/9/2025 | N/A" in prompt

    def test_invalid_sample_date(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [{"member_name": "Asha", "revenue": 10, "visit_date": "whenever", "notes": "vip"}]
        prompt = builder.build_prompt(rows, columns)
        assert "\n1. Asha | ₹10 | Invalid Date | vip" in prompt

    def test_statistics_blocks(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [
            {"member_name": "Asha", "revenue": 150000, "visit_date": "2025-01-05"},
            {"member_name": "Asha", "revenue": 50000, "visit_date": "2025-02-10"},
            {"member_name": "Ravi", "revenue": 100000, "visit_date": "2025-02-20"},
        ]
        prompt = builder.build_prompt(rows, columns)

        assert "Total Aggregate: ₹3.00 lakhs" in prompt
        assert "Mean (Average): ₹1.00 lakhs" in prompt
        assert "Range: ₹50.0K → ₹1.50 lakhs" in prompt
        assert 'Distribution Leader: "Asha" (2 occurrences, 66.7% share)' in prompt
        assert "Analysis Period: 5 January 2025 to 20 February 2025" in prompt
        assert "Duration: 2 months" in prompt

    def test_monthly_breakdown(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [
            {"member_name": "A", "revenue": 1, "visit_date": "2025-01-03"},
            {"member_name": "B", "revenue": 1, "visit_date": "2025-01-09"},
            {"member_name": "C", "revenue": 1, "visit_date": "2025-02-01"},
            {"member_name": "D", "revenue": 1, "visit_date": "2025-02-14"},
            {"member_name": "E", "revenue": 1, "visit_date": "2025-02-27"},
        ]
        prompt = builder.build_prompt(rows, columns)

        assert "**January 2025**: 2 records\n" in prompt
        assert "**February 2025**: 3 records (+50.0% vs previous month)" in prompt

    def test_zero_average_has_no_variance(self, builder: TablePromptBuilder) -> None:
        columns = [TableColumn(key="delta", header="Delta", type="number")]
        prompt = builder.build_prompt([{"delta": 0}, {"delta": 0}], columns)
        assert "Spread: 0 (n/a variance)" in prompt

    def test_recommendations_can_be_omitted(
        self, builder: TablePromptBuilder, rows: list[dict], columns: list[TableColumn]
    ) -> None:
        options = AnalysisOptions(
            table_name="Membership",
            context="Gym revenue",
            summary_type="brief",
            include_recommendations=False,
        )
        prompt = builder.build_prompt(rows, columns, options)

        assert "Strategic Recommendations" not in prompt
        assert "5. Outlook" in prompt
        assert "**Business Entity**: Membership" in prompt
        assert "**Context**: Gym revenue" in prompt
        assert "brief deep-dive analysis" in prompt

    def test_non_mapping_rows_are_skipped(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [
            {"member_name": "Asha", "revenue": 10, "visit_date": "2025-01-03"},
            None,
            "stray",
            {"member_name": "Ravi", "revenue": 20, "visit_date": "2025-01-09"},
        ]
        prompt = builder.build_prompt(rows, columns)  # type: ignore[arg-type]

        assert "**January 2025**: 2 records" in prompt
        assert "\n1. Asha | " in prompt
        assert "\n2. Ravi | " in prompt

    def test_empty_table_still_builds(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        prompt = builder.build_prompt([], columns)
        assert "**Dataset Size**: 0 total records" in prompt
        assert "SAMPLE DATA EXTRACT" not in prompt


# ---------------------------------------------------------------------------
# Quick insights prompt
# ---------------------------------------------------------------------------


class TestQuickInsightsPrompt:
    def test_metrics_and_month(self, builder: TablePromptBuilder, columns: list[TableColumn]) -> None:
        rows = [
            {"member_name": "Asha", "revenue": 100000},
            {"member_name": "Ravi", "revenue": 50000},
        ]
        prompt = builder.build_quick_insights_prompt(rows, columns, "February", table_name="Membership")

        assert "Analyze this Membership data with PRIMARY FOCUS on February performance" in prompt
        assert "Data: 2 rows" in prompt
        assert "Key metrics: Revenue: ₹1.50 lakhs" in prompt
        assert 'Start each insight with "February:"' in prompt
        assert "Provide exactly 5 bullet points" in prompt

    def test_no_numeric_columns(self, builder: TablePromptBuilder) -> None:
        columns = [TableColumn(key="plan", header="Plan", type="text")]
        prompt = builder.build_quick_insights_prompt([{"plan": "Gold"}], columns, "March")
        assert "Key metrics: none" in prompt
        assert "Analyze this business data" in prompt
