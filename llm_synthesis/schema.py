"""Request and response contracts for table analysis."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

NUMERIC_COLUMN_TYPES = frozenset({"number", "currency", "percentage"})
TEXT_COLUMN_TYPE = "text"
DATE_COLUMN_TYPE = "date"

SummaryType = Literal["comprehensive", "insights", "trends", "performance", "brief"]


class TableColumn(BaseModel):
    """Describes one column of the table being analysed.

    ``type`` drives which statistics are computed. Columns without a
    type (or with a type outside the known set) are display-only.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    key: str = Field(min_length=1)
    header: str
    type: Optional[str] = None

    @property
    def display_type(self) -> str:
        return self.type or TEXT_COLUMN_TYPE


class AnalysisOptions(BaseModel):
    """Presentation options for a single analysis request."""

    table_name: Optional[str] = None
    context: Optional[str] = None
    summary_type: SummaryType = "comprehensive"
    include_recommendations: bool = True
    max_rows: Optional[int] = Field(default=None, ge=1)


class TableSummaryRequest(AnalysisOptions):
    """Full request body: the table itself plus analysis options."""

    rows: List[Dict[str, Any]] = Field(default_factory=list)
    columns: List[TableColumn] = Field(default_factory=list)


class QuickInsightsRequest(BaseModel):
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    columns: List[TableColumn] = Field(default_factory=list)
    table_name: Optional[str] = None


class ParsedAnalysis(BaseModel):
    """Sections recovered from a free-text model response."""

    summary: Optional[str] = None
    key_insights: List[str] = Field(default_factory=list)
    trends: List[str] = Field(default_factory=list)
    recommendations: Optional[List[str]] = None


class TableSummaryResult(BaseModel):
    """Result returned to the dashboard for one summary request."""

    summary: str
    key_insights: List[str]
    trends: List[str]
    recommendations: Optional[List[str]] = None
    error: Optional[str] = None

    @classmethod
    def no_data(cls) -> "TableSummaryResult":
        return cls(
            summary="No data available for analysis.",
            key_insights=["No data to analyze"],
            trends=["Insufficient data for trend analysis"],
            error="No data provided",
        )

    @classmethod
    def failure(cls, message: str, error: str) -> "TableSummaryResult":
        return cls(
            summary=message,
            key_insights=["AI service encountered an error"],
            trends=["Unable to analyze trends at this time"],
            error=error,
        )


class QuickInsightsResult(BaseModel):
    insights: List[str]


class ConnectionTestResult(BaseModel):
    success: bool
    model: Optional[str] = None
    error: Optional[str] = None
