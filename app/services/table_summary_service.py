"""
app/services/table_summary_service.py

Table analysis orchestration.

    TablePromptBuilder → BaseLLMAdapter.generate → parse_analysis_response

Each request makes exactly one generation call. There are no retries,
no backoff and no caching; identical inputs trigger a fresh call.
Generation failures never propagate: they are mapped to a display
message chosen by the provider's HTTP status code.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any

from app.config import LLMSettings, get_llm_settings, get_summary_settings
from app.domain.date_ranges import DateRangeHelper
from app.logging_utils import log_event, preview
from llm_synthesis.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_synthesis.prompt_builder import QUICK_INSIGHT_COUNT, TablePromptBuilder
from llm_synthesis.response_parser import extract_bullet_points, parse_analysis_response
from llm_synthesis.schema import (
    AnalysisOptions,
    ConnectionTestResult,
    TableColumn,
    TableSummaryResult,
)

logger = logging.getLogger(__name__)

CONNECTION_TEST_PROMPT = "Hello, please respond with 'Connection successful'"

_DEFAULT_FAILURE_MESSAGE = "AI analysis temporarily unavailable. Please try again later."
_FAILURE_MESSAGES: dict[int, str] = {
    404: "Model not found. Please check the model configuration.",
    429: "Rate limit exceeded. Please try again in a few moments.",
    403: "API access denied. Please check your API key.",
}

_DEFAULT_QUICK_FAILURE = "Analysis unavailable at this time"
_QUICK_FAILURE_MESSAGES: dict[int, str] = {
    404: "Model configuration error - please contact support",
    429: "Rate limit exceeded - please try again in a moment",
    403: "API access denied - please check configuration",
}


def error_status(exc: BaseException) -> int | None:
    """
    Read an HTTP-like status code from an exception, if it carries one.
    """

    for attribute in ("status_code", "status"):
        value = getattr(exc, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def failure_message(exc: BaseException) -> str:
    return _FAILURE_MESSAGES.get(error_status(exc), _DEFAULT_FAILURE_MESSAGE)


def truncate_summary(text: str, limit: int = 1000) -> str:
    return text[:limit] + ("..." if len(text) > limit else "")


def build_llm_adapter(settings: LLMSettings | None = None) -> BaseLLMAdapter:
    """
    Instantiate the adapter selected by LLM_ADAPTER.

    LLM_ADAPTER=mock   -> MockLLMAdapter  (testing, no API key required)
    LLM_ADAPTER=openai -> OpenAILLMAdapter (default)
    """

    settings = settings or get_llm_settings()
    if settings.adapter == "mock":
        return MockLLMAdapter()

    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        top_p=settings.top_p,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )


class TableSummaryService:
    """
    Composes prompt building, one generation call and response parsing.
    """

    def __init__(
        self,
        adapter: BaseLLMAdapter,
        prompt_builder: TablePromptBuilder | None = None,
        date_helper: DateRangeHelper | None = None,
        fallback_summary_chars: int = 1000,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or TablePromptBuilder()
        self._date_helper = date_helper or DateRangeHelper()
        self._fallback_summary_chars = fallback_summary_chars

    def summarize(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
        options: AnalysisOptions | None = None,
    ) -> TableSummaryResult:
        """
        Produce a summary result for the table.

        Zero rows short-circuit to a fixed "no data" result without
        calling the adapter. Generation failures are returned as a
        failure result, never raised.
        """

        if not rows:
            log_event(logger, logging.INFO, "table_summary_skipped", reason="no_data")
            return TableSummaryResult.no_data()

        options = options or AnalysisOptions()
        prompt = self._prompt_builder.build_prompt(rows, columns, options)
        log_event(
            logger,
            logging.INFO,
            "table_summary_requested",
            table_name=options.table_name,
            rows=len(rows),
            columns=len(columns),
            prompt_chars=len(prompt),
        )

        try:
            text = self._adapter.generate(prompt)
        except Exception as exc:
            status_code = error_status(exc)
            logger.error(
                "Table summary generation failed status=%s: %s",
                status_code,
                exc,
            )
            error = str(exc) or (str(status_code) if status_code is not None else "")
            return TableSummaryResult.failure(
                message=failure_message(exc),
                error=error or "Unknown error occurred",
            )

        parsed = parse_analysis_response(text)
        log_event(
            logger,
            logging.INFO,
            "table_summary_parsed",
            has_summary=parsed.summary is not None,
            insights=len(parsed.key_insights),
            trends=len(parsed.trends),
            response_preview=preview(text),
        )

        return TableSummaryResult(
            summary=parsed.summary or truncate_summary(text, self._fallback_summary_chars),
            key_insights=parsed.key_insights or [],
            trends=parsed.trends or [],
            recommendations=parsed.recommendations,
        )

    def quick_insights(
        self,
        rows: Sequence[Mapping[str, Any]],
        columns: Sequence[TableColumn],
        table_name: str | None = None,
    ) -> list[str]:
        """
        Five short insights focused on the previous calendar month.
        """

        prompt = self._prompt_builder.build_quick_insights_prompt(
            rows,
            columns,
            previous_month=self._date_helper.previous_month_name(),
            table_name=table_name,
        )
        try:
            text = self._adapter.generate(prompt)
        except Exception as exc:
            status_code = error_status(exc)
            logger.error("Quick insights generation failed status=%s: %s", status_code, exc)
            return [_QUICK_FAILURE_MESSAGES.get(status_code, _DEFAULT_QUICK_FAILURE)]

        return extract_bullet_points(text, QUICK_INSIGHT_COUNT)

    def test_connection(self) -> ConnectionTestResult:
        """
        Send a trivial prompt to confirm the model is reachable.
        """

        try:
            self._adapter.generate(CONNECTION_TEST_PROMPT)
        except Exception as exc:
            logger.error("Connection test failed: %s", exc)
            return ConnectionTestResult(success=False, error=str(exc) or "Connection failed")
        return ConnectionTestResult(success=True, model=self._adapter.model_name)


@lru_cache(maxsize=1)
def get_table_summary_service() -> TableSummaryService:
    """
    Build and cache the summary service with env-driven settings.
    """

    summary_settings = get_summary_settings()
    return TableSummaryService(
        adapter=build_llm_adapter(),
        fallback_summary_chars=summary_settings.fallback_summary_chars,
    )
