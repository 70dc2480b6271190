"""
app/api/routers/summary_router.py

Table analysis endpoints.

Generation failures are reported inside the response payload with
HTTP 200, mirroring how the dashboard renders them; only malformed
requests produce non-2xx responses.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.services.table_summary_service import TableSummaryService, get_table_summary_service
from llm_synthesis.schema import (
    ConnectionTestResult,
    QuickInsightsRequest,
    QuickInsightsResult,
    TableSummaryRequest,
    TableSummaryResult,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["summary"])


@router.post(
    "/table-summary",
    response_model=TableSummaryResult,
    status_code=status.HTTP_200_OK,
)
def create_table_summary(
    body: TableSummaryRequest,
    service: TableSummaryService = Depends(get_table_summary_service),
) -> TableSummaryResult:
    """
    Summarize a table into summary text, key insights, trends and recommendations.
    """

    return service.summarize(body.rows, body.columns, body)


@router.post(
    "/quick-insights",
    response_model=QuickInsightsResult,
    status_code=status.HTTP_200_OK,
)
def create_quick_insights(
    body: QuickInsightsRequest,
    service: TableSummaryService = Depends(get_table_summary_service),
) -> QuickInsightsResult:
    insights = service.quick_insights(body.rows, body.columns, table_name=body.table_name)
    return QuickInsightsResult(insights=insights)


@router.get("/connection-test", response_model=ConnectionTestResult)
def connection_test(
    service: TableSummaryService = Depends(get_table_summary_service),
) -> ConnectionTestResult:
    result = service.test_connection()
    if not result.success:
        logger.warning("Connection test endpoint reported failure: %s", result.error)
    return result
