from __future__ import annotations

from datetime import datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import date_range_router, summary_router
from app.api.routers.date_range_router import get_date_range_helper
from app.domain.date_ranges import DateRangeHelper
from app.services.table_summary_service import TableSummaryService, get_table_summary_service
from llm_synthesis.adapter import BaseLLMAdapter, LLMGenerationError, MockLLMAdapter


class _RateLimitedAdapter(BaseLLMAdapter):
    model_name = "limited"

    def generate(self, prompt: str) -> str:
        raise LLMGenerationError("quota exhausted", status_code=429)


def _build_client(adapter: BaseLLMAdapter) -> TestClient:
    helper = DateRangeHelper(clock=lambda: datetime(2025, 3, 15))
    application = FastAPI()
    application.include_router(summary_router)
    application.include_router(date_range_router)
    application.dependency_overrides[get_table_summary_service] = lambda: TableSummaryService(
        adapter=adapter,
        date_helper=helper,
    )
    application.dependency_overrides[get_date_range_helper] = lambda: helper
    return TestClient(application)


@pytest.fixture()
def client() -> TestClient:
    return _build_client(MockLLMAdapter())


def _body() -> dict:
    return {
        "rows": [
            {"member": "Asha", "revenue": 120000, "joined": "2025-01-04"},
            {"member": "Ravi", "revenue": "₹80,000", "joined": "2025-02-11"},
        ],
        "columns": [
            {"key": "member", "header": "Member", "type": "text"},
            {"key": "revenue", "header": "Revenue", "type": "currency"},
            {"key": "joined", "header": "Joined", "type": "date"},
        ],
        "table_name": "Memberships",
    }


def test_table_summary(client: TestClient) -> None:
    response = client.post("/table-summary", json=_body())

    assert response.status_code == 200
    payload = response.json()
    assert payload["error"] is None
    assert len(payload["key_insights"]) == 3
    assert len(payload["trends"]) == 2
    assert len(payload["recommendations"]) == 2


def test_table_summary_without_rows(client: TestClient) -> None:
    body = _body()
    body["rows"] = []
    response = client.post("/table-summary", json=body)

    assert response.status_code == 200
    assert response.json()["error"] == "No data provided"


def test_generation_failure_is_reported_in_payload() -> None:
    response = _build_client(_RateLimitedAdapter()).post("/table-summary", json=_body())

    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"] == "Rate limit exceeded. Please try again in a few moments."
    assert payload["error"] == "quota exhausted"


def test_invalid_column_is_rejected(client: TestClient) -> None:
    body = _body()
    body["columns"][0] = {"header": "Member"}
    assert client.post("/table-summary", json=body).status_code == 422


def test_quick_insights(client: TestClient) -> None:
    body = _body()
    body.pop("table_name")
    response = client.post("/quick-insights", json=body)

    assert response.status_code == 200
    insights = response.json()["insights"]
    assert 0 < len(insights) <= 5


def test_connection_test_failure() -> None:
    response = _build_client(_RateLimitedAdapter()).get("/connection-test")

    assert response.status_code == 200
    assert response.json() == {"success": False, "model": None, "error": "quota exhausted"}


def test_connection_test_success(client: TestClient) -> None:
    assert client.get("/connection-test").json() == {"success": True, "model": "mock", "error": None}


def test_previous_month(client: TestClient) -> None:
    response = client.get("/date-ranges/previous-month")
    assert response.json() == {"start": "2025-02-01", "end": "2025-02-28"}


def test_months_back(client: TestClient) -> None:
    response = client.get("/date-ranges/months-back/2")
    assert response.json() == {"start": "2025-01-01", "end": "2025-03-31"}


@pytest.mark.parametrize("months_back", [-2, 30000])
def test_months_back_out_of_range_is_rejected(client: TestClient, months_back: int) -> None:
    assert client.get(f"/date-ranges/months-back/{months_back}").status_code == 422


def test_standard_months(client: TestClient) -> None:
    months = client.get("/date-ranges/standard-months").json()
    assert len(months) == 22
    assert months[-1] == {
        "key": "2025-03",
        "display": "Mar 2025",
        "year": 2025,
        "month": 3,
        "quarter": 1,
        "sort_order": 202503,
    }


def test_dynamic_months_validation(client: TestClient) -> None:
    assert len(client.get("/date-ranges/dynamic-months", params={"count": 4}).json()) == 4
    assert client.get("/date-ranges/dynamic-months", params={"count": 0}).status_code == 422


def test_previous_month_period(client: TestClient) -> None:
    assert client.get("/date-ranges/previous-month-period").json() == {
        "period": "2025-02",
        "display": "February 2025",
    }
