"""
app/api/routers/date_range_router.py

Calendar ranges used by dashboard filters.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel

from app.domain.date_ranges import DEFAULT_DYNAMIC_MONTHS, MAX_MONTHS_BACK, DateRangeHelper

router = APIRouter(prefix="/date-ranges", tags=["date-ranges"])


class DateRangeResponse(BaseModel):
    start: str
    end: str


class MonthDescriptorResponse(BaseModel):
    key: str
    display: str
    year: int
    month: int
    quarter: int
    sort_order: int


class MonthPeriodResponse(BaseModel):
    period: str
    display: str


def get_date_range_helper() -> DateRangeHelper:
    return DateRangeHelper()


@router.get("/previous-month", response_model=DateRangeResponse)
def previous_month(helper: DateRangeHelper = Depends(get_date_range_helper)) -> DateRangeResponse:
    return DateRangeResponse(**asdict(helper.previous_month_range()))


@router.get("/current-month", response_model=DateRangeResponse)
def current_month(helper: DateRangeHelper = Depends(get_date_range_helper)) -> DateRangeResponse:
    return DateRangeResponse(**asdict(helper.current_month_range()))


@router.get("/months-back/{months_back}", response_model=DateRangeResponse)
def months_back(
    months_back: int = Path(ge=0, le=MAX_MONTHS_BACK),
    helper: DateRangeHelper = Depends(get_date_range_helper),
) -> DateRangeResponse:
    return DateRangeResponse(**asdict(helper.months_back_range(months_back)))


@router.get("/standard-months", response_model=list[MonthDescriptorResponse])
def standard_months(
    helper: DateRangeHelper = Depends(get_date_range_helper),
) -> list[MonthDescriptorResponse]:
    return [MonthDescriptorResponse(**asdict(month)) for month in helper.standard_month_range()]


@router.get("/dynamic-months", response_model=list[MonthDescriptorResponse])
def dynamic_months(
    count: int = Query(default=DEFAULT_DYNAMIC_MONTHS, ge=1, le=120),
    helper: DateRangeHelper = Depends(get_date_range_helper),
) -> list[MonthDescriptorResponse]:
    return [MonthDescriptorResponse(**asdict(month)) for month in helper.dynamic_months(count)]


@router.get("/previous-month-period", response_model=MonthPeriodResponse)
def previous_month_period(
    helper: DateRangeHelper = Depends(get_date_range_helper),
) -> MonthPeriodResponse:
    return MonthPeriodResponse(
        period=helper.previous_month_period(),
        display=helper.previous_month_display(),
    )
