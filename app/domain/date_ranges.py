"""
app/domain/date_ranges.py

Calendar month ranges and loose date parsing for dashboard filters.

Every helper reads "now" from an injectable clock so callers and tests
can pin the current time. Month boundaries use calendar arithmetic: the
last day of a month is the day before the first day of the next month.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

STANDARD_MONTH_WINDOW = 22
DEFAULT_DYNAMIC_MONTHS = 18
MAX_MONTHS_BACK = 240

_MONTH_ABBR: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)
_MONTH_NAMES: tuple[str, ...] = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

NATIVE_DATE_FORMATS: tuple[str, ...] = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%Y-%m-%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%B %Y",
    "%b %Y",
)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class DateRange:
    start: str
    end: str


@dataclass(frozen=True)
class MonthDescriptor:
    key: str
    display: str
    year: int
    month: int
    quarter: int
    sort_order: int


def month_name(month: int) -> str:
    return _MONTH_NAMES[month - 1]


def format_iso_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _first_day(year: int, month: int, delta: int = 0) -> date:
    shifted_year, shifted_month = _shift_month(year, month, delta)
    return date(shifted_year, shifted_month, 1)


def _last_day(year: int, month: int, delta: int = 0) -> date:
    return _first_day(year, month, delta + 1) - timedelta(days=1)


def _describe_month(year: int, month: int) -> MonthDescriptor:
    return MonthDescriptor(
        key=f"{year}-{month:02d}",
        display=f"{_MONTH_ABBR[month - 1]} {year}",
        year=year,
        month=month,
        quarter=math.ceil(month / 3),
        sort_order=year * 100 + month,
    )


def parse_native_date(value: str) -> datetime | None:
    """
    Parse an ISO or common textual date string.

    Timezone-aware results are converted to naive UTC so values parsed
    from different inputs stay comparable.
    """

    raw = value.strip()
    if not raw:
        return None

    normalized = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        parsed = None

    if parsed is None:
        for fmt in NATIVE_DATE_FORMATS:
            try:
                parsed = datetime.strptime(raw, fmt)
                break
            except ValueError:
                continue

    if parsed is not None and parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def coerce_datetime(value: object) -> datetime | None:
    """
    Convert a loosely typed cell value into a naive datetime.

    Numbers are read as epoch milliseconds. Returns None when the value
    cannot be interpreted as a calendar instant.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        return parse_native_date(value)
    return None


def _parse_day_first(value: str) -> datetime | None:
    date_part = value.split(" ")[0].strip()
    parts = date_part.split("/")
    if len(parts) != 3:
        return None

    numbers = [_LEADING_INT.match(part) for part in parts]
    if not all(numbers):
        return None

    day, month, year = (int(match.group(1)) for match in numbers)
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_flexible_date(value: object) -> datetime | None:
    """
    Parse dashboard date strings in several ambiguous layouts.

    Order of attempts:
    1. ``"2020-01-01, 17:30:00"`` - only the part before the first comma.
    2. ``"14/09/2025 10:00:00"`` - day/month/year, time ignored.
    3. strings containing ``-`` - native parse.
    4. anything else - native parse.

    A day-first string that is not a real calendar date is not rolled
    over into the next month: ``"09/14/2025"`` falls through to the
    month-first native parse, and ``"31/02/2025"`` yields None.

    Returns None (never raises) when nothing matches.
    """

    if not isinstance(value, str) or not value.strip():
        return None

    if "," in value:
        parsed = parse_native_date(value.split(",")[0])
        if parsed is not None:
            return parsed

    if "/" in value:
        parsed = _parse_day_first(value)
        if parsed is not None:
            return parsed

    if "-" in value:
        parsed = parse_native_date(value)
        if parsed is not None:
            return parsed

    parsed = parse_native_date(value)
    if parsed is None:
        logger.debug("Unparseable date string: %r", value)
    return parsed


class DateRangeHelper:
    """
    Month range calculations relative to an injectable clock.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or datetime.now

    def _today(self) -> date:
        return self._clock().date()

    def previous_month_range(self) -> DateRange:
        today = self._today()
        return DateRange(
            start=format_iso_date(_first_day(today.year, today.month, -1)),
            end=format_iso_date(_last_day(today.year, today.month, -1)),
        )

    def current_month_range(self) -> DateRange:
        today = self._today()
        return DateRange(
            start=format_iso_date(_first_day(today.year, today.month)),
            end=format_iso_date(_last_day(today.year, today.month)),
        )

    def months_back_range(self, months_back: int) -> DateRange:
        """
        First day of (current month - months_back) to the last day of the current month.

        Raises
        ------
        ValueError
            If *months_back* is negative.
        """

        if months_back < 0:
            raise ValueError(f"months_back must be >= 0, got {months_back}")
        today = self._today()
        return DateRange(
            start=format_iso_date(_first_day(today.year, today.month, -months_back)),
            end=format_iso_date(_last_day(today.year, today.month)),
        )

    def standard_month_range(self) -> list[MonthDescriptor]:
        """
        Rolling 22-month window ending at the current month, oldest first.
        """

        return self.dynamic_months(STANDARD_MONTH_WINDOW)

    def dynamic_months(self, month_count: int = DEFAULT_DYNAMIC_MONTHS) -> list[MonthDescriptor]:
        today = self._today()
        months: list[MonthDescriptor] = []
        for offset in range(month_count - 1, -1, -1):
            year, month = _shift_month(today.year, today.month, -offset)
            months.append(_describe_month(year, month))
        return months

    def previous_month_period(self) -> str:
        today = self._today()
        year, month = _shift_month(today.year, today.month, -1)
        return f"{year}-{month:02d}"

    def previous_month_display(self) -> str:
        today = self._today()
        year, month = _shift_month(today.year, today.month, -1)
        return f"{month_name(month)} {year}"

    def previous_month_name(self) -> str:
        today = self._today()
        _, month = _shift_month(today.year, today.month, -1)
        return month_name(month)


def _helper(now: datetime | None) -> DateRangeHelper:
    if now is None:
        return DateRangeHelper()
    return DateRangeHelper(clock=lambda: now)


def previous_month_range(now: datetime | None = None) -> DateRange:
    return _helper(now).previous_month_range()


def current_month_range(now: datetime | None = None) -> DateRange:
    return _helper(now).current_month_range()


def months_back_range(months_back: int, now: datetime | None = None) -> DateRange:
    return _helper(now).months_back_range(months_back)


def standard_month_range(now: datetime | None = None) -> list[MonthDescriptor]:
    return _helper(now).standard_month_range()


def dynamic_months(month_count: int = DEFAULT_DYNAMIC_MONTHS, now: datetime | None = None) -> list[MonthDescriptor]:
    return _helper(now).dynamic_months(month_count)


def previous_month_period(now: datetime | None = None) -> str:
    return _helper(now).previous_month_period()


def previous_month_display(now: datetime | None = None) -> str:
    return _helper(now).previous_month_display()
