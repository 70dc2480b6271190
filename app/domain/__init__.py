"""
app/domain package marker.
"""

from app.domain.date_ranges import (
    DateRange,
    DateRangeHelper,
    MonthDescriptor,
    parse_flexible_date,
)

__all__ = [
    "DateRange",
    "DateRangeHelper",
    "MonthDescriptor",
    "parse_flexible_date",
]
