"""Display formatting used when rendering figures into prompts.

Currency is Indian Rupees: lakhs for amounts of 1,00,000 and above,
thousands below that, and plain Indian digit grouping otherwise.
"""

from datetime import datetime

from app.domain.date_ranges import month_name

LAKH = 100_000
THOUSAND = 1_000


def _group_indian(digits: str) -> str:
    """Group an integer digit string as 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_indian_number(value: float, max_fraction_digits: int = 3) -> str:
    """Format *value* with Indian digit grouping and trimmed decimals."""
    rendered = f"{abs(value):.{max_fraction_digits}f}".rstrip("0").rstrip(".")
    integer, _, fraction = rendered.partition(".")
    sign = "-" if value < 0 and rendered != "0" else ""
    grouped = _group_indian(integer)
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


def format_currency(amount: float) -> str:
    value_in_lakhs = amount / LAKH
    if value_in_lakhs >= 1:
        return f"₹{value_in_lakhs:.2f} lakhs"

    value_in_thousands = amount / THOUSAND
    if value_in_thousands >= 1:
        return f"₹{value_in_thousands:.1f}K"

    return f"₹{format_indian_number(amount)}"


def format_number(value: float) -> str:
    """US digit grouping with at most two decimals."""
    rendered = f"{value:,.2f}"
    if "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    return "0" if rendered == "-0" else rendered


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def format_value(value: float, column_type: str) -> str:
    if column_type == "currency":
        return format_currency(value)
    if column_type == "percentage":
        return format_percentage(value)
    return format_number(value)


def format_long_date(value: datetime) -> str:
    """Indian long date, e.g. ``14 September 2025``."""
    return f"{value.day} {month_name(value.month)} {value.year}"


def format_short_date(value: datetime) -> str:
    """Indian short date, e.g. ``14/9/2025``."""
    return f"{value.day}/{value.month}/{value.year}"


def format_month_year(value: datetime) -> str:
    return f"{month_name(value.month)} {value.year}"
