"""Date parsing and calendar-month helpers."""

from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(value: Union[str, date, datetime], today: Optional[date] = None) -> date:
    """Parse a date given as a date object, an ISO string or a relative word.

    Supports "today", "yesterday" and "N days ago" in addition to any format
    dateutil understands ("2024-01-15", "Jan 15 2024", ...).

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Could not parse date {value!r}")

    text = value.strip().lower()
    today = today or date.today()

    if text == "today":
        return today
    if text == "yesterday":
        return today - timedelta(days=1)
    if text.endswith(" days ago"):
        count = text[: -len(" days ago")].strip()
        if count.isdigit():
            return today - timedelta(days=int(count))

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{value}': {e}") from e


def month_key(value: date) -> str:
    """Return the "YYYY-MM" key of a date."""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month(value: Union[str, date]) -> date:
    """Return the first day of a month given as "YYYY-MM" or any date in it."""
    if isinstance(value, date):
        return value.replace(day=1)
    try:
        year, month = value.strip().split("-")[:2]
        return date(int(year), int(month), 1)
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Could not parse month '{value}', expected YYYY-MM") from e


def months_before(value: date, months: int) -> date:
    """Subtract calendar months, clamping to the end of shorter months."""
    return value - relativedelta(months=months)
