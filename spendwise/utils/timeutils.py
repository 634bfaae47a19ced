"""Date helpers. All stored timestamps are naive UTC ISO strings with microseconds,
so lexicographic order matches chronological order in DynamoDB sort keys."""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple, Union

from spendwise.core.exceptions import ValidationError

MONTH_NAMES = ["", "Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def to_iso(value: datetime) -> str:
    return to_utc_naive(value).isoformat(timespec="microseconds")


def from_iso(value: str) -> datetime:
    return to_utc_naive(datetime.fromisoformat(value))


def month_key(value: datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def month_bounds(month: str) -> Tuple[datetime, datetime]:
    """Inclusive [start, end] of a YYYY-MM month."""
    if not MONTH_PATTERN.match(month):
        raise ValidationError("Month must be in YYYY-MM format")
    year, mon = int(month[:4]), int(month[5:])
    start = datetime(year, mon, 1)
    if mon == 12:
        next_start = datetime(year + 1, 1, 1)
    else:
        next_start = datetime(year, mon + 1, 1)
    return start, next_start - timedelta(microseconds=1)


def year_bounds(year: int) -> Tuple[datetime, datetime]:
    return datetime(year, 1, 1), datetime(year + 1, 1, 1) - timedelta(microseconds=1)


def parse_query_date(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse a startDate/endDate query parameter.

    A bare YYYY-MM-DD used as an end bound covers the whole day.
    """
    if not value:
        return None
    try:
        parsed = from_iso(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date format: {value}")
    if end_of_day and _DATE_ONLY.match(value):
        parsed = parsed + timedelta(days=1) - timedelta(microseconds=1)
    return parsed


def as_datetime(value: Union[datetime, date, str]) -> datetime:
    if isinstance(value, datetime):
        return to_utc_naive(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    return from_iso(value)
