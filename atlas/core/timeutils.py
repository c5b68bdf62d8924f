"""Datetime parsing and en-US rendering helpers shared by the engine."""

from datetime import date, datetime
from typing import Any, Optional
import calendar


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a record's date field into a naive local datetime.

    Accepts datetime, date and ISO 8601 strings (a trailing 'Z' is allowed).
    Aware values are converted to local time. Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def minutes_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 60


def add_months(dt: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = dt.month - 1 + months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=999000)


def format_time(dt: datetime) -> str:
    """Render a time as '2:00 PM'."""
    hour = dt.hour % 12 or 12
    suffix = "AM" if dt.hour < 12 else "PM"
    return f"{hour}:{dt.minute:02d} {suffix}"


def format_date(dt: datetime) -> str:
    """Render a date as 'Sun, Oct 18'."""
    return f"{dt.strftime('%a')}, {dt.strftime('%b')} {dt.day}"


def describe_minutes(minutes: int) -> str:
    """
    Render a duration in words.

    >>> describe_minutes(60)
    '1 hour'
    >>> describe_minutes(90)
    '1.5 hours'
    >>> describe_minutes(45)
    '45 minutes'
    """
    if minutes < 60:
        return f"{minutes} minute" + ("" if minutes == 1 else "s")
    hours = minutes / 60
    if hours == int(hours):
        count = str(int(hours))
    else:
        count = f"{hours:g}" if (minutes * 10) % 60 == 0 else f"{hours:.1f}"
    return f"{count} hour" + ("" if hours == 1 else "s")
