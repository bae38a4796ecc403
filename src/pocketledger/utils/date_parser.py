"""Date parsing utilities."""

from datetime import date, datetime, time, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "this month", "last month"

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "this year": today.replace(month=1, day=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}") from e


def to_naive_utc(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


def parse_datetime(value: str | date | datetime) -> datetime:
    """Parse a timestamp given as ISO-8601 text, a relative date word, or a date.

    Plain dates (and relative words) become midnight of that day. Values with
    a UTC offset are converted to UTC and returned naive, which is how every
    timestamp is stored.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return to_naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Could not parse timestamp {value!r}")

    text = value.strip()
    try:
        return to_naive_utc(date_parser.isoparse(text))
    except ValueError:
        pass
    return datetime.combine(parse_date(text), time.min)


def get_date_range(period: str) -> tuple[date, date]:
    """Get start and end dates (both inclusive) for a named period.

    Args:
        period: One of this-month, last-month, this-year, last-year

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = date.today()

    if period == "this-month":
        return (today.replace(day=1), today)
    elif period == "last-month":
        start_date = (today - relativedelta(months=1)).replace(day=1)
        return (start_date, today.replace(day=1) - timedelta(days=1))
    elif period == "this-year":
        return (today.replace(month=1, day=1), today)
    elif period == "last-year":
        start_date = today.replace(month=1, day=1) - relativedelta(years=1)
        return (start_date, today.replace(month=1, day=1) - timedelta(days=1))

    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: this-month, last-month, this-year, last-year"
    )


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn an inclusive date range into a half-open timestamp range.

    The end bound moves to midnight of the following day so the whole last
    day is included.
    """
    start_at = datetime.combine(start, time.min) if start is not None else None
    end_at = datetime.combine(end + timedelta(days=1), time.min) if end is not None else None
    return start_at, end_at
