import re
from datetime import date, datetime, timedelta

from . import settings


def is_weekday(day: date) -> bool:
    """Saturday and Sunday are never shipping days."""
    return day.weekday() < 5


def minimum_order_date(today: date, lead_time_days: int) -> date:
    """
    Returns the earliest permissible shipping date.

    Starts the day after `today` and walks forward one calendar day at a time,
    counting only Monday-Friday, until `lead_time_days` business days have been
    counted. A lead time of zero still yields the next weekday after today.
    """
    current = today
    counted = 0
    while True:
        current += timedelta(days=1)
        if not is_weekday(current):
            continue
        counted += 1
        if counted >= lead_time_days:
            return current


def first_weekday_between(start: date, end: date | None = None) -> date | None:
    """First weekday on or after `start` and strictly before `end` (if bounded)."""
    current = start
    while end is None or current < end:
        if is_weekday(current):
            return current
        current += timedelta(days=1)
    return None


def parse_date(value) -> date | None:
    """
    Parses a date from a native value or one of settings.DATE_INPUT_FORMATS.

    Returns None for anything that is not recognized; never guesses.
    """
    if value is None:
        return None
    # datetime (and pandas.Timestamp) is a date subclass, check it first
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    for shape, fmt in settings.DATE_INPUT_FORMATS:
        if not re.fullmatch(shape, text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value) -> str | None:
    """Canonical 'YYYY-MM-DD' string for any accepted date input, else None."""
    parsed = parse_date(value)
    return parsed.isoformat() if parsed else None
