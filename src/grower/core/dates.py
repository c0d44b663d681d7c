"""Calendar-date helpers shared by the expander and the mutation engine.

Everything here works on local calendar dates; time-of-day is discarded.
"""

from datetime import date, datetime, timedelta

from dateutil.relativedelta import relativedelta

DATE_KEY_FORMAT = "%Y-%m-%d"


def as_date(value: date | datetime) -> date:
    """Collapse a datetime to its calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def date_key(value: date | datetime) -> str:
    """Canonical yyyy-MM-dd key for a date."""
    return as_date(value).strftime(DATE_KEY_FORMAT)


def parse_date_key(key: object) -> date | None:
    """Parse a yyyy-MM-dd key. Returns None if malformed."""
    if not isinstance(key, str):
        return None
    try:
        return datetime.strptime(key.strip(), DATE_KEY_FORMAT).date()
    except ValueError:
        return None


def parse_record_date(value: object) -> date | None:
    """
    Read the calendar date out of a stored ISO-8601 date or date-time string.

    "2024-01-01", "2024-01-01T00:00:00" and "2024-01-01T05:00:00.000Z" all
    give 2024-01-01. Returns None if malformed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        return None
    return parse_date_key(value[:10])


def week_start(d: date) -> date:
    """Sunday that starts the week containing d."""
    return d - timedelta(days=(d.weekday() + 1) % 7)


def weekday_index(d: date) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (d.weekday() + 1) % 7


def month_start(d: date) -> date:
    return d.replace(day=1)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def add_months(d: date, months: int) -> date:
    """Same day-of-month `months` later, clamped to the end of shorter months."""
    return d + relativedelta(months=months)
