from __future__ import annotations

import datetime as dt

SHORT_DATE_FORMAT = "%d %b"


def start_of_day(value: dt.date | dt.datetime) -> dt.date:
    """
    Truncate to a UTC calendar day.

    Aware datetimes are converted to UTC first; naive datetimes are taken as UTC.
    """
    if isinstance(value, dt.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt.timezone.utc)
        return value.date()
    return value


def today_utc() -> dt.date:
    return dt.datetime.now(dt.timezone.utc).date()


def add_days(value: dt.date, days: int) -> dt.date:
    return start_of_day(value) + dt.timedelta(days=days)


def days_between(a: dt.date, b: dt.date) -> int:
    """Whole days from `a` to `b`; negative when `b` precedes `a`."""
    return (start_of_day(b) - start_of_day(a)).days


def start_of_week(value: dt.date) -> dt.date:
    """Monday of the ISO week containing `value` (Sunday closes the previous week)."""
    day = start_of_day(value)
    return day - dt.timedelta(days=day.weekday())


def short_date_label(value: dt.date) -> str:
    return start_of_day(value).strftime(SHORT_DATE_FORMAT)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
