"""
Calendar arithmetic for quotas and subscriptions.

All day boundaries are UTC midnight. Month offsets clamp to the last day of
the target month (2024-01-31 + 3 months = 2024-04-30), via relativedelta.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Callable

from dateutil.relativedelta import relativedelta

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(at: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if at.tzinfo is None:
        return at.replace(tzinfo=timezone.utc)
    return at.astimezone(timezone.utc)


def start_of_day(at: datetime) -> datetime:
    """UTC midnight on the day containing at."""
    at = as_utc(at)
    return at.replace(hour=0, minute=0, second=0, microsecond=0)


def next_day_start(at: datetime) -> datetime:
    return start_of_day(at) + timedelta(days=1)


def usage_date(at: datetime) -> date:
    """UTC calendar day that at is counted against."""
    return as_utc(at).date()


def seconds_until_reset(at: datetime) -> int:
    """Whole seconds until the next UTC midnight, at least 1."""
    remaining = next_day_start(at) - as_utc(at)
    return max(1, int(remaining.total_seconds()))


def add_months(at: datetime, months: int) -> datetime:
    """at shifted by whole calendar months, clamped to month end."""
    if months < 0:
        raise ValueError("months must be non-negative")
    return as_utc(at) + relativedelta(months=months)
