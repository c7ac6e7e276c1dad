"""Tests for UTC day windows and calendar-month arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from matchledger.ledger.clock import (
    add_months,
    as_utc,
    next_day_start,
    seconds_until_reset,
    start_of_day,
    usage_date,
)


class TestDayWindow:

    def test_start_of_day_is_utc_midnight(self):
        at = datetime(2024, 3, 10, 23, 59, 59, tzinfo=timezone.utc)
        assert start_of_day(at) == datetime(2024, 3, 10, tzinfo=timezone.utc)

    def test_other_timezones_are_counted_on_their_utc_day(self):
        # 2024-03-10 20:00 at UTC-5 is already 2024-03-11 in UTC
        eastern = timezone(timedelta(hours=-5))
        at = datetime(2024, 3, 10, 20, 0, tzinfo=eastern)
        assert usage_date(at) == date(2024, 3, 11)

    def test_naive_datetimes_are_taken_as_utc(self):
        naive = datetime(2024, 3, 10, 8, 0)
        assert as_utc(naive).tzinfo == timezone.utc
        assert usage_date(naive) == date(2024, 3, 10)

    def test_next_day_start(self):
        at = datetime(2024, 2, 28, 15, 0, tzinfo=timezone.utc)
        assert next_day_start(at) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_seconds_until_reset(self):
        at = datetime(2024, 3, 10, 23, 0, tzinfo=timezone.utc)
        assert seconds_until_reset(at) == 3600

    def test_seconds_until_reset_is_never_zero(self):
        at = datetime(2024, 3, 10, 23, 59, 59, 999999, tzinfo=timezone.utc)
        assert seconds_until_reset(at) == 1


class TestAddMonths:

    def test_month_end_is_clamped(self):
        start = datetime(2024, 1, 31, 10, 30, tzinfo=timezone.utc)
        assert add_months(start, 3) == datetime(2024, 4, 30, 10, 30, tzinfo=timezone.utc)

    def test_leap_year_february(self):
        start = datetime(2024, 1, 31, tzinfo=timezone.utc)
        assert add_months(start, 1) == datetime(2024, 2, 29, tzinfo=timezone.utc)

    def test_twelve_months_crosses_year(self):
        start = datetime(2024, 2, 29, tzinfo=timezone.utc)
        assert add_months(start, 12) == datetime(2025, 2, 28, tzinfo=timezone.utc)

    def test_ordinary_day_is_preserved(self):
        start = datetime(2024, 5, 15, 6, 0, tzinfo=timezone.utc)
        assert add_months(start, 6) == datetime(2024, 11, 15, 6, 0, tzinfo=timezone.utc)

    def test_negative_months_rejected(self):
        with pytest.raises(ValueError):
            add_months(datetime(2024, 1, 1, tzinfo=timezone.utc), -1)
