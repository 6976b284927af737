"""
Tests for the named/custom date range resolver.
- lastN: exactly N calendar days ending today (end of day).
- lastMonth: whole previous calendar month.
- custom: both bounds required, from > to rejected (never swapped), malformed rejected.
"""
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo

import pytest

from app.metrics.date_ranges import DateRange, RangeName, resolve
from app.metrics.errors import InvalidDateRangeError

NOW = datetime(2025, 1, 7, 15, 30, tzinfo=timezone.utc)


def test_last7_spans_seven_days_ending_today() -> None:
    """last7 = today-6 00:00 .. today 23:59:59.999999."""
    r = resolve("last7", now=NOW, tz=timezone.utc)
    assert r.start == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert r.end == datetime.combine(date(2025, 1, 7), time.max, tzinfo=timezone.utc)
    assert (r.last_day - r.first_day).days + 1 == 7


@pytest.mark.parametrize("name,days", [("last7", 7), ("last14", 14), ("last28", 28)])
def test_named_ranges_day_count(name: str, days: int) -> None:
    """lastN always contains exactly N calendar days."""
    r = resolve(name, now=NOW, tz=timezone.utc)
    assert (r.last_day - r.first_day).days + 1 == days
    assert r.last_day == date(2025, 1, 7)


def test_last_month_is_previous_calendar_month() -> None:
    """lastMonth ignores the current day of month."""
    r = resolve(RangeName.LAST_MONTH, now=datetime(2025, 3, 15, tzinfo=timezone.utc), tz=timezone.utc)
    assert r.first_day == date(2025, 2, 1)
    assert r.last_day == date(2025, 2, 28)
    assert r.end.time() == time.max


def test_last_month_in_january_is_december() -> None:
    """lastMonth crosses the year boundary."""
    r = resolve("lastMonth", now=datetime(2025, 1, 1, 0, 5, tzinfo=timezone.utc), tz=timezone.utc)
    assert r.first_day == date(2024, 12, 1)
    assert r.last_day == date(2024, 12, 31)


def test_custom_range() -> None:
    """custom uses both bounds, start/end of day."""
    r = resolve("custom", "2025-01-05", "2025-01-10", now=NOW, tz=timezone.utc)
    assert r.start == datetime(2025, 1, 5, tzinfo=timezone.utc)
    assert r.last_day == date(2025, 1, 10)


def test_custom_single_day() -> None:
    """from == to is a valid one-day range."""
    r = resolve("custom", "2025-01-05", "2025-01-05", now=NOW, tz=timezone.utc)
    assert r.first_day == r.last_day == date(2025, 1, 5)


def test_custom_missing_bound_falls_back_to_last7() -> None:
    """custom without both bounds behaves like last7."""
    r = resolve("custom", "2025-01-05", None, now=NOW, tz=timezone.utc)
    assert r == resolve("last7", now=NOW, tz=timezone.utc)


def test_custom_inverted_range_rejected() -> None:
    """from > to is a validation error, not silently swapped."""
    with pytest.raises(InvalidDateRangeError) as exc:
        resolve("custom", "2025-01-10", "2025-01-05", now=NOW, tz=timezone.utc)
    assert exc.value.extra == {"from": "2025-01-10", "to": "2025-01-05"}


def test_custom_malformed_date_rejected() -> None:
    """Unparsable custom bounds are validation errors."""
    with pytest.raises(InvalidDateRangeError):
        resolve("custom", "2025-13-01", "2025-01-05", now=NOW, tz=timezone.utc)
    with pytest.raises(InvalidDateRangeError) as exc:
        resolve("custom", "2025-01-05garbage", "2025-01-07", now=NOW, tz=timezone.utc)
    assert exc.value.extra == {"from": "2025-01-05garbage"}


def test_unknown_range_name_defaults_to_last7() -> None:
    """Unknown names fall back to last7."""
    assert resolve("last999", now=NOW, tz=timezone.utc) == resolve("last7", now=NOW, tz=timezone.utc)
    assert resolve(None, now=NOW, tz=timezone.utc) == resolve("last7", now=NOW, tz=timezone.utc)


def test_today_follows_configured_timezone() -> None:
    """23:30 UTC is already the next day in Tokyo."""
    now = datetime(2025, 1, 7, 23, 30, tzinfo=timezone.utc)
    r = resolve("last7", now=now, tz=ZoneInfo("Asia/Tokyo"))
    assert r.last_day == date(2025, 1, 8)
    assert r.start.tzinfo == ZoneInfo("Asia/Tokyo")


def test_range_contains_is_inclusive() -> None:
    """Both ends are inside the range; instants convert to the range timezone."""
    r = DateRange(
        datetime(2025, 1, 1, tzinfo=timezone.utc),
        datetime.combine(date(2025, 1, 7), time.max, tzinfo=timezone.utc),
    )
    assert r.contains(datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc))
    assert r.contains(datetime(2025, 1, 7, 23, 59, 59, tzinfo=timezone.utc))
    assert not r.contains(datetime(2025, 1, 8, 0, 0, tzinfo=timezone.utc))
    assert r.contains_day(date(2025, 1, 7))
    assert not r.contains_day(date(2024, 12, 31))
