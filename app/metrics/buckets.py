"""
Granularity bucket keys and the gap-free bucket key series for a date range.

Keys sort lexicographically in time order: YYYY-MM-DD (day, week), YYYY-MM (month), YYYY (year).
"""
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional, Union

from app.logging_config import get_logger
from app.metrics.date_ranges import DateRange

logger = get_logger(__name__)


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


DEFAULT_GRANULARITY = Granularity.DAY

# Week granularity keeps per-day buckets instead of Monday-aligned weeks.
# Pending product confirmation; keep until then.
WEEK_KEYS_BY_DAY = True

# Upper bound on generated buckets (10 years of days).
MAX_SERIES_BUCKETS = 3660


def parse_granularity(value: Union[str, Granularity, None]) -> Granularity:
    """Unknown/empty -> day."""
    if isinstance(value, Granularity):
        return value
    try:
        return Granularity(str(value).strip().lower()) if value else DEFAULT_GRANULARITY
    except ValueError:
        return DEFAULT_GRANULARITY


def bucket_key(instant: Union[date, datetime], granularity: Union[str, Granularity]) -> str:
    """Bucket key for the calendar unit containing `instant`."""
    g = parse_granularity(granularity)
    day = instant.date() if isinstance(instant, datetime) else instant
    if g == Granularity.YEAR:
        return f"{day.year:04d}"
    if g == Granularity.MONTH:
        return f"{day.year:04d}-{day.month:02d}"
    if g == Granularity.WEEK and not WEEK_KEYS_BY_DAY:
        day = day - timedelta(days=day.weekday())
    return day.isoformat()


def _next_unit(day: date, granularity: Granularity) -> date:
    if granularity == Granularity.YEAR:
        return date(day.year + 1, 1, 1)
    if granularity == Granularity.MONTH:
        if day.month == 12:
            return date(day.year + 1, 1, 1)
        return date(day.year, day.month + 1, 1)
    if granularity == Granularity.WEEK and not WEEK_KEYS_BY_DAY:
        return day - timedelta(days=day.weekday()) + timedelta(days=7)
    return day + timedelta(days=1)


def generate_bucket_keys(
    date_range: DateRange,
    granularity: Union[str, Granularity],
    max_buckets: Optional[int] = None,
) -> List[str]:
    """
    Ordered keys covering [range.start, range.end] with no gaps or duplicates.
    Always at least one key (the start's); stops after max_buckets.
    """
    g = parse_granularity(granularity)
    limit = max_buckets or MAX_SERIES_BUCKETS
    first = date_range.first_day
    last = date_range.last_day
    last_key = bucket_key(last, g)

    keys: List[str] = []
    cursor = first
    while len(keys) < limit:
        key = bucket_key(cursor, g)
        if not keys or keys[-1] != key:
            keys.append(key)
        if key >= last_key:
            break
        cursor = _next_unit(cursor, g)
    else:
        logger.warning(
            "buckets.series_truncated",
            granularity=g.value,
            start=first.isoformat(),
            end=last.isoformat(),
            max_buckets=limit,
        )
    return keys
