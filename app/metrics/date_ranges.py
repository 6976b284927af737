"""
Resolve named dashboard ranges (last7, last14, last28, lastMonth, custom)
into an inclusive [from, to] pair of instants.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Optional, Union

from app.metrics.errors import InvalidDateRangeError
from app.metrics.records import parse_day


class RangeName(str, Enum):
    LAST_7 = "last7"
    LAST_14 = "last14"
    LAST_28 = "last28"
    LAST_MONTH = "lastMonth"
    CUSTOM = "custom"


RANGE_DAYS = {
    RangeName.LAST_7: 7,
    RangeName.LAST_14: 14,
    RangeName.LAST_28: 28,
}

DEFAULT_RANGE = RangeName.LAST_7


@dataclass(frozen=True)
class DateRange:
    """Inclusive on both ends: start (00:00) to end (23:59:59.999999) of day."""

    start: datetime
    end: datetime

    @property
    def first_day(self) -> date:
        return self.start.date()

    @property
    def last_day(self) -> date:
        return self.end.date()

    def contains_day(self, day: date) -> bool:
        return self.first_day <= day <= self.last_day

    def contains(self, instant: datetime) -> bool:
        zone = self.start.tzinfo
        if zone is None:
            instant = instant.replace(tzinfo=None)
        elif instant.tzinfo is None:
            instant = instant.replace(tzinfo=zone)
        else:
            instant = instant.astimezone(zone)
        return self.start <= instant <= self.end

    def localize(self, instant: datetime) -> datetime:
        """Express an instant in the range's timezone (used for bucket keys)."""
        zone = self.start.tzinfo
        if zone is None or instant.tzinfo is None:
            return instant
        return instant.astimezone(zone)


def start_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, time.min, tzinfo=tz)


def end_of_day(day: date, tz: Optional[tzinfo] = None) -> datetime:
    return datetime.combine(day, time.max, tzinfo=tz)


def _parse_bound(value: Union[str, date, datetime, None], name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    day = parse_day(value)
    if day is None:
        raise InvalidDateRangeError(
            f"Invalid {name} date: {value!r}",
            extra={name: str(value)},
        )
    return day


def _parse_range_name(range_name: Union[str, RangeName, None]) -> RangeName:
    if isinstance(range_name, RangeName):
        return range_name
    try:
        return RangeName(str(range_name).strip()) if range_name else DEFAULT_RANGE
    except ValueError:
        return DEFAULT_RANGE


def resolve(
    range_name: Union[str, RangeName, None],
    custom_from: Union[str, date, datetime, None] = None,
    custom_to: Union[str, date, datetime, None] = None,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> DateRange:
    """
    Named ranges end today (end of day) and start N-1 days earlier, so last7 spans
    exactly 7 calendar days. lastMonth is the whole previous calendar month.
    custom needs both bounds (otherwise last7); from > to raises InvalidDateRangeError.
    Unknown names fall back to last7.
    """
    if now is None:
        now = datetime.now(tz)
    elif tz is not None and now.tzinfo is not None:
        now = now.astimezone(tz)
    zone = tz if tz is not None else now.tzinfo
    today = now.date()

    name = _parse_range_name(range_name)

    if name == RangeName.CUSTOM:
        start_day = _parse_bound(custom_from, "from")
        end_day = _parse_bound(custom_to, "to")
        if start_day is not None and end_day is not None:
            if start_day > end_day:
                raise InvalidDateRangeError(
                    "Custom range 'from' is after 'to'",
                    extra={"from": start_day.isoformat(), "to": end_day.isoformat()},
                )
            return DateRange(start_of_day(start_day, zone), end_of_day(end_day, zone))
        name = DEFAULT_RANGE

    if name == RangeName.LAST_MONTH:
        last_of_prev = today.replace(day=1) - timedelta(days=1)
        first_of_prev = last_of_prev.replace(day=1)
        return DateRange(start_of_day(first_of_prev, zone), end_of_day(last_of_prev, zone))

    days = RANGE_DAYS[name]
    return DateRange(
        start_of_day(today - timedelta(days=days - 1), zone),
        end_of_day(today, zone),
    )
