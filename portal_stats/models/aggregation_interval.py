"""Aggregation intervals.

The time granularity aggregation records are bucketed at. Each record's
date_time is the start of its bucket.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Iterator


class AggregationInterval(str, Enum):
    """Time granularity of an aggregation bucket."""
    MINUTE = "minute"
    FIVE_MINUTE = "five_minute"
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    CALENDAR_QUARTER = "calendar_quarter"
    YEAR = "year"

    @property
    def display_name(self) -> str:
        return self.value.replace('_', ' ').title()

    @property
    def is_date_based(self) -> bool:
        """True for intervals of a day or longer (rendered without a time of day)."""
        return self not in _SUB_DAY_INTERVALS

    def truncate(self, value: datetime) -> datetime:
        """Return the start of the bucket containing value."""
        value = value.replace(second=0, microsecond=0)
        if self is AggregationInterval.MINUTE:
            return value
        if self is AggregationInterval.FIVE_MINUTE:
            return value.replace(minute=value.minute - value.minute % 5)
        if self is AggregationInterval.HOUR:
            return value.replace(minute=0)

        day = value.replace(hour=0, minute=0)
        if self is AggregationInterval.DAY:
            return day
        if self is AggregationInterval.WEEK:
            # ISO weeks start on Monday
            return day - timedelta(days=day.weekday())
        if self is AggregationInterval.MONTH:
            return day.replace(day=1)
        if self is AggregationInterval.CALENDAR_QUARTER:
            return day.replace(month=(day.month - 1) // 3 * 3 + 1, day=1)
        return day.replace(month=1, day=1)

    def next_bucket(self, bucket_start: datetime) -> datetime:
        """Return the start of the bucket following bucket_start."""
        step = _FIXED_STEPS.get(self)
        if step is not None:
            return bucket_start + step
        return _add_months(bucket_start, _MONTH_STEPS[self])

    def buckets_between(self, start: datetime, end: datetime) -> Iterator[datetime]:
        """Yield the start of every bucket overlapping [start, end], in order."""
        current = self.truncate(start)
        while current <= end:
            yield current
            current = self.next_bucket(current)


_SUB_DAY_INTERVALS = frozenset({
    AggregationInterval.MINUTE,
    AggregationInterval.FIVE_MINUTE,
    AggregationInterval.HOUR,
})

_FIXED_STEPS = {
    AggregationInterval.MINUTE: timedelta(minutes=1),
    AggregationInterval.FIVE_MINUTE: timedelta(minutes=5),
    AggregationInterval.HOUR: timedelta(hours=1),
    AggregationInterval.DAY: timedelta(days=1),
    AggregationInterval.WEEK: timedelta(weeks=1),
}

_MONTH_STEPS = {
    AggregationInterval.MONTH: 1,
    AggregationInterval.CALENDAR_QUARTER: 3,
    AggregationInterval.YEAR: 12,
}


def _add_months(value: datetime, months: int) -> datetime:
    # Only called with bucket starts, which always fall on day 1
    month_index = value.month - 1 + months
    return value.replace(year=value.year + month_index // 12, month=month_index % 12 + 1)
