"""Bucket granularities and their alignment rules."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from dateutil.relativedelta import relativedelta

from sparkline_reports.domain.exceptions import InvalidGroupingError
from sparkline_reports.utils.clock import ensure_utc

_EPSILON = timedelta(microseconds=1)


class Grouping(str, Enum):
    """Supported bucket granularities.

    Hour, day and week buckets have a fixed length. Month buckets follow the
    calendar, so stepping between them always goes through aligned
    boundaries instead of adding a fixed duration.
    """

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def _missing_(cls, value: object) -> "Grouping":
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if member.value == normalized:
                    return member
        raise InvalidGroupingError(
            f"Unknown grouping '{value}'",
            context={"allowed": [member.value for member in cls]},
        )

    @classmethod
    def parse(cls, value: Any) -> "Grouping":
        if isinstance(value, cls):
            return value
        return cls(value)

    @property
    def is_fixed_length(self) -> bool:
        return self is not Grouping.MONTH

    def align(self, instant: datetime) -> datetime:
        """Return the start of the bucket containing ``instant``."""

        instant = ensure_utc(instant)
        start = instant.replace(minute=0, second=0, microsecond=0)
        if self is Grouping.HOUR:
            return start
        start = start.replace(hour=0)
        if self is Grouping.DAY:
            return start
        if self is Grouping.WEEK:
            return start - timedelta(days=start.weekday())
        return start.replace(day=1)

    def next_start(self, instant: datetime) -> datetime:
        """Start of the bucket following the one containing ``instant``."""

        start = self.align(instant)
        if self is Grouping.HOUR:
            return start + timedelta(hours=1)
        if self is Grouping.DAY:
            return start + timedelta(days=1)
        if self is Grouping.WEEK:
            return start + timedelta(weeks=1)
        return start + relativedelta(months=1)

    def previous_start(self, instant: datetime) -> datetime:
        """Start of the bucket preceding the one containing ``instant``."""

        return self.align(self.align(instant) - _EPSILON)

    def duration_for(self, instant: datetime) -> timedelta:
        start = self.align(instant)
        return self.next_start(start) - start
