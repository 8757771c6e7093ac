"""Aligned reporting periods and navigation between adjacent buckets."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sparkline_reports.utils.clock import ensure_utc, utc_now

from .grouping import Grouping


@dataclass(frozen=True)
class ReportingPeriod:
    """A half-open bucket ``[start, end)`` of a grouping.

    The instant passed as ``start`` may be any anchor inside the bucket; it
    is aligned on construction, so ``ReportingPeriod(Grouping.DAY, t)`` is the
    day containing ``t``.
    """

    grouping: Grouping
    start: datetime

    def __post_init__(self) -> None:
        grouping = Grouping.parse(self.grouping)
        object.__setattr__(self, "grouping", grouping)
        object.__setattr__(self, "start", grouping.align(self.start))

    @classmethod
    def at(cls, grouping: Grouping | str, instant: datetime) -> "ReportingPeriod":
        return cls(Grouping.parse(grouping), instant)

    @classmethod
    def current(
        cls, grouping: Grouping | str, now: Optional[datetime] = None
    ) -> "ReportingPeriod":
        return cls.at(grouping, now if now is not None else utc_now())

    @property
    def end(self) -> datetime:
        return self.grouping.next_start(self.start)

    def date_time(self) -> datetime:
        return self.start

    def previous(self) -> "ReportingPeriod":
        return ReportingPeriod(self.grouping, self.grouping.previous_start(self.start))

    def next(self) -> "ReportingPeriod":
        return ReportingPeriod(self.grouping, self.end)

    def offset(self, steps: int) -> "ReportingPeriod":
        period = self
        for _ in range(abs(steps)):
            period = period.next() if steps > 0 else period.previous()
        return period

    def contains(self, instant: datetime) -> bool:
        instant = ensure_utc(instant)
        return self.start <= instant < self.end

    def is_closed(self, now: datetime) -> bool:
        """True once the bucket has fully elapsed; only closed periods are cached."""

        return self.end <= ensure_utc(now)
