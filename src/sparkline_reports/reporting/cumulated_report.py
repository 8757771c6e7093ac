"""Running-total variant of a report."""

from __future__ import annotations

from datetime import datetime
from functools import partial
from typing import Any, List, Sequence, Tuple

from sparkline_reports.domain.models import (
    Condition,
    ConditionsInput,
    OpenRange,
    SeriesPoint,
)
from sparkline_reports.utils.clock import ensure_utc

from .report import Report


class CumulatedReport(Report):
    """Report whose values are running totals seeded by all earlier history.

    The seed is the aggregate of every matching record before the first
    period of the window. It spans an unbounded range and is recomputed on
    every run instead of being cached.
    """

    def run(self, conditions: ConditionsInput = None) -> List[SeriesPoint]:
        now = self._current_time()
        combined = self.conditions_for_run(conditions)
        periods = self.periods(now)

        tasks = [partial(self._initial_value, periods[0].start, combined)]
        tasks.extend(self._period_tasks(periods, combined, now))
        initial, *raw = self._run_tasks(tasks)

        self._log_run(periods, combined)
        return self.cumulate(self._to_series(periods, raw), initial)

    def initial_cumulative_value(
        self, instant: datetime, conditions: ConditionsInput = None
    ) -> float:
        """Aggregate of all matching records strictly before ``instant``."""

        return self._initial_value(ensure_utc(instant), self.conditions_for_run(conditions))

    @staticmethod
    def cumulate(
        points: Sequence[SeriesPoint | Tuple[Any, float]], initial_value: float = 0.0
    ) -> List[SeriesPoint]:
        total = float(initial_value)
        cumulated: List[SeriesPoint] = []
        for point in points:
            date_time, value = point.as_tuple() if isinstance(point, SeriesPoint) else point
            total += float(value)
            cumulated.append(SeriesPoint(date_time=date_time, value=total))
        return cumulated

    def _initial_value(
        self, instant: datetime, conditions: Tuple[Condition, ...]
    ) -> float:
        return self._aggregate(OpenRange(end=instant), conditions)
