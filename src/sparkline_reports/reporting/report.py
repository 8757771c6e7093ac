"""Report execution: one aggregate per reporting period over a window."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from functools import partial
from typing import Any, Callable, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from sparkline_reports.cache.keys import CacheKey
from sparkline_reports.domain.exceptions import (
    InvalidConfigurationError,
    QueryFailureError,
)
from sparkline_reports.domain.interfaces import Clock, IAggregateSource, IReportCache
from sparkline_reports.domain.models import (
    AggregateQuery,
    Aggregation,
    ClosedRange,
    Condition,
    ConditionsInput,
    ReportOptions,
    SeriesPoint,
    TimeRange,
    combine_conditions,
)
from sparkline_reports.periods.grouping import Grouping
from sparkline_reports.periods.reporting_period import ReportingPeriod
from sparkline_reports.utils.clock import ensure_utc, utc_now
from sparkline_reports.utils.export import series_to_dataframe
from sparkline_reports.utils.validators import validate_limit, validate_max_workers


class Report:
    """Series of ``count``/``sum`` aggregates, one per period, oldest first.

    The window ends at the current period when ``live_data`` is set and at the
    period before it otherwise. Closed periods are read from and written to the
    optional cache; the live period is always queried.
    """

    def __init__(
        self,
        source: IAggregateSource,
        entity: str,
        name: str,
        *,
        aggregation: Aggregation | str = Aggregation.COUNT,
        grouping: Grouping | str = Grouping.DAY,
        value_column: Optional[str] = None,
        date_column: str = "created_at",
        limit: int = 100,
        live_data: bool = False,
        conditions: ConditionsInput = None,
        end_date: Optional[datetime] = None,
        cache: Optional[IReportCache] = None,
        clock: Optional[Clock] = None,
        max_workers: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._options = self._build_options(
            entity=entity,
            name=name,
            aggregation=aggregation,
            grouping=Grouping.parse(grouping),
            value_column=value_column,
            date_column=date_column,
            limit=validate_limit(limit),
            live_data=live_data,
            conditions=conditions,
            end_date=end_date,
        )
        self._source = source
        self._cache = cache
        self._clock: Clock = clock or utc_now
        self._max_workers = validate_max_workers(max_workers)
        self._logger = logger or logging.getLogger(
            f"{__name__}.{self.__class__.__name__}"
        )

    @classmethod
    def from_options(
        cls, source: IAggregateSource, options: ReportOptions, **kwargs: Any
    ) -> "Report":
        return cls(
            source,
            options.entity,
            options.name,
            aggregation=options.aggregation,
            grouping=options.grouping,
            value_column=options.value_column,
            date_column=options.date_column,
            limit=options.limit,
            live_data=options.live_data,
            conditions=options.conditions,
            end_date=options.end_date,
            **kwargs,
        )

    @property
    def options(self) -> ReportOptions:
        return self._options

    def run(self, conditions: ConditionsInput = None) -> List[SeriesPoint]:
        """Return the series for the configured window.

        ``conditions`` are AND-combined with the report's own conditions.
        Raises ``QueryFailureError`` if any period cannot be aggregated; no
        partial series is returned in that case.
        """

        now = self._current_time()
        combined = self.conditions_for_run(conditions)
        periods = self.periods(now)
        values = self._run_tasks(self._period_tasks(periods, combined, now))
        self._log_run(periods, combined)
        return self._to_series(periods, values)

    def periods(self, now: Optional[datetime] = None) -> List[ReportingPeriod]:
        """Reporting periods of the window, oldest first."""

        options = self._options
        if options.end_date is not None:
            reference = ReportingPeriod.at(options.grouping, options.end_date)
        else:
            reference = ReportingPeriod.current(
                options.grouping, now if now is not None else self._current_time()
            )

        last = reference if options.live_data else reference.previous()
        count = options.limit + 1 if options.live_data else options.limit
        periods = [last]
        while len(periods) < count:
            periods.append(periods[-1].previous())
        periods.reverse()
        return periods

    def conditions_for_run(self, extra: ConditionsInput = None) -> Tuple[Condition, ...]:
        return combine_conditions(self._options.conditions, extra)

    def to_dataframe(self, conditions: ConditionsInput = None) -> Any:
        return series_to_dataframe(self.run(conditions))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _build_options(**fields: Any) -> ReportOptions:
        try:
            return ReportOptions(**fields)
        except ValidationError as exc:
            raise InvalidConfigurationError(
                "Invalid report options",
                context={
                    "entity": fields.get("entity"),
                    "report": fields.get("name"),
                    "errors": [error["msg"] for error in exc.errors()],
                },
            ) from exc

    def _current_time(self) -> datetime:
        return ensure_utc(self._clock())

    def _period_tasks(
        self,
        periods: Sequence[ReportingPeriod],
        conditions: Tuple[Condition, ...],
        now: datetime,
    ) -> List[Callable[[], float]]:
        return [partial(self._value_for, period, conditions, now) for period in periods]

    def _run_tasks(self, tasks: Sequence[Callable[[], float]]) -> List[float]:
        """Run independent queries, keeping results in task order."""

        if self._max_workers == 1 or len(tasks) < 2:
            return [task() for task in tasks]
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            return list(executor.map(lambda task: task(), tasks))

    def _value_for(
        self,
        period: ReportingPeriod,
        conditions: Tuple[Condition, ...],
        now: datetime,
    ) -> float:
        key: Optional[CacheKey] = None
        if self._cache is not None and period.is_closed(now):
            key = CacheKey.for_period(self._options, conditions, period)
            cached = self._cache.get(key)
            if cached is not None:
                self._logger.debug(
                    "report_period_cached",
                    extra={"report": self._options.name, "period": period.start},
                )
                return cached

        value = self._aggregate(ClosedRange(start=period.start, end=period.end), conditions)
        self._logger.debug(
            "report_period_queried",
            extra={
                "report": self._options.name,
                "period": period.start,
                "closed": key is not None,
            },
        )
        if key is not None:
            self._cache.put(key, value)
        return value

    def _aggregate(
        self, time_range: TimeRange, conditions: Tuple[Condition, ...]
    ) -> float:
        options = self._options
        query = AggregateQuery(
            entity=options.entity,
            aggregation=options.aggregation,
            value_column=options.value_column,
            date_column=options.date_column,
            time_range=time_range,
            conditions=conditions,
        )
        context = {
            "entity": options.entity,
            "report": options.name,
            "range": time_range.model_dump(mode="json"),
        }
        try:
            value = self._source.aggregate(query)
        except QueryFailureError:
            self._logger.error("report_query_failed", exc_info=True, extra=context)
            raise
        except Exception as exc:
            self._logger.exception("report_query_failed", extra=context)
            raise QueryFailureError(
                "Aggregate source raised an unexpected error", context=context
            ) from exc
        return 0.0 if value is None else float(value)

    @staticmethod
    def _to_series(
        periods: Sequence[ReportingPeriod], values: Sequence[float]
    ) -> List[SeriesPoint]:
        return [
            SeriesPoint(date_time=period.date_time(), value=value)
            for period, value in zip(periods, values)
        ]

    def _log_run(
        self, periods: Sequence[ReportingPeriod], conditions: Tuple[Condition, ...]
    ) -> None:
        self._logger.info(
            "report_run",
            extra={
                "entity": self._options.entity,
                "report": self._options.name,
                "grouping": self._options.grouping.value,
                "periods": len(periods),
                "conditions": len(conditions),
            },
        )
