from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from sparkline_reports.domain.exceptions import InvalidGroupingError
from sparkline_reports.periods.grouping import Grouping
from sparkline_reports.periods.reporting_period import ReportingPeriod

UTC = timezone.utc
NOW = datetime(2024, 5, 15, 10, 30, tzinfo=UTC)

SAMPLE_INSTANTS = [
    datetime(2024, 1, 1, tzinfo=UTC),
    datetime(2024, 1, 31, 23, 59, 59, tzinfo=UTC),
    datetime(2024, 2, 29, 12, tzinfo=UTC),
    datetime(2023, 12, 31, 23, 30, tzinfo=UTC),
    NOW,
]


@pytest.mark.parametrize("grouping", list(Grouping))
@pytest.mark.parametrize("instant", SAMPLE_INSTANTS)
def test_period_contains_its_anchor(grouping, instant):
    period = ReportingPeriod.at(grouping, instant)

    assert period.start <= instant < period.end
    assert period.contains(instant)


@pytest.mark.parametrize("grouping", list(Grouping))
@pytest.mark.parametrize("instant", SAMPLE_INSTANTS)
def test_consecutive_periods_tile_the_timeline(grouping, instant):
    period = ReportingPeriod.at(grouping, instant)

    assert period.next().start == period.end
    assert period.previous().end == period.start
    assert period.next().previous() == period
    assert period.previous().next() == period


def test_month_walk_backwards_lands_on_calendar_months():
    period = ReportingPeriod.at(Grouping.MONTH, datetime(2024, 3, 31, 18, tzinfo=UTC))

    starts = []
    for _ in range(4):
        starts.append(period.start)
        period = period.previous()

    assert starts == [
        datetime(2024, 3, 1, tzinfo=UTC),
        datetime(2024, 2, 1, tzinfo=UTC),
        datetime(2024, 1, 1, tzinfo=UTC),
        datetime(2023, 12, 1, tzinfo=UTC),
    ]


def test_current_uses_supplied_now():
    period = ReportingPeriod.current(Grouping.DAY, NOW)

    assert period.date_time() == datetime(2024, 5, 15, tzinfo=UTC)
    assert period.end == datetime(2024, 5, 16, tzinfo=UTC)


def test_offset_moves_in_both_directions():
    period = ReportingPeriod.at(Grouping.HOUR, NOW)

    assert period.offset(-3).start == datetime(2024, 5, 15, 7, tzinfo=UTC)
    assert period.offset(2).start == datetime(2024, 5, 15, 12, tzinfo=UTC)
    assert period.offset(0) == period


def test_is_closed_only_after_period_end():
    period = ReportingPeriod.at(Grouping.DAY, NOW)

    assert not period.is_closed(NOW)
    assert not period.is_closed(period.end - timedelta(microseconds=1))
    assert period.is_closed(period.end)
    assert period.previous().is_closed(NOW)


def test_string_grouping_and_invalid_grouping():
    assert ReportingPeriod.at("week", NOW).grouping is Grouping.WEEK
    with pytest.raises(InvalidGroupingError):
        ReportingPeriod.at("decade", NOW)


def test_periods_are_immutable_and_hashable():
    period = ReportingPeriod.at(Grouping.DAY, NOW)

    with pytest.raises(FrozenInstanceError):
        period.start = NOW  # type: ignore[misc]
    assert len({period, ReportingPeriod.at(Grouping.DAY, NOW + timedelta(hours=1))}) == 1
