from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from sparkline_reports.domain.models import (
    AggregateQuery,
    Aggregation,
    ClosedRange,
    Condition,
    OpenRange,
    ReportOptions,
    SeriesPoint,
    combine_conditions,
    normalize_conditions,
)
from sparkline_reports.periods.grouping import Grouping

UTC = timezone.utc


def test_report_options_defaults_and_immutability():
    options = ReportOptions(entity="users", name="registrations")

    assert options.aggregation is Aggregation.COUNT
    assert options.grouping is Grouping.DAY
    assert options.limit == 100
    assert options.live_data is False
    assert options.date_column == "created_at"
    assert options.conditions == ()

    with pytest.raises((TypeError, ValidationError)):
        options.limit = 5  # type: ignore[misc]


def test_report_options_require_value_column_for_sum():
    with pytest.raises(ValidationError):
        ReportOptions(entity="users", name="visits", aggregation="sum")

    options = ReportOptions(
        entity="users", name="visits", aggregation="sum", value_column="visits"
    )
    assert options.aggregation is Aggregation.SUM


def test_report_options_reject_bad_values():
    with pytest.raises(ValidationError):
        ReportOptions(entity="users", name="r", aggregation="avg")
    with pytest.raises(ValidationError):
        ReportOptions(entity="users", name="r", limit=0)
    with pytest.raises(ValidationError):
        ReportOptions(entity="users; DROP TABLE users", name="r")
    with pytest.raises(ValidationError):
        ReportOptions(
            entity="users",
            name="r",
            live_data=True,
            end_date=datetime(2024, 1, 1, tzinfo=UTC),
        )


def test_report_options_normalize_end_date_to_utc():
    options = ReportOptions(entity="users", name="r", end_date=datetime(2024, 1, 1))
    assert options.end_date == datetime(2024, 1, 1, tzinfo=UTC)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (None, ()),
        ("active = 1", (Condition(expression="active = 1"),)),
        (
            ("login IN (?)", ["a", "b"]),
            (Condition(expression="login IN (?)", params=(["a", "b"],)),),
        ),
        (
            ["visits > ?", 3],
            (Condition(expression="visits > ?", params=(3,)),),
        ),
        (
            [Condition(expression="a = 1"), "b = 2"],
            (Condition(expression="a = 1"), Condition(expression="b = 2")),
        ),
        ({"expression": "c = ?", "params": [1]}, (Condition(expression="c = ?", params=(1,)),)),
    ],
)
def test_normalize_conditions_accepts_supported_spellings(raw, expected):
    assert normalize_conditions(raw) == expected


def test_normalize_conditions_rejects_unknown_values():
    with pytest.raises(ValueError):
        normalize_conditions(42)
    with pytest.raises(ValueError):
        normalize_conditions([42])


def test_combine_conditions_keeps_base_first():
    base = (Condition(expression="active = 1"),)
    combined = combine_conditions(base, "visits > 0")

    assert [c.expression for c in combined] == ["active = 1", "visits > 0"]
    assert combine_conditions(base) == base


def test_closed_range_requires_ordered_bounds():
    start = datetime(2024, 1, 2, tzinfo=UTC)
    with pytest.raises(ValidationError):
        ClosedRange(start=start, end=start)


def test_aggregate_query_accepts_both_range_kinds():
    end = datetime(2024, 1, 2, tzinfo=UTC)
    open_query = AggregateQuery(
        entity="users", aggregation=Aggregation.COUNT, time_range=OpenRange(end=end)
    )
    closed_query = AggregateQuery(
        entity="users",
        aggregation=Aggregation.COUNT,
        time_range={"kind": "closed", "start": datetime(2024, 1, 1, tzinfo=UTC), "end": end},
    )

    assert isinstance(open_query.time_range, OpenRange)
    assert isinstance(closed_query.time_range, ClosedRange)


def test_series_point_coerces_value_to_float():
    point = SeriesPoint(date_time=datetime(2024, 1, 1, tzinfo=UTC), value=3)

    assert isinstance(point.value, float)
    assert point.as_tuple() == (datetime(2024, 1, 1, tzinfo=UTC), 3.0)
