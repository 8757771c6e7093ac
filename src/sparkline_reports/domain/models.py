"""Domain value objects describing reports, queries and their results."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Mapping, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from sparkline_reports.periods.grouping import Grouping
from sparkline_reports.utils.clock import ensure_utc
from sparkline_reports.utils.validators import validate_identifier


class Aggregation(str, Enum):
    """Supported aggregation kinds."""

    COUNT = "count"
    SUM = "sum"


class Condition(BaseModel):
    """Opaque filter fragment plus its bound parameters.

    The engine only AND-combines conditions; interpreting ``expression`` is
    left to the aggregate source.
    """

    model_config = ConfigDict(frozen=True)

    expression: str
    params: Tuple[Any, ...] = Field(default_factory=tuple)

    @field_validator("expression")
    @classmethod
    def validate_expression(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("condition expression must be non-empty")
        return value


ConditionsInput = Union[None, str, Condition, Mapping[str, Any], Tuple[Any, ...], list]


def _coerce_condition(value: Any) -> Condition:
    if isinstance(value, Condition):
        return value
    if isinstance(value, str):
        return Condition(expression=value)
    if isinstance(value, Mapping):
        return Condition(**value)
    if isinstance(value, (list, tuple)) and value and isinstance(value[0], str):
        return Condition(expression=value[0], params=tuple(value[1:]))
    raise ValueError(f"Unsupported condition: {value!r}")


def normalize_conditions(value: Any) -> Tuple[Condition, ...]:
    """Coerce the accepted condition spellings into a tuple of ``Condition``.

    ``"active = 1"``, ``Condition(...)`` and ``("login IN (?)", ["a", "b"])``
    are single conditions; any other list or tuple is a list of conditions.
    """

    if value is None:
        return ()
    if isinstance(value, (str, Condition, Mapping)):
        return (_coerce_condition(value),)
    if isinstance(value, (list, tuple)):
        if not value:
            return ()
        if isinstance(value[0], str):
            return (_coerce_condition(value),)
        return tuple(_coerce_condition(item) for item in value)
    raise ValueError(f"Unsupported conditions: {value!r}")


def combine_conditions(
    base: Tuple[Condition, ...], extra: Any = None
) -> Tuple[Condition, ...]:
    return tuple(base) + normalize_conditions(extra)


class ClosedRange(BaseModel):
    """Half-open range ``[start, end)`` covering one reporting period."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["closed"] = "closed"
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def validate_bounds(self) -> "ClosedRange":
        if self.start >= self.end:
            raise ValueError("range start must be before its end")
        return self


class OpenRange(BaseModel):
    """Range ``(-inf, end)``: everything strictly before ``end``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["open"] = "open"
    end: datetime


TimeRange = Union[ClosedRange, OpenRange]


class AggregateQuery(BaseModel):
    """Everything an aggregate source needs to compute one value."""

    model_config = ConfigDict(frozen=True)

    entity: str
    aggregation: Aggregation
    value_column: Optional[str] = None
    date_column: str = "created_at"
    time_range: TimeRange = Field(..., discriminator="kind")
    conditions: Tuple[Condition, ...] = Field(default_factory=tuple)


class ReportOptions(BaseModel):
    """Validated, immutable configuration of a report."""

    model_config = ConfigDict(frozen=True)

    entity: str
    name: str
    aggregation: Aggregation = Aggregation.COUNT
    grouping: Grouping = Grouping.DAY
    value_column: Optional[str] = None
    date_column: str = "created_at"
    limit: int = Field(default=100, gt=0)
    live_data: bool = False
    conditions: Tuple[Condition, ...] = Field(default_factory=tuple)
    end_date: Optional[datetime] = None

    @field_validator("entity", "date_column")
    @classmethod
    def validate_identifiers(cls, value: str, info: ValidationInfo) -> str:
        return validate_identifier(value, info.field_name)

    @field_validator("value_column")
    @classmethod
    def validate_value_column(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return validate_identifier(value, "value_column")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name must be non-empty")
        return value

    @field_validator("conditions", mode="before")
    @classmethod
    def coerce_conditions(cls, value: Any) -> Tuple[Condition, ...]:
        return normalize_conditions(value)

    @field_validator("end_date")
    @classmethod
    def normalize_end_date(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value) if value is not None else None

    @model_validator(mode="after")
    def validate_options(self) -> "ReportOptions":
        if self.aggregation is Aggregation.SUM and not self.value_column:
            raise ValueError("value_column is required for sum aggregation")
        if self.live_data and self.end_date is not None:
            raise ValueError("live_data cannot be combined with end_date")
        return self


class SeriesPoint(BaseModel):
    """One ``(period start, value)`` pair of a report series."""

    model_config = ConfigDict(frozen=True)

    date_time: datetime
    value: float

    def as_tuple(self) -> Tuple[datetime, float]:
        return (self.date_time, self.value)
