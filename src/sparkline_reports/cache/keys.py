"""Deterministic cache keys for closed-period report values."""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from typing import Any, Tuple

from pydantic import BaseModel, ConfigDict

from sparkline_reports.domain.models import Condition, ReportOptions
from sparkline_reports.periods.reporting_period import ReportingPeriod
from sparkline_reports.utils.clock import to_epoch_seconds


def _identity_param(value: Any) -> Any:
    """JSON form of a condition parameter that mirrors how it is bound.

    Datetimes are tagged with their epoch seconds so they never collide with
    their string spelling; sequences bound as a list compare equal.
    """

    if isinstance(value, datetime):
        return {"epoch": to_epoch_seconds(value)}
    if isinstance(value, (list, tuple)):
        return [_identity_param(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_identity_param(item) for item in value), key=repr)
    if value is None or isinstance(value, (str, int, float)):
        return value
    return {"repr": repr(value)}


def report_identity(options: ReportOptions, conditions: Tuple[Condition, ...]) -> str:
    """Digest of everything that determines a period's aggregate value."""

    payload = {
        "entity": options.entity,
        "name": options.name,
        "grouping": options.grouping.value,
        "aggregation": options.aggregation.value,
        "value_column": options.value_column,
        "date_column": options.date_column,
        "conditions": [
            [condition.expression, _identity_param(list(condition.params))]
            for condition in conditions
        ],
    }
    raw = json.dumps(payload, sort_keys=True)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class CacheKey(BaseModel):
    """Composite key: report identity plus the period's start instant."""

    model_config = ConfigDict(frozen=True)

    entity: str
    report_name: str
    grouping: str
    aggregation: str
    identity: str
    period_start: datetime

    @classmethod
    def for_period(
        cls,
        options: ReportOptions,
        conditions: Tuple[Condition, ...],
        period: ReportingPeriod,
    ) -> "CacheKey":
        return cls(
            entity=options.entity,
            report_name=options.name,
            grouping=options.grouping.value,
            aggregation=options.aggregation.value,
            identity=report_identity(options, conditions),
            period_start=period.start,
        )

    def as_string(self) -> str:
        return (
            f"{self.entity}:{self.report_name}:{self.grouping}:{self.aggregation}:"
            f"{self.identity}:{self.period_start.isoformat()}"
        )
