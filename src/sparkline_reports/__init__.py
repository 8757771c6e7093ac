"""Time-bucketed report series with cumulation and closed-period caching."""

from .core.container import DIContainer
from .periods.grouping import Grouping
from .periods.reporting_period import ReportingPeriod
from .reporting.cumulated_report import CumulatedReport
from .reporting.report import Report

__all__ = [
    "CumulatedReport",
    "DIContainer",
    "Grouping",
    "Report",
    "ReportingPeriod",
    "domain",
    "periods",
    "reporting",
    "cache",
    "storage",
    "core",
    "utils",
]
