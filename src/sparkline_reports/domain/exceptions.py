"""Exception hierarchy for report configuration and execution failures."""

from __future__ import annotations

from typing import Any, Mapping


class ReportingError(Exception):
    """Base class for all errors raised by the reporting engine."""

    default_message = "Reporting error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class InvalidGroupingError(ReportingError, ValueError):
    """Raised for an unrecognized bucket granularity."""

    default_message = "Invalid grouping"


class InvalidConfigurationError(ReportingError, ValueError):
    """Raised when report options are inconsistent or unsupported.

    Always raised while a report is being constructed, never from ``run``.
    """

    default_message = "Invalid report configuration"


class QueryFailureError(ReportingError):
    """The aggregate source could not produce a value.

    Distinct from "no matching rows", which is a legitimate ``0.0``.
    """

    default_message = "Aggregate query failed"
