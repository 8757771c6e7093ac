"""Input validation helpers used by report options and the SQLite store."""

from __future__ import annotations

import re

from sparkline_reports.domain.exceptions import InvalidConfigurationError

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(value: str, field: str) -> str:
    if not value or not _IDENTIFIER_PATTERN.match(value):
        raise InvalidConfigurationError(
            f"{field} must be a plain identifier",
            context={field: value},
        )
    return value


def validate_limit(limit: int) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidConfigurationError(
            "limit must be a positive integer", context={"limit": limit}
        )
    return limit


def validate_max_workers(max_workers: int) -> int:
    if max_workers < 1:
        raise InvalidConfigurationError(
            "max_workers must be at least 1", context={"max_workers": max_workers}
        )
    return max_workers
