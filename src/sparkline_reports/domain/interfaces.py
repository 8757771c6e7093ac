"""Contracts for the collaborators a report depends on."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol

from .models import AggregateQuery


Clock = Callable[[], datetime]


class IAggregateSource(Protocol):
    """Record store able to aggregate rows over a time range."""

    def aggregate(self, query: AggregateQuery) -> Optional[float]:
        """Return the count/sum described by ``query``; ``None`` means no rows.

        Implementations raise ``QueryFailureError`` when no value can be
        produced.
        """


class ICacheKey(Protocol):
    """Anything usable as a report cache key."""

    def as_string(self) -> str:
        """Stable string form of the key."""


class IReportCache(Protocol):
    """Memoization store for closed-period aggregates."""

    def get(self, key: ICacheKey) -> Optional[float]:
        """Return the cached value or ``None`` on a miss."""

    def put(self, key: ICacheKey, value: float) -> None:
        """Store ``value``; writing an existing key overwrites it."""

    def clear_all(self) -> None:
        """Drop every cached entry."""
