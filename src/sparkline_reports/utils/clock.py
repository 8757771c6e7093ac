"""UTC time helpers shared by the period model and the stores."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_epoch_seconds(value: datetime) -> float:
    """Fractional epoch seconds; sub-second precision is kept for strict bounds."""

    return ensure_utc(value).timestamp()


def from_epoch_seconds(value: float) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)
