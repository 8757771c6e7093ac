"""SQLite-backed report cache."""

from __future__ import annotations

import logging
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sparkline_reports.domain.interfaces import IReportCache
from sparkline_reports.utils.clock import to_epoch_seconds

from .keys import CacheKey

_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS report_cache (
    cache_key TEXT PRIMARY KEY,
    entity TEXT NOT NULL,
    report_name TEXT NOT NULL,
    grouping TEXT NOT NULL,
    aggregation TEXT NOT NULL,
    identity TEXT NOT NULL,
    period_start REAL NOT NULL,
    value REAL NOT NULL,
    created_at INTEGER NOT NULL
);
"""

_UPSERT_SQL = """
INSERT INTO report_cache (cache_key, entity, report_name, grouping, aggregation, identity, period_start, value, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(cache_key) DO UPDATE SET
    value=excluded.value,
    created_at=excluded.created_at;
"""

_SELECT_SQL = """
SELECT value
FROM report_cache
WHERE cache_key = ?;
"""

_DELETE_ALL_SQL = "DELETE FROM report_cache;"

_COUNT_SQL = "SELECT COUNT(*) FROM report_cache;"


class SQLiteReportCache(IReportCache):
    """Persistent cache holding one row per (report identity, period start)."""

    def __init__(self, db_path: str | Path, *, logger: logging.Logger | None = None):
        self._db_path = str(db_path)
        self._logger = logger or logging.getLogger(__name__)
        self._ensure_schema()

    def get(self, key: CacheKey) -> Optional[float]:
        with self._connect() as conn:
            row = conn.execute(_SELECT_SQL, (key.as_string(),)).fetchone()
        return None if row is None else float(row[0])

    def put(self, key: CacheKey, value: float) -> None:
        with self._connect() as conn:
            conn.execute(
                _UPSERT_SQL,
                (
                    key.as_string(),
                    key.entity,
                    key.report_name,
                    key.grouping,
                    key.aggregation,
                    key.identity,
                    to_epoch_seconds(key.period_start),
                    float(value),
                    int(time.time()),
                ),
            )

    def clear_all(self) -> None:
        with self._connect() as conn:
            conn.execute(_DELETE_ALL_SQL)
        self._logger.info("report_cache_cleared", extra={"db_path": self._db_path})

    def __len__(self) -> int:
        with self._connect() as conn:
            (count,) = conn.execute(_COUNT_SQL).fetchone()
        return int(count)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_TABLE_SQL)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self._db_path)) as conn:
            with conn:
                yield conn
