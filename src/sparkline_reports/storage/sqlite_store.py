"""SQLite-backed record store answering aggregate queries."""

from __future__ import annotations

import logging
import sqlite3
from contextlib import closing, contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple

from sparkline_reports.domain.exceptions import QueryFailureError
from sparkline_reports.domain.interfaces import IAggregateSource
from sparkline_reports.domain.models import (
    AggregateQuery,
    Aggregation,
    ClosedRange,
    Condition,
)
from sparkline_reports.utils.clock import to_epoch_seconds
from sparkline_reports.utils.retry import retry
from sparkline_reports.utils.validators import validate_identifier

_COLUMN_TYPES = {"TEXT", "INTEGER", "REAL", "NUMERIC"}
_TRANSIENT_MARKERS = ("database is locked", "database table is locked", "busy")


def to_db_value(value: Any) -> Any:
    """Bind value for ``value``; datetimes become fractional epoch seconds."""

    if isinstance(value, datetime):
        return to_epoch_seconds(value)
    return value


def is_transient_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


def expand_condition(condition: Condition) -> Tuple[str, List[Any]]:
    """Expand list parameters bound to a single ``?`` into a placeholder list.

    ``("login IN (?)", ["a", "b"])`` becomes ``("login IN (?, ?)", ["a", "b"])``.
    Every bound value goes through ``to_db_value`` so datetimes compare
    against stored timestamps. Expressions whose placeholder count does not
    match are passed through untouched and left for SQLite to reject.
    """

    pieces = condition.expression.split("?")
    if len(pieces) - 1 != len(condition.params):
        return condition.expression, [to_db_value(param) for param in condition.params]

    expression = pieces[0]
    params: List[Any] = []
    for param, tail in zip(condition.params, pieces[1:]):
        if isinstance(param, (list, tuple, set, frozenset)):
            values = [to_db_value(value) for value in param]
            expression += ", ".join("?" for _ in values) + tail
            params.extend(values)
        else:
            expression += "?" + tail
            params.append(to_db_value(param))
    return expression, params


class SQLiteRecordStore(IAggregateSource):
    """Stores rows per entity table and aggregates them over time ranges.

    Timestamps are stored as REAL epoch seconds.
    """

    def __init__(
        self,
        db_path: str | Path,
        *,
        retries: int = 3,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._db_path = str(db_path)
        self._logger = logger or logging.getLogger(__name__)

        @retry(
            attempts=max(retries, 1),
            exceptions=(sqlite3.OperationalError,),
            logger=self._logger,
            retry_if=is_transient_error,
        )
        def fetch_scalar(sql: str, params: Sequence[Any]) -> Any:
            return self._execute_scalar(sql, params)

        self._fetch_scalar = fetch_scalar

    def create_table(self, entity: str, columns: Mapping[str, str]) -> None:
        validate_identifier(entity, "entity")
        definitions = []
        for name, column_type in columns.items():
            validate_identifier(name, "column")
            normalized = column_type.upper()
            if normalized not in _COLUMN_TYPES:
                raise ValueError(f"Unsupported column type '{column_type}'")
            definitions.append(f"{name} {normalized}")
        sql = f"CREATE TABLE IF NOT EXISTS {entity} ({', '.join(definitions)});"
        with self._connect() as conn:
            conn.execute(sql)

    def insert(self, entity: str, row: Mapping[str, Any]) -> None:
        validate_identifier(entity, "entity")
        columns = [validate_identifier(name, "column") for name in row]
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {entity} ({', '.join(columns)}) VALUES ({placeholders});"
        with self._connect() as conn:
            conn.execute(sql, [to_db_value(row[name]) for name in columns])

    def insert_many(self, entity: str, rows: Sequence[Mapping[str, Any]]) -> None:
        for row in rows:
            self.insert(entity, row)

    def delete_all(self, entity: str) -> None:
        validate_identifier(entity, "entity")
        with self._connect() as conn:
            conn.execute(f"DELETE FROM {entity};")

    def aggregate(self, query: AggregateQuery) -> Optional[float]:
        sql, params = self._build_sql(query)
        self._logger.debug(
            "sqlite_aggregate", extra={"sql": sql, "param_count": len(params)}
        )
        try:
            value = self._fetch_scalar(sql, params)
        except sqlite3.Error as exc:
            raise QueryFailureError(
                "SQLite aggregate failed",
                context={"entity": query.entity, "error": str(exc)},
            ) from exc
        return None if value is None else float(value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        with closing(sqlite3.connect(self._db_path)) as conn:
            with conn:
                yield conn

    def _execute_scalar(self, sql: str, params: Sequence[Any]) -> Any:
        with self._connect() as conn:
            row = conn.execute(sql, list(params)).fetchone()
        return None if row is None else row[0]

    @staticmethod
    def _build_sql(query: AggregateQuery) -> Tuple[str, List[Any]]:
        entity = validate_identifier(query.entity, "entity")
        date_column = validate_identifier(query.date_column, "date_column")
        if query.aggregation is Aggregation.SUM:
            value_column = validate_identifier(query.value_column or "", "value_column")
            selected = f"SUM({value_column})"
        else:
            selected = "COUNT(*)"

        clauses: List[str] = []
        params: List[Any] = []
        time_range = query.time_range
        if isinstance(time_range, ClosedRange):
            clauses.append(f"{date_column} >= ?")
            params.append(to_db_value(time_range.start))
        clauses.append(f"{date_column} < ?")
        params.append(to_db_value(time_range.end))

        for condition in query.conditions:
            expression, condition_params = expand_condition(condition)
            clauses.append(f"({expression})")
            params.extend(condition_params)

        sql = f"SELECT {selected} FROM {entity} WHERE {' AND '.join(clauses)};"
        return sql, params
