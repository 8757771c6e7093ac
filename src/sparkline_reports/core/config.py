"""Reporting engine configuration helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from sparkline_reports.domain.exceptions import InvalidGroupingError
from sparkline_reports.periods.grouping import Grouping


def _str_to_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _str_to_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Invalid integer value: {value}") from exc


@dataclass(frozen=True)
class ReportsConfig:
    """Immutable defaults for building reports, loaded from env or files."""

    default_grouping: str = "day"
    default_limit: int = 100
    default_live_data: bool = False
    default_date_column: str = "created_at"
    enable_cache: bool = True
    cache_backend: str = "memory"
    cache_db_path: str = "report_cache.db"
    max_workers: int = 1
    query_retries: int = 3

    _ALLOWED_CACHE_BACKENDS = {"memory", "sqlite"}

    def __post_init__(self) -> None:
        self.validate()

    @classmethod
    def from_env(cls) -> "ReportsConfig":
        defaults = cls()
        return cls(
            default_grouping=os.getenv(
                "REPORTS_DEFAULT_GROUPING", defaults.default_grouping
            ),
            default_limit=_str_to_int(
                os.getenv("REPORTS_DEFAULT_LIMIT"), defaults.default_limit
            ),
            default_live_data=_str_to_bool(
                os.getenv("REPORTS_DEFAULT_LIVE_DATA"), defaults.default_live_data
            ),
            default_date_column=os.getenv(
                "REPORTS_DEFAULT_DATE_COLUMN", defaults.default_date_column
            ),
            enable_cache=_str_to_bool(
                os.getenv("REPORTS_ENABLE_CACHE"), defaults.enable_cache
            ),
            cache_backend=os.getenv("REPORTS_CACHE_BACKEND", defaults.cache_backend),
            cache_db_path=os.getenv("REPORTS_CACHE_DB_PATH", defaults.cache_db_path),
            max_workers=_str_to_int(
                os.getenv("REPORTS_MAX_WORKERS"), defaults.max_workers
            ),
            query_retries=_str_to_int(
                os.getenv("REPORTS_QUERY_RETRIES"), defaults.query_retries
            ),
        )

    @classmethod
    def from_file(cls, path: str) -> "ReportsConfig":
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        raw = file_path.read_text()
        data: Dict[str, Any]
        suffix = file_path.suffix.lower()
        if suffix == ".json":
            data = json.loads(raw)
        elif suffix in {".yaml", ".yml"}:
            data = cls._load_yaml(raw)
        else:
            raise ValueError("Unsupported config format. Use JSON or YAML.")
        return cls(**cls._merge_with_defaults(data))

    def validate(self) -> None:
        try:
            Grouping.parse(self.default_grouping)
        except InvalidGroupingError as exc:
            raise ValueError(
                f"default_grouping must be one of {[g.value for g in Grouping]}"
            ) from exc
        if self.default_limit <= 0:
            raise ValueError("default_limit must be greater than zero")
        if self.cache_backend not in self._ALLOWED_CACHE_BACKENDS:
            raise ValueError(
                f"cache_backend must be one of {sorted(self._ALLOWED_CACHE_BACKENDS)}"
            )
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.query_retries < 1:
            raise ValueError("query_retries must be at least 1")

    @classmethod
    def _merge_with_defaults(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        defaults = cls()
        return {
            item.name: data.get(item.name, getattr(defaults, item.name))
            for item in fields(cls)
        }

    @staticmethod
    def _load_yaml(raw: str) -> Dict[str, Any]:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to parse YAML config files") from exc
        return yaml.safe_load(raw) or {}
