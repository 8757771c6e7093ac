"""Dependency injection container for building fully-wired reports."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from sparkline_reports.cache.memory_cache import InMemoryReportCache
from sparkline_reports.cache.sqlite_cache import SQLiteReportCache
from sparkline_reports.core.config import ReportsConfig
from sparkline_reports.domain.interfaces import IAggregateSource, IReportCache
from sparkline_reports.reporting.cumulated_report import CumulatedReport
from sparkline_reports.reporting.report import Report
from sparkline_reports.storage.sqlite_store import SQLiteRecordStore

_UNSET: Any = object()


class DIContainer:
    """Factory helpers that assemble stores, caches and reports from config."""

    @staticmethod
    def create_store(
        db_path: str | Path, config: Optional[ReportsConfig] = None
    ) -> SQLiteRecordStore:
        cfg = config or ReportsConfig.from_env()
        return SQLiteRecordStore(db_path, retries=cfg.query_retries)

    @staticmethod
    def create_cache(config: Optional[ReportsConfig] = None) -> Optional[IReportCache]:
        cfg = config or ReportsConfig.from_env()
        if not cfg.enable_cache:
            return None
        if cfg.cache_backend == "sqlite":
            return SQLiteReportCache(cfg.cache_db_path)
        return InMemoryReportCache()

    @staticmethod
    def create_report(
        source: IAggregateSource,
        entity: str,
        name: str,
        *,
        cumulative: bool = False,
        config: Optional[ReportsConfig] = None,
        cache: Optional[IReportCache] = _UNSET,
        **options: Any,
    ) -> Report:
        """Build a report, filling options the caller left out from ``config``.

        Pass ``cache=None`` explicitly to disable caching for this report.
        """

        cfg = config or ReportsConfig.from_env()
        resolved_cache = DIContainer.create_cache(cfg) if cache is _UNSET else cache
        options.setdefault("grouping", cfg.default_grouping)
        options.setdefault("limit", cfg.default_limit)
        options.setdefault("live_data", cfg.default_live_data)
        options.setdefault("date_column", cfg.default_date_column)
        options.setdefault("max_workers", cfg.max_workers)

        report_cls = CumulatedReport if cumulative else Report
        return report_cls(source, entity, name, cache=resolved_cache, **options)
