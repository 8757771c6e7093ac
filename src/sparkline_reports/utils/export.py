"""Conversions of report series into tabular structures."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from sparkline_reports.domain.models import SeriesPoint


def series_to_rows(series: Sequence[SeriesPoint]) -> List[Dict[str, Any]]:
    return [point.model_dump() for point in series]


def series_to_dataframe(series: Sequence[SeriesPoint]) -> Any:
    """Export a series to a pandas DataFrame with ``date_time`` and ``value`` columns."""

    try:
        import pandas as pd  # type: ignore
    except ImportError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError("pandas is required for dataframe export") from exc

    return pd.DataFrame(series_to_rows(series), columns=["date_time", "value"])
