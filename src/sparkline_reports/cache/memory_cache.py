"""Process-local report cache."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from sparkline_reports.domain.interfaces import ICacheKey, IReportCache


class InMemoryReportCache(IReportCache):
    """Dictionary-backed cache; single-key operations are serialized by a lock."""

    def __init__(self) -> None:
        self._entries: Dict[str, float] = {}
        self._lock = threading.Lock()

    def get(self, key: ICacheKey) -> Optional[float]:
        with self._lock:
            return self._entries.get(key.as_string())

    def put(self, key: ICacheKey, value: float) -> None:
        with self._lock:
            self._entries[key.as_string()] = float(value)

    def clear_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
