"""Last computed AnalysisResult per instrument.

Consulted and overwritten by the query layer. A newer result replaces
the previous one outright; nothing is merged. Lives in memory only.
"""

from __future__ import annotations

import threading

from confluence.types import AnalysisResult


class ResultCache:
    """Thread-safe map of lower-case instrument -> latest AnalysisResult."""

    def __init__(self) -> None:
        self._results: dict[str, AnalysisResult] = {}
        self._lock = threading.Lock()
        self._last_analysis_ms = 0

    def put(self, result: AnalysisResult) -> None:
        with self._lock:
            self._results[result.pair.lower()] = result

    def get(self, instrument: str) -> AnalysisResult | None:
        with self._lock:
            return self._results.get(instrument.lower())

    def all(self) -> list[AnalysisResult]:
        """Cached results ordered by pair."""
        with self._lock:
            return [self._results[k] for k in sorted(self._results)]

    def mark_pass(self, computed_at_ms: int) -> None:
        """Record completion time of a full multi-instrument pass."""
        with self._lock:
            self._last_analysis_ms = computed_at_ms

    @property
    def last_analysis_ms(self) -> int:
        """Completion time of the last full pass, 0 before the first one."""
        return self._last_analysis_ms

    def clear(self) -> None:
        with self._lock:
            self._results.clear()
            self._last_analysis_ms = 0

    def __len__(self) -> int:
        return len(self._results)
