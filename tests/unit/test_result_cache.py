"""Tests for ResultCache."""

from __future__ import annotations

from dataclasses import replace

from confluence.storage.result_cache import ResultCache
from confluence.types import AnalysisResult, Recommendation


def make_result(pair: str = "BTCUSDT", prob_bull: float = 70.0) -> AnalysisResult:
    return AnalysisResult(
        pair=pair,
        last_price=100.0,
        prob_bull=prob_bull,
        prob_bear=100.0 - prob_bull,
        recommendation=Recommendation.BUY,
        take_profit=104.0,
        stop_loss=98.0,
        insight="H4 Bullish trend. H1 Neutral momentum. M15 No clear signal.",
        computed_at_ms=1_700_000_000_000,
    )


class TestResultCache:
    """Latest-wins per instrument."""

    def test_empty(self) -> None:
        cache = ResultCache()
        assert cache.get("btcusdt") is None
        assert cache.all() == []
        assert len(cache) == 0
        assert cache.last_analysis_ms == 0

    def test_lookup_is_case_insensitive(self) -> None:
        cache = ResultCache()
        result = make_result()
        cache.put(result)
        assert cache.get("btcusdt") is result
        assert cache.get("BtcUsdt") is result

    def test_newer_result_replaces(self) -> None:
        cache = ResultCache()
        cache.put(make_result(prob_bull=70.0))
        newer = replace(make_result(prob_bull=30.0), computed_at_ms=1_700_000_060_000)
        cache.put(newer)
        assert cache.get("btcusdt") is newer
        assert len(cache) == 1

    def test_all_ordered_by_pair(self) -> None:
        cache = ResultCache()
        for pair in ("SOLUSDT", "BTCUSDT", "ETHUSDT"):
            cache.put(make_result(pair=pair))
        assert [r.pair for r in cache.all()] == ["BTCUSDT", "ETHUSDT", "SOLUSDT"]

    def test_mark_pass_and_clear(self) -> None:
        cache = ResultCache()
        cache.put(make_result())
        cache.mark_pass(1_700_000_123_000)
        assert cache.last_analysis_ms == 1_700_000_123_000
        cache.clear()
        assert len(cache) == 0
        assert cache.last_analysis_ms == 0
