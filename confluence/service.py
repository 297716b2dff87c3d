"""Query facade over the aggregation and scoring engines.

This is the single surface the API layer talks to:
analyze / analyze_all for results, buffer_size / status for health.
Multi-instrument passes fan out on a bounded thread pool via
asyncio.gather + run_in_executor; the pool size is fixed by config and
does not grow with the instrument count.
"""

from __future__ import annotations

import asyncio
import contextvars
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import structlog

from confluence.config import ScoringConfig
from confluence.engine.aggregator import MergeOutcome, TimeframeAggregator
from confluence.engine.buffers import RollingBufferStore
from confluence.feed.base import BarFeed
from confluence.storage.result_cache import ResultCache
from confluence.strategy.scorer import SignalScorer
from confluence.types import (
    AnalysisResult,
    AnalysisSummary,
    Candle,
    Recommendation,
    Resolution,
)
from confluence.utils.logging import new_run_id, set_run_id
from confluence.utils.time import now_ms

log = structlog.get_logger()


class AnalysisService:
    """Owns the buffer store, aggregator, scorer and result cache."""

    def __init__(
        self,
        config: ScoringConfig | None = None,
        store: RollingBufferStore | None = None,
        cache: ResultCache | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._config = config if config is not None else ScoringConfig()
        self._store = store if store is not None else RollingBufferStore()
        self._cache = cache if cache is not None else ResultCache()
        self._clock = clock
        self._aggregator = TimeframeAggregator(self._store)
        self._scorer = SignalScorer(self._store, clock=clock)

    @property
    def store(self) -> RollingBufferStore:
        return self._store

    @property
    def aggregator(self) -> TimeframeAggregator:
        return self._aggregator

    @property
    def cache(self) -> ResultCache:
        return self._cache

    # --- Ingestion ---

    def on_bar(self, instrument: str, bar: Candle) -> dict[Resolution, MergeOutcome]:
        """Apply one closed 1-min bar. Caller serializes per instrument."""
        return self._aggregator.on_bar(instrument, bar)

    async def backfill(self, feed: BarFeed, instruments: Iterable[str]) -> None:
        """Seed every resolution buffer from the feed's history endpoint.

        Run before the live subscription starts; live bars then extend
        the seeded buffers through the aggregator.
        """
        for instrument in instruments:
            for resolution in Resolution:
                candles = await feed.get_history(
                    instrument, resolution, resolution.capacity
                )
                self._store.seed(instrument, resolution, candles)

    # --- Queries ---

    def analyze(self, instrument: str) -> AnalysisResult | None:
        """Score one instrument and cache the result if there is one."""
        result = self._scorer.analyze(instrument)
        if result is not None:
            self._cache.put(result)
        return result

    async def analyze_all(self, instruments: Iterable[str]) -> AnalysisSummary:
        """Score every instrument on the bounded pool and partition by outcome.

        Buy is ordered by prob_bull descending and sell by prob_bear
        descending; hold keeps request order. Instruments without enough
        history are left out of every group.
        """
        pairs = list(instruments)
        set_run_id(new_run_id())
        try:
            loop = asyncio.get_running_loop()
            with ThreadPoolExecutor(
                max_workers=self._config.max_workers,
                thread_name_prefix="scorer",
            ) as executor:
                results = await asyncio.gather(
                    *(
                        loop.run_in_executor(
                            executor,
                            contextvars.copy_context().run,
                            self.analyze,
                            pair,
                        )
                        for pair in pairs
                    )
                )

            buy: list[AnalysisResult] = []
            sell: list[AnalysisResult] = []
            hold: list[AnalysisResult] = []
            for result in results:
                if result is None:
                    continue
                if result.recommendation is Recommendation.BUY:
                    buy.append(result)
                elif result.recommendation is Recommendation.SELL:
                    sell.append(result)
                else:
                    hold.append(result)
            buy.sort(key=lambda r: r.prob_bull, reverse=True)
            sell.sort(key=lambda r: r.prob_bear, reverse=True)

            computed_at = self._clock()
            self._cache.mark_pass(computed_at)
            log.info(
                "analysis_complete",
                requested=len(pairs),
                scored=len(buy) + len(sell) + len(hold),
                buy=len(buy),
                sell=len(sell),
                hold=len(hold),
            )
            return AnalysisSummary(
                computed_at_ms=computed_at,
                total_requested=len(pairs),
                buy=buy,
                sell=sell,
                hold=hold,
            )
        finally:
            set_run_id("")

    def cached(self, instrument: str) -> AnalysisResult | None:
        """Last result computed for an instrument, without rescoring."""
        return self._cache.get(instrument)

    # --- Health ---

    def buffer_size(self, instrument: str, resolution: Resolution) -> int:
        return self._store.size(instrument, resolution)

    def status(self) -> dict[str, Any]:
        """Liveness summary for the API layer's status endpoint."""
        instruments = self._store.instruments()
        return {
            "pairsTracked": len(instruments),
            "lastAnalysis": self._cache.last_analysis_ms,
            "buffers": {
                res.label: sum(
                    1 for i in instruments if self._store.size(i, res) > 0
                )
                for res in Resolution
            },
            "barsApplied": self._aggregator.bars_applied,
            "staleDrops": self._aggregator.stale_drops,
        }
