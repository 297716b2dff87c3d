"""Aggregation of finalized 1-min bars into M15/H1/H4 rolling buffers.

Push-based: call on_bar() with each closed 1-min bar. Every bar is folded
into all three resolutions at once; there is nothing to flush, the open
bucket is always the buffer's tail.

Feed precondition: bars for one instrument arrive in non-decreasing
timestamp order and are never re-delivered with a different payload.
A bar whose bucket is older than the tail is dropped. A late bar inside
the still-open bucket is NOT detected and will move ``close``.
"""

from __future__ import annotations

import threading
from collections import deque
from enum import Enum

import structlog

from confluence.engine.buffers import RollingBufferStore
from confluence.types import Candle, Resolution

log = structlog.get_logger()


class MergeOutcome(str, Enum):
    """What a bar did to one resolution's buffer."""

    OPENED = "opened"  # first candle of an empty buffer
    MERGED = "merged"  # folded into the open tail bucket
    APPENDED = "appended"  # started a new bucket
    DROPPED = "dropped"  # bucket older than the tail


class TimeframeAggregator:
    """Folds 1-min bars into the store's three resolutions.

    The store's per-instrument lock is held across all three updates,
    so a snapshot always sees either none or all of a bar's effect.
    """

    def __init__(self, store: RollingBufferStore) -> None:
        self._store = store
        self._stats_lock = threading.Lock()
        self._bars_applied = 0
        self._stale_drops = 0

    @property
    def store(self) -> RollingBufferStore:
        return self._store

    def on_bar(self, instrument: str, bar: Candle) -> dict[Resolution, MergeOutcome]:
        """Apply one closed 1-min bar to every resolution of ``instrument``."""
        with self._store.writer(instrument) as buffers:
            outcomes = {
                res: self._fold(buffers.candles[res], res, bar)
                for res in Resolution
            }

        dropped = sum(1 for o in outcomes.values() if o is MergeOutcome.DROPPED)
        with self._stats_lock:
            self._bars_applied += 1
            self._stale_drops += dropped
        if dropped:
            log.debug(
                "bar_dropped_stale",
                instrument=instrument.lower(),
                timestamp=bar.timestamp,
                resolutions=[
                    r.label for r, o in outcomes.items() if o is MergeOutcome.DROPPED
                ],
            )
        return outcomes

    @staticmethod
    def _fold(
        buf: deque[Candle],
        resolution: Resolution,
        bar: Candle,
    ) -> MergeOutcome:
        bucket = resolution.bucket_of(bar.timestamp)

        if not buf:
            buf.append(Candle.seeded(bar, bucket))
            return MergeOutcome.OPENED

        last = buf[-1]
        if bucket == last.timestamp:
            # Swap in a new value; snapshot holders keep the old one
            buf[-1] = last.merge(bar)
            return MergeOutcome.MERGED
        if bucket > last.timestamp:
            # deque(maxlen=capacity) evicts exactly the oldest candle
            buf.append(Candle.seeded(bar, bucket))
            return MergeOutcome.APPENDED
        return MergeOutcome.DROPPED

    @property
    def bars_applied(self) -> int:
        """Number of on_bar() calls so far."""
        return self._bars_applied

    @property
    def stale_drops(self) -> int:
        """Per-resolution drops of bars older than the open bucket."""
        return self._stale_drops
