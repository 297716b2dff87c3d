"""Engine layer: rolling buffers, aggregation, indicators and patterns."""

from confluence.engine.aggregator import MergeOutcome, TimeframeAggregator
from confluence.engine.buffers import BufferSnapshot, RollingBufferStore
from confluence.engine.indicators import atr, ema, macd_diff, rsi
from confluence.engine.patterns import EntrySignal, detect_engulfing
from confluence.engine.router import BarRouter

__all__ = [
    "BarRouter",
    "BufferSnapshot",
    "EntrySignal",
    "MergeOutcome",
    "RollingBufferStore",
    "TimeframeAggregator",
    "atr",
    "detect_engulfing",
    "ema",
    "macd_diff",
    "rsi",
]
