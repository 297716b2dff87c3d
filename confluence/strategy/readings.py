"""Per-timeframe readings feeding the confluence score.

Each reading is a frozen snapshot of the indicator values one
timeframe contributes, plus the vote it casts.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from confluence.engine.indicators import ema, macd_diff, rsi
from confluence.engine.patterns import EntrySignal, detect_engulfing
from confluence.types import Candle

TREND_FAST_PERIOD = 50
TREND_SLOW_PERIOD = 200
RSI_PERIOD = 14
RSI_BULL_ABOVE = 55.0
RSI_BEAR_BELOW = 45.0


class Vote(str, Enum):
    """Direction one component votes for."""

    BULL = "bull"
    BEAR = "bear"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class TrendReading:
    """H4 trend: sign of EMA50 - EMA200."""

    direction: int
    ema_fast: float
    ema_slow: float

    @property
    def vote(self) -> Vote:
        if self.direction > 0:
            return Vote.BULL
        if self.direction < 0:
            return Vote.BEAR
        return Vote.NEUTRAL


@dataclass(frozen=True)
class MomentumReading:
    """H1 momentum: RSI-14 together with the MACD difference."""

    rsi: float
    macd_diff: float

    @property
    def vote(self) -> Vote:
        if self.rsi > RSI_BULL_ABOVE and self.macd_diff > 0:
            return Vote.BULL
        if self.rsi < RSI_BEAR_BELOW and self.macd_diff < 0:
            return Vote.BEAR
        return Vote.NEUTRAL


def entry_vote(signal: EntrySignal) -> Vote:
    if not signal.has_signal:
        return Vote.NEUTRAL
    return Vote.BULL if signal.is_bullish else Vote.BEAR


def read_trend(candles: Sequence[Candle]) -> TrendReading:
    fast = ema(candles, TREND_FAST_PERIOD)
    slow = ema(candles, TREND_SLOW_PERIOD)
    direction = 0
    if fast > slow:
        direction = 1
    elif fast < slow:
        direction = -1
    return TrendReading(direction=direction, ema_fast=fast, ema_slow=slow)


def read_momentum(candles: Sequence[Candle]) -> MomentumReading:
    return MomentumReading(rsi=rsi(candles, RSI_PERIOD), macd_diff=macd_diff(candles))


def read_entry(candles: Sequence[Candle]) -> EntrySignal:
    return detect_engulfing(candles)
