"""Two-candle reversal patterns used as the entry trigger."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from confluence.types import Candle


@dataclass(frozen=True)
class EntrySignal:
    """Entry-timeframe pattern result. ``is_bullish`` is meaningless without a signal."""

    has_signal: bool = False
    is_bullish: bool = False


NO_SIGNAL = EntrySignal()


def is_bullish_engulfing(prev: Candle, last: Candle) -> bool:
    """Red candle followed by a green body that engulfs it."""
    return (
        prev.close < prev.open
        and last.close > last.open
        and last.close > prev.open
        and last.open < prev.close
    )


def is_bearish_engulfing(prev: Candle, last: Candle) -> bool:
    """Green candle followed by a red body that engulfs it."""
    return (
        prev.close > prev.open
        and last.close < last.open
        and last.close < prev.open
        and last.open > prev.close
    )


def detect_engulfing(candles: Sequence[Candle]) -> EntrySignal:
    """Check the last two of the last three candles for an engulfing pattern.

    The third-from-last candle is part of the window but not of the rule.
    Fewer than three candles never signal.
    """
    if len(candles) < 3:
        return NO_SIGNAL
    c2, c3 = candles[-2], candles[-1]
    if is_bullish_engulfing(c2, c3):
        return EntrySignal(has_signal=True, is_bullish=True)
    if is_bearish_engulfing(c2, c3):
        return EntrySignal(has_signal=True, is_bullish=False)
    return NO_SIGNAL
