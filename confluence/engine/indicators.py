"""Technical indicators over finite candle sequences.

Pure functions: each takes an oldest-first sequence of candles and
returns a float. Short inputs return a neutral default instead of
raising, so scoring always produces a well-formed result once the
minimum history is present.

These formulas are intentionally simplified and must stay as written:
- EMA is seeded with the first close, not an SMA.
- RSI is a simple average over the last ``period`` deltas (not Wilder).
- MACD is the bare EMA12 - EMA26 difference (no signal line).
Scoring thresholds are calibrated against exactly these definitions.
"""

from __future__ import annotations

from collections.abc import Sequence

from confluence.types import Candle

RSI_NEUTRAL = 50.0
RSI_MAX = 100.0


def ema(candles: Sequence[Candle], period: int) -> float:
    """Exponential moving average of closes. 0.0 if fewer than ``period``."""
    if len(candles) < period:
        return 0.0
    k = 2.0 / (period + 1)
    value = candles[0].close
    for candle in candles[1:]:
        value = (candle.close - value) * k + value
    return value


def rsi(candles: Sequence[Candle], period: int = 14) -> float:
    """Relative strength index over the last ``period`` close-to-close moves.

    Returns 50.0 with fewer than ``period + 1`` candles and 100.0 when
    there are no losses in the window.
    """
    n = len(candles)
    if n < period + 1:
        return RSI_NEUTRAL

    gains = 0.0
    losses = 0.0
    for i in range(n - period, n):
        change = candles[i].close - candles[i - 1].close
        if change > 0:
            gains += change
        else:
            losses += abs(change)

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return RSI_MAX
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def macd_diff(candles: Sequence[Candle]) -> float:
    """EMA(12) - EMA(26) momentum proxy."""
    return ema(candles, 12) - ema(candles, 26)


def true_range(candle: Candle, prev_close: float) -> float:
    return max(
        candle.high - candle.low,
        abs(candle.high - prev_close),
        abs(candle.low - prev_close),
    )


def atr(candles: Sequence[Candle], period: int = 14) -> float:
    """Average true range: simple mean of the last ``period`` true ranges.

    0.0 with fewer than ``period + 1`` candles.
    """
    n = len(candles)
    if n < period + 1:
        return 0.0
    total = sum(
        true_range(candles[i], candles[i - 1].close) for i in range(n - period, n)
    )
    return total / period
