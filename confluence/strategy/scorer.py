"""Multi-timeframe confluence scoring.

Three timeframes each cast a weighted vote:

    H4 trend     40  (EMA50 vs EMA200)
    H1 momentum  35  (RSI-14 and MACD difference)
    M15 entry    25  (engulfing pattern on the last candles)

A neutral vote splits its weight evenly, so prob_bull + prob_bear is
always 100. A side needs 65 to produce a BUY or SELL; take-profit and
stop-loss sit at 2x and 1x the M15 ATR from the last price.

Scoring is a stateless pull over an immutable buffer snapshot.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

import structlog

from confluence.engine.buffers import BufferSnapshot, RollingBufferStore
from confluence.engine.indicators import atr
from confluence.strategy.readings import (
    Vote,
    entry_vote,
    read_entry,
    read_momentum,
    read_trend,
)
from confluence.types import AnalysisResult, Candle, Recommendation
from confluence.utils.time import now_ms

log = structlog.get_logger()

MIN_H4_CANDLES = 50
MIN_H1_CANDLES = 100
MIN_M15_CANDLES = 200

TREND_WEIGHT = 40.0
MOMENTUM_WEIGHT = 35.0
ENTRY_WEIGHT = 25.0

RECOMMEND_THRESHOLD = 65.0
ATR_PERIOD = 14
TAKE_PROFIT_ATR = 2.0
STOP_LOSS_ATR = 1.0

_TREND_TEXT = {
    Vote.BULL: "H4 Bullish trend.",
    Vote.BEAR: "H4 Bearish trend.",
    Vote.NEUTRAL: "H4 Neutral.",
}
_MOMENTUM_TEXT = {
    Vote.BULL: "H1 Bullish momentum.",
    Vote.BEAR: "H1 Bearish momentum.",
    Vote.NEUTRAL: "H1 Neutral momentum.",
}
_ENTRY_TEXT = {
    Vote.BULL: "M15 Buy signal detected.",
    Vote.BEAR: "M15 Sell signal detected.",
    Vote.NEUTRAL: "M15 No clear signal.",
}


def has_enough_history(
    h4: Sequence[Candle],
    h1: Sequence[Candle],
    m15: Sequence[Candle],
) -> bool:
    return (
        len(h4) >= MIN_H4_CANDLES
        and len(h1) >= MIN_H1_CANDLES
        and len(m15) >= MIN_M15_CANDLES
    )


def split_weight(vote: Vote, weight: float) -> tuple[float, float]:
    """(bull, bear) share of one component's weight."""
    if vote is Vote.BULL:
        return weight, 0.0
    if vote is Vote.BEAR:
        return 0.0, weight
    return weight / 2, weight / 2


def recommend(prob_bull: float, prob_bear: float) -> Recommendation:
    if prob_bull >= RECOMMEND_THRESHOLD:
        return Recommendation.BUY
    if prob_bear >= RECOMMEND_THRESHOLD:
        return Recommendation.SELL
    return Recommendation.HOLD


def price_levels(
    recommendation: Recommendation,
    last_price: float,
    atr_value: float,
) -> tuple[float, float]:
    """(take_profit, stop_loss) for a recommendation."""
    if recommendation is Recommendation.BUY:
        return (
            last_price + atr_value * TAKE_PROFIT_ATR,
            last_price - atr_value * STOP_LOSS_ATR,
        )
    if recommendation is Recommendation.SELL:
        return (
            last_price - atr_value * TAKE_PROFIT_ATR,
            last_price + atr_value * STOP_LOSS_ATR,
        )
    return last_price, last_price


def score(
    pair: str,
    h4: Sequence[Candle],
    h1: Sequence[Candle],
    m15: Sequence[Candle],
    computed_at_ms: int,
) -> AnalysisResult | None:
    """Fuse the three timeframes into an AnalysisResult.

    Returns None when any buffer is below its minimum history.
    """
    if not has_enough_history(h4, h1, m15):
        return None

    trend = read_trend(h4).vote
    momentum = read_momentum(h1).vote
    entry = entry_vote(read_entry(m15))

    prob_bull = 0.0
    prob_bear = 0.0
    for vote, weight in (
        (trend, TREND_WEIGHT),
        (momentum, MOMENTUM_WEIGHT),
        (entry, ENTRY_WEIGHT),
    ):
        bull, bear = split_weight(vote, weight)
        prob_bull += bull
        prob_bear += bear

    insight = " ".join(
        (_TREND_TEXT[trend], _MOMENTUM_TEXT[momentum], _ENTRY_TEXT[entry])
    )

    recommendation = recommend(prob_bull, prob_bear)
    last_price = m15[-1].close
    take_profit, stop_loss = price_levels(
        recommendation, last_price, atr(m15, ATR_PERIOD)
    )

    return AnalysisResult(
        pair=pair.upper(),
        last_price=last_price,
        prob_bull=prob_bull,
        prob_bear=prob_bear,
        recommendation=recommendation,
        take_profit=take_profit,
        stop_loss=stop_loss,
        insight=insight,
        computed_at_ms=computed_at_ms,
    )


class SignalScorer:
    """Scores instruments from the current contents of a RollingBufferStore."""

    def __init__(
        self,
        store: RollingBufferStore,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._store = store
        self._clock = clock

    def analyze(self, instrument: str) -> AnalysisResult | None:
        """Current confluence for one instrument, or None without enough history."""
        snapshot = self._store.snapshot_all(instrument)
        return self.analyze_snapshot(snapshot)

    def analyze_snapshot(self, snapshot: BufferSnapshot) -> AnalysisResult | None:
        result = score(
            snapshot.instrument,
            snapshot.h4,
            snapshot.h1,
            snapshot.m15,
            self._clock(),
        )
        if result is None:
            log.debug(
                "insufficient_history",
                instrument=snapshot.instrument,
                h4=len(snapshot.h4),
                h1=len(snapshot.h1),
                m15=len(snapshot.m15),
            )
        return result
