"""Strategy layer: per-timeframe readings and confluence scoring."""

from confluence.strategy.readings import MomentumReading, TrendReading, Vote
from confluence.strategy.scorer import SignalScorer, recommend, score

__all__ = [
    "MomentumReading",
    "SignalScorer",
    "TrendReading",
    "Vote",
    "recommend",
    "score",
]
