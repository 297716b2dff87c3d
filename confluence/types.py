"""Domain types shared across the confluence engine.

Frozen dataclasses for value objects. Prices and volumes are float;
timestamps are integer milliseconds since the UTC epoch.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

_MINUTE_MS = 60_000


class Resolution(Enum):
    """Retained aggregation granularity: (label, interval_ms, capacity)."""

    M15 = ("m15", 15 * _MINUTE_MS, 1000)
    H1 = ("h1", 60 * _MINUTE_MS, 500)
    H4 = ("h4", 240 * _MINUTE_MS, 150)

    def __init__(self, label: str, interval_ms: int, capacity: int) -> None:
        self.label = label
        self.interval_ms = interval_ms
        self.capacity = capacity

    def bucket_of(self, timestamp_ms: int) -> int:
        """Start of the bucket this timestamp falls into."""
        return (timestamp_ms // self.interval_ms) * self.interval_ms

    @classmethod
    def from_label(cls, label: str) -> Resolution:
        for res in cls:
            if res.label == label.lower():
                return res
        raise ValueError(
            f"resolution must be one of {[r.label for r in cls]}, got {label!r}"
        )


class Recommendation(str, Enum):
    """Scoring outcome."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(frozen=True)
class Candle:
    """OHLCV bar at a bucket-start timestamp."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float

    @classmethod
    def seeded(cls, bar: Candle, bucket: int) -> Candle:
        """New bucket candle opened by ``bar``."""
        return replace(bar, timestamp=bucket)

    def merge(self, bar: Candle) -> Candle:
        """Fold a later bar of the same bucket into this candle.

        Returns a new value; ``open`` and ``timestamp`` stay fixed.
        """
        return Candle(
            timestamp=self.timestamp,
            open=self.open,
            high=max(self.high, bar.high),
            low=min(self.low, bar.low),
            close=bar.close,
            volume=self.volume + bar.volume,
        )

    @property
    def is_green(self) -> bool:
        return self.close > self.open

    @property
    def is_red(self) -> bool:
        return self.close < self.open


@dataclass(frozen=True)
class AnalysisResult:
    """Confluence score for one instrument at one point in time."""

    pair: str
    last_price: float
    prob_bull: float
    prob_bear: float
    recommendation: Recommendation
    take_profit: float
    stop_loss: float
    insight: str
    computed_at_ms: int

    def to_dict(self) -> dict[str, Any]:
        """Wire shape consumed by the API layer."""
        return {
            "pair": self.pair,
            "lastPrice": self.last_price,
            "probBull": self.prob_bull,
            "probBear": self.prob_bear,
            "recommendation": self.recommendation.value,
            "tp": self.take_profit,
            "sl": self.stop_loss,
            "insight": self.insight,
            "timestamp": self.computed_at_ms,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    """Results of a multi-instrument pass, partitioned by recommendation."""

    computed_at_ms: int
    total_requested: int
    buy: list[AnalysisResult] = field(default_factory=list)
    sell: list[AnalysisResult] = field(default_factory=list)
    hold: list[AnalysisResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "buy": [r.to_dict() for r in self.buy],
            "sell": [r.to_dict() for r in self.sell],
            "hold": [r.to_dict() for r in self.hold],
            "timestamp": self.computed_at_ms,
            "totalPairs": self.total_requested,
        }
