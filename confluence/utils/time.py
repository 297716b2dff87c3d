"""UTC epoch-millisecond helpers.

Candles carry integer millisecond timestamps (bucket start, UTC).
Crypto futures trade around the clock, so there is no session calendar.
"""

from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def to_datetime(ts_ms: int) -> datetime:
    """Convert epoch milliseconds to a timezone-aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=ts_ms)


def format_ms(ts_ms: int) -> str:
    """Format epoch milliseconds as ISO 8601 with a Z suffix.

    Output format: YYYY-MM-DDTHH:MM:SS.fffZ
    """
    dt = to_datetime(ts_ms)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
