"""BarFeed protocol: what the engine needs from a market data transport.

Transport implementations (exchange REST backfill plus a live push
stream, with their own reconnection and pacing) must satisfy this
protocol. Correctness requirements on every implementation:

- Only closed 1-min bars are yielded.
- Bars for one instrument are yielded in non-decreasing timestamp order.
- A bar is never re-delivered with a different payload.
- Instrument names are lower-case.

The aggregator drops bars older than the open bucket and cannot detect
reordering inside the open bucket; violating the above corrupts buffers.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, TypeAlias, runtime_checkable

from confluence.types import Candle, Resolution

InstrumentBar: TypeAlias = tuple[str, Candle]


@runtime_checkable
class BarFeed(Protocol):
    """Async source of closed 1-min bars and aggregated history.

    Implementations must support ``async with`` for lifecycle management.
    """

    async def connect(self) -> None:
        """Establish connection to the data source."""
        ...

    async def disconnect(self) -> None:
        """Tear down connection and release resources."""
        ...

    async def subscribe_bars(
        self,
        instruments: list[str],
    ) -> AsyncIterator[InstrumentBar]:
        """Start streaming closed 1-min bars for the given instruments.

        Returns:
            AsyncIterator yielding (instrument, bar) pairs as they close.
        """
        ...

    async def get_history(
        self,
        instrument: str,
        resolution: Resolution,
        limit: int,
    ) -> list[Candle]:
        """Fetch already-aggregated candles for backfill.

        Returns:
            Up to ``limit`` candles ordered by timestamp ascending.
        """
        ...

    async def __aenter__(self) -> BarFeed:
        """Connect on context manager entry."""
        ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Disconnect on context manager exit."""
        ...
