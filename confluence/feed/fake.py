"""FakeBarFeed: in-memory bar feed for testing.

Lightweight implementation of BarFeed for exercising the router,
backfill and scoring without a network transport.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Self

from confluence.errors import FeedError, FeedNotConnectedError
from confluence.feed.base import InstrumentBar
from confluence.types import Candle, Resolution


class FakeBarFeed:
    """In-memory BarFeed for testing.

    Supply canned history at construction, push live bars during tests
    via push_bar(), and end the stream with finish().
    """

    def __init__(
        self,
        history: dict[tuple[str, Resolution], list[Candle]] | None = None,
    ) -> None:
        self._history = history if history is not None else {}
        self._bar_queue: asyncio.Queue[InstrumentBar | None] = asyncio.Queue()
        self._connected = False
        self._subscribed = False
        self._instruments: set[str] = set()

    def push_bar(self, instrument: str, bar: Candle) -> None:
        """Push a bar into the streaming queue."""
        self._bar_queue.put_nowait((instrument, bar))

    def finish(self) -> None:
        """End the live stream after already-pushed bars."""
        self._bar_queue.put_nowait(None)

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False
        self._subscribed = False

    async def subscribe_bars(
        self,
        instruments: list[str],
    ) -> AsyncIterator[InstrumentBar]:
        if not self._connected:
            raise FeedNotConnectedError("Not connected. Call connect() first.")
        if self._subscribed:
            raise FeedError("subscribe_bars() already called on this connection.")
        self._subscribed = True
        self._instruments = set(instruments)
        return self._bar_iterator()

    async def _bar_iterator(self) -> AsyncIterator[InstrumentBar]:
        while self._connected:
            try:
                item = await asyncio.wait_for(self._bar_queue.get(), timeout=0.1)
            except TimeoutError:
                continue
            if item is None:
                return
            if item[0] in self._instruments:
                yield item

    async def get_history(
        self,
        instrument: str,
        resolution: Resolution,
        limit: int,
    ) -> list[Candle]:
        if not self._connected:
            raise FeedNotConnectedError("Not connected. Call connect() first.")
        candles = self._history.get((instrument, resolution), [])
        return candles[-limit:] if limit > 0 else []

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        await self.disconnect()
