"""Per-instrument serialized bar ingestion.

Each instrument gets its own asyncio.Queue and a single consumer task
that applies bars to the aggregator in arrival order. Bars for different
instruments are independent and never wait on each other; bars for the
same instrument can never race.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import structlog

from confluence.engine.aggregator import TimeframeAggregator
from confluence.feed.base import BarFeed
from confluence.types import Candle

log = structlog.get_logger()

# Per-instrument backlog cap, ~1 week of 1-min bars
QUEUE_MAXSIZE = 10_000


class BarRouter:
    """Actor-style dispatcher in front of a TimeframeAggregator."""

    def __init__(
        self,
        aggregator: TimeframeAggregator,
        queue_maxsize: int = QUEUE_MAXSIZE,
    ) -> None:
        self._aggregator = aggregator
        self._queue_maxsize = queue_maxsize
        self._queues: dict[str, asyncio.Queue[Candle]] = {}
        self._workers: dict[str, asyncio.Task[None]] = {}
        self._closed = False

    def _queue_for(self, instrument: str) -> asyncio.Queue[Candle]:
        queue = self._queues.get(instrument)
        if queue is None:
            queue = asyncio.Queue(maxsize=self._queue_maxsize)
            self._queues[instrument] = queue
            self._workers[instrument] = asyncio.create_task(
                self._consume(instrument, queue),
                name=f"bar-router-{instrument}",
            )
        return queue

    async def submit(self, instrument: str, bar: Candle) -> None:
        """Queue a closed 1-min bar, waiting if the backlog is full."""
        if self._closed:
            raise RuntimeError("BarRouter is closed")
        await self._queue_for(instrument.lower()).put(bar)

    def submit_nowait(self, instrument: str, bar: Candle) -> bool:
        """Queue a bar without waiting. Drops the bar if the backlog is full.

        Dropping the newest bar leaves a gap but keeps ordering intact.
        """
        if self._closed:
            raise RuntimeError("BarRouter is closed")
        key = instrument.lower()
        queue = self._queue_for(key)
        if queue.full():
            log.critical(
                "Bar queue full, dropping newest bar",
                instrument=key,
                timestamp=bar.timestamp,
                queue_size=queue.qsize(),
            )
            return False
        queue.put_nowait(bar)
        return True

    async def _consume(self, instrument: str, queue: asyncio.Queue[Candle]) -> None:
        while True:
            bar = await queue.get()
            try:
                self._aggregator.on_bar(instrument, bar)
            except Exception:
                log.exception(
                    "bar_apply_failed",
                    instrument=instrument,
                    timestamp=bar.timestamp,
                )
            finally:
                queue.task_done()

    async def run(self, feed: BarFeed, instruments: Iterable[str]) -> int:
        """Pump a feed subscription into the router until it ends.

        Returns the number of bars submitted.
        """
        stream = await feed.subscribe_bars([i.lower() for i in instruments])
        count = 0
        async for instrument, bar in stream:
            await self.submit(instrument, bar)
            count += 1
        log.info("feed_stream_ended", bars_submitted=count)
        return count

    async def drain(self) -> None:
        """Wait until every queued bar has been applied."""
        await asyncio.gather(*(q.join() for q in list(self._queues.values())))

    def pending(self, instrument: str) -> int:
        queue = self._queues.get(instrument.lower())
        return 0 if queue is None else queue.qsize()

    async def close(self) -> None:
        """Stop all consumer tasks. Queued but unapplied bars are discarded."""
        self._closed = True
        for task in self._workers.values():
            task.cancel()
        await asyncio.gather(*self._workers.values(), return_exceptions=True)
        self._workers.clear()
        self._queues.clear()
