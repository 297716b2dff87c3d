"""Per-instrument rolling candle buffers at three resolutions.

Each instrument owns one bounded deque per Resolution plus a lock.
Writers (the aggregator, backfill seeding) hold the lock for the whole
update; readers take tuple snapshots under the same lock, so a scoring
pass never observes a half-applied bar.
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from confluence.types import Candle, Resolution

log = structlog.get_logger()


class InstrumentBuffers:
    """The three rolling buffers of one instrument.

    Only touch ``candles`` while holding ``lock``.
    """

    __slots__ = ("candles", "instrument", "lock")

    def __init__(self, instrument: str) -> None:
        self.instrument = instrument
        self.lock = threading.Lock()
        self.candles: dict[Resolution, deque[Candle]] = {
            res: deque(maxlen=res.capacity) for res in Resolution
        }


@dataclass(frozen=True)
class BufferSnapshot:
    """Immutable copy of an instrument's buffers taken at one bar boundary."""

    instrument: str
    m15: tuple[Candle, ...] = ()
    h1: tuple[Candle, ...] = ()
    h4: tuple[Candle, ...] = ()

    def get(self, resolution: Resolution) -> tuple[Candle, ...]:
        if resolution is Resolution.M15:
            return self.m15
        if resolution is Resolution.H1:
            return self.h1
        return self.h4


class RollingBufferStore:
    """Owns every instrument's buffers for the lifetime of the process.

    Entries are created lazily on first write and never removed.
    Instrument keys are lower-cased.
    """

    def __init__(self) -> None:
        self._instruments: dict[str, InstrumentBuffers] = {}
        self._registry_lock = threading.Lock()

    def _get_or_create(self, instrument: str) -> InstrumentBuffers:
        key = instrument.lower()
        buffers = self._instruments.get(key)
        if buffers is not None:
            return buffers
        with self._registry_lock:
            buffers = self._instruments.get(key)
            if buffers is None:
                buffers = InstrumentBuffers(key)
                self._instruments[key] = buffers
                log.debug("buffers_created", instrument=key)
            return buffers

    @contextmanager
    def writer(self, instrument: str) -> Iterator[InstrumentBuffers]:
        """Exclusive write access to one instrument's buffers."""
        buffers = self._get_or_create(instrument)
        with buffers.lock:
            yield buffers

    def seed(
        self,
        instrument: str,
        resolution: Resolution,
        candles: Iterable[Candle],
    ) -> int:
        """Replace a buffer with backfilled history.

        Input is sorted by timestamp and de-duplicated (last one wins);
        only the newest ``resolution.capacity`` candles are kept.
        Returns the resulting buffer length.
        """
        by_ts = {c.timestamp: c for c in candles}
        ordered = [by_ts[ts] for ts in sorted(by_ts)]
        with self.writer(instrument) as buffers:
            buf = buffers.candles[resolution]
            buf.clear()
            buf.extend(ordered)
            size = len(buf)
        log.info(
            "buffer_seeded",
            instrument=instrument.lower(),
            resolution=resolution.label,
            received=len(ordered),
            kept=size,
        )
        return size

    def snapshot(
        self,
        instrument: str,
        resolution: Resolution,
    ) -> tuple[Candle, ...]:
        """Copy of one buffer, oldest first. Empty for unknown instruments."""
        buffers = self._instruments.get(instrument.lower())
        if buffers is None:
            return ()
        with buffers.lock:
            return tuple(buffers.candles[resolution])

    def snapshot_all(self, instrument: str) -> BufferSnapshot:
        """Consistent copy of all three buffers of an instrument."""
        key = instrument.lower()
        buffers = self._instruments.get(key)
        if buffers is None:
            return BufferSnapshot(instrument=key)
        with buffers.lock:
            return BufferSnapshot(
                instrument=key,
                m15=tuple(buffers.candles[Resolution.M15]),
                h1=tuple(buffers.candles[Resolution.H1]),
                h4=tuple(buffers.candles[Resolution.H4]),
            )

    def size(self, instrument: str, resolution: Resolution) -> int:
        buffers = self._instruments.get(instrument.lower())
        if buffers is None:
            return 0
        with buffers.lock:
            return len(buffers.candles[resolution])

    def instruments(self) -> list[str]:
        """Instruments that have buffers, sorted."""
        with self._registry_lock:
            return sorted(self._instruments)

    def __contains__(self, instrument: object) -> bool:
        return (
            isinstance(instrument, str)
            and instrument.lower() in self._instruments
        )

    def __len__(self) -> int:
        return len(self._instruments)
