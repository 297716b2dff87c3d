"""Bar feed contract between the transport layer and the engine."""

from confluence.feed.base import BarFeed, InstrumentBar
from confluence.feed.fake import FakeBarFeed

__all__ = ["BarFeed", "FakeBarFeed", "InstrumentBar"]
