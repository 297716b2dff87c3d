"""Error hierarchy.

The scoring and aggregation core does not raise for expected conditions
(short history, stale bars, degenerate indicator inputs). Exceptions here
cover misuse of the feed contract.
"""

from __future__ import annotations


class ConfluenceError(Exception):
    """Base exception for all confluence errors."""


class FeedError(ConfluenceError):
    """Bar feed misuse or failure."""


class FeedNotConnectedError(FeedError):
    """Feed method called before connect() was called."""
