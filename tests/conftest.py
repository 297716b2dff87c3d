"""Shared test fixtures for confluence."""

from __future__ import annotations

import pytest

from confluence.engine.aggregator import TimeframeAggregator
from confluence.engine.buffers import RollingBufferStore
from confluence.service import AnalysisService

FIXED_NOW_MS = 1_700_100_000_000


@pytest.fixture
def store() -> RollingBufferStore:
    return RollingBufferStore()


@pytest.fixture
def aggregator(store: RollingBufferStore) -> TimeframeAggregator:
    return TimeframeAggregator(store)


@pytest.fixture
def service() -> AnalysisService:
    """AnalysisService with a frozen clock."""
    return AnalysisService(clock=lambda: FIXED_NOW_MS)
