"""Multi-timeframe confluence engine for streaming 1-min bars."""

__version__ = "0.1.0"
