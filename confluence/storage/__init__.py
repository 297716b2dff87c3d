"""In-memory storage for computed analysis results."""

from confluence.storage.result_cache import ResultCache

__all__ = ["ResultCache"]
