"""File-backed staleness cache for Trello Monitor.

Provides age-based caching of Trello API responses with:
- Fresh entries served directly
- Stale entries served while refreshed in a background thread
- Expired entries evicted on read
"""

from .entry import CacheEntry, Freshness
from .store import StalenessCache

__all__ = [
    "CacheEntry",
    "Freshness",
    "StalenessCache",
]
