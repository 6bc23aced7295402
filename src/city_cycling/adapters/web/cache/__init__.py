"""Result caches for the web adapter."""

from city_cycling.adapters.web.cache.history_cache import HistoryCache
from city_cycling.adapters.web.cache.read_write_lock import ReadWriteLock
from city_cycling.adapters.web.cache.snapshot_cache import SnapshotCache

__all__ = ["HistoryCache", "ReadWriteLock", "SnapshotCache"]
