"""Contracts (protocols) shared between application services and adapters."""

from city_cycling.domain.contracts.history_cache import HistoryCacheProtocol
from city_cycling.domain.contracts.snapshot_cache import SnapshotCacheProtocol

__all__ = ["HistoryCacheProtocol", "SnapshotCacheProtocol"]
