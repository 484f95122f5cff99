"""
In-memory cache stores, one per provider namespace.
"""
import threading
import logging
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .core import CacheEntry, VolatilityClass, utc_now

logger = logging.getLogger("cache.store")

PROVIDER_NAMESPACES = ("espn", "cfbd", "ncaa")


class CacheStore:
    """
    Keyed mapping from cache key to CacheEntry.

    Every operation holds the store lock only for the dict access itself, so
    reads and writes on one key are linearizable and no caller ever waits on
    upstream I/O. Expiry is lazy: entries are judged at read time, never swept.
    """

    def __init__(
        self,
        namespace: str,
        max_entries: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            namespace: Provider namespace this store belongs to
            max_entries: Optional LRU bound (None = unbounded)
            clock: Source of "now", replaceable in tests
        """
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.namespace = namespace
        self.max_entries = max_entries
        self.clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._evictions = 0

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` or None. Freshness is not checked here."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self.max_entries is not None:
                self._entries.move_to_end(key)
            return entry

    def put(
        self,
        key: str,
        value: Any,
        ttl: float,
        volatility: Optional[VolatilityClass] = None,
    ) -> CacheEntry:
        """Store ``value`` under ``key``, replacing any existing entry."""
        entry = CacheEntry(
            value=value,
            stored_at=self.clock(),
            ttl_seconds=ttl,
            volatility=volatility,
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    evicted, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug(f"[{self.namespace}] Evicted LRU entry: {evicted}")
        return entry

    def is_fresh(
        self,
        entry: CacheEntry,
        now: Optional[datetime] = None,
        ttl: Optional[float] = None,
    ) -> bool:
        """``now - stored_at < ttl``; ``ttl`` defaults to the write-time TTL."""
        return entry.is_fresh(now or self.clock(), ttl)

    def invalidate(self, key: str) -> bool:
        """
        Invalidate a specific cache entry.

        Returns:
            True if entry was found and removed
        """
        with self._lock:
            if key in self._entries:
                del self._entries[key]
                logger.info(f"[{self.namespace}] Invalidated cache: {key}")
                return True
            return False

    def clear(self) -> int:
        """
        Clear all cache entries.

        Returns:
            Number of entries cleared
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"[{self.namespace}] Cleared {count} cache entries")
        return count

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries.keys())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "namespace": self.namespace,
                "entries": len(self._entries),
                "max_entries": self.max_entries,
                "evictions": self._evictions,
            }


class CacheRegistry:
    """Holds one CacheStore per provider namespace."""

    def __init__(
        self,
        namespaces=PROVIDER_NAMESPACES,
        max_entries: Optional[int] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._max_entries = max_entries
        self._clock = clock
        self._stores: Dict[str, CacheStore] = {}
        self._lock = threading.Lock()
        for namespace in namespaces:
            self.store(namespace)

    def store(self, namespace: str) -> CacheStore:
        """Get the store for a namespace, creating it empty on first use."""
        with self._lock:
            store = self._stores.get(namespace)
            if store is None:
                store = CacheStore(namespace, max_entries=self._max_entries, clock=self._clock)
                self._stores[namespace] = store
            return store

    @property
    def namespaces(self) -> List[str]:
        with self._lock:
            return list(self._stores.keys())

    def clear_all(self) -> Dict[str, int]:
        """
        Drop every entry in every namespace.

        Returns:
            Number of entries cleared per namespace
        """
        with self._lock:
            stores = list(self._stores.values())
        cleared = {store.namespace: store.clear() for store in stores}
        logger.info(f"Cleared all caches: {cleared}")
        return cleared

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            stores = list(self._stores.values())
        return {store.namespace: store.get_stats() for store in stores}


# Global registry instance
_cache_registry: Optional[CacheRegistry] = None


def get_cache_registry() -> CacheRegistry:
    """Get or create the global cache registry."""
    global _cache_registry
    if _cache_registry is None:
        from config.settings import settings

        _cache_registry = CacheRegistry(max_entries=settings.cache_max_entries)
    return _cache_registry


def get_store(namespace: str) -> CacheStore:
    """Get the global store for a provider namespace."""
    return get_cache_registry().store(namespace)


def clear_all_caches() -> Dict[str, int]:
    """Operator-triggered reset of every provider namespace."""
    return get_cache_registry().clear_all()
