"""
Fetch-with-cache orchestration with static and volatility-adaptive TTLs.
"""
import threading
import logging
from typing import Any, Callable, Dict, Optional, Tuple

from .core import CacheEntry, CacheMeta, CacheSource, VolatilityClass
from .coalescer import RequestCoalescer
from .store import CacheStore, get_store
from .ttl_policies import FreshnessPolicy, get_freshness_policy

logger = logging.getLogger("cache.manager")

Classifier = Callable[[Any], VolatilityClass]

_local = threading.local()


class CacheManager:
    """
    The single entry point consumers use to read through a provider's cache.

    Two modes:
    - Static TTL: the caller knows the resource's volatility up front and
      passes ``ttl``.
    - Adaptive: the caller passes ``classify``; on every read the stored value
      is reclassified and checked against the TTL its current class maps to,
      so a game that went live expires in a minute and a game that finished
      is kept for a day, whatever was assumed when it was written.

    Upstream calls happen outside the store lock and are coalesced per key.
    A failed refresh propagates to the caller and leaves the existing entry
    untouched; expired data is never served as a fallback.
    """

    def __init__(
        self,
        store: CacheStore,
        policy: Optional[FreshnessPolicy] = None,
        domain: Optional[str] = None,
        max_age_seconds: Optional[float] = None,
        coalesce_timeout: float = 30.0,
    ):
        """
        Args:
            store: The provider namespace's cache store
            policy: Freshness policy (defaults to the process-wide one)
            domain: Policy domain (defaults to the store's namespace)
            max_age_seconds: Hard ceiling on entry age, whatever its class
            coalesce_timeout: Timeout for joining an in-flight refresh
        """
        self.store = store
        self.policy = policy or get_freshness_policy()
        self.domain = domain or store.namespace
        if max_age_seconds is not None:
            upcoming = self.policy.ttl_for(self.domain, VolatilityClass.UPCOMING)
            if max_age_seconds <= upcoming:
                raise ValueError(
                    f"max_age_seconds ({max_age_seconds}) must exceed the UPCOMING TTL "
                    f"for '{self.domain}' ({upcoming}s)"
                )
        self.max_age_seconds = max_age_seconds
        self._coalescer = RequestCoalescer(namespace=store.namespace, timeout=coalesce_timeout)

        self._stats_lock = threading.Lock()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "refreshes": 0,
            "errors": 0,
        }

    def ttl_for(self, volatility: VolatilityClass) -> float:
        """TTL for a volatility class in this manager's domain, capped by the ceiling."""
        return self._cap(self.policy.ttl_for(self.domain, volatility))

    def ttl_for_resource(self, resource: str) -> float:
        """TTL for a named resource in this manager's domain, capped by the ceiling."""
        return self._cap(self.policy.ttl_for_resource(self.domain, resource))

    def _cap(self, ttl: float) -> float:
        if self.max_age_seconds is not None:
            return min(ttl, self.max_age_seconds)
        return ttl

    def fetch_with_cache(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Any],
        ttl: Optional[float] = None,
        classify: Optional[Classifier] = None,
        select: Optional[Callable[[Any], Any]] = None,
        force_refresh: bool = False,
    ) -> Tuple[Any, CacheMeta]:
        """
        Return the cached value for ``cache_key`` if fresh, else refresh it.

        Args:
            cache_key: Key within this provider's namespace
            fetch_fn: Upstream call returning the base dataset
            ttl: Fixed TTL (static mode)
            classify: Volatility classifier (adaptive mode)
            select: Reduces the base dataset to the item of interest. A None
                selection is returned but not stored.
            force_refresh: Skip the lookup and always refresh

        Returns:
            (value, cache_meta) tuple

        Raises:
            ValueError: Unless exactly one of ``ttl`` and ``classify`` is given
            UpstreamError: When waiting on an in-flight refresh times out
            Exception: Any upstream failure from fetch_fn
        """
        if (ttl is None) == (classify is None):
            raise ValueError("fetch_with_cache needs exactly one of ttl or classify")

        entry = None if force_refresh else self.store.get(cache_key)

        if entry is not None:
            if classify is not None:
                volatility = classify(entry.value)
                effective_ttl = self.ttl_for(volatility)
            else:
                volatility = entry.volatility
                effective_ttl = self._cap(ttl)

            age = entry.age_seconds(self.store.clock())
            if age < effective_ttl:
                logger.debug(
                    f"CACHE HIT: {cache_key} [age={age:.1f}s, ttl={effective_ttl}s"
                    f"{', ' + volatility.value if volatility else ''}]"
                )
                self._count("hits")
                meta = self._make_meta(CacheSource.FRESH, entry, volatility, effective_ttl, age)
                _local.last_meta = meta
                return entry.value, meta

            logger.info(f"CACHE EXPIRED: {cache_key} [age={age:.1f}s, ttl={effective_ttl}s]")
            self._count("refreshes")
        else:
            logger.info(f"{'FORCE REFRESH' if force_refresh else 'CACHE MISS'}: {cache_key}")
            self._count("misses")

        def refresh() -> Tuple[Any, Optional[CacheEntry]]:
            data = fetch_fn()
            value = select(data) if select is not None else data
            if value is None and select is not None:
                logger.info(f"No item selected for {cache_key}; nothing cached")
                return None, None
            if classify is not None:
                volatility = classify(value)
                entry_ttl = self.ttl_for(volatility)
            else:
                volatility = None
                entry_ttl = self._cap(ttl)
            stored = self.store.put(cache_key, value, entry_ttl, volatility)
            logger.debug(
                f"Cached: {cache_key} (ttl={entry_ttl}s"
                f"{', ' + volatility.value if volatility else ''})"
            )
            return value, stored

        try:
            value, stored = self._coalescer.run(cache_key, refresh)
        except TimeoutError as e:
            from app.providers.http import UpstreamError

            self._count("errors")
            logger.warning(f"Timed out waiting on in-flight fetch for {cache_key}")
            raise UpstreamError(str(e), provider=self.store.namespace) from e
        except Exception as e:
            self._count("errors")
            logger.warning(f"Upstream fetch failed for {cache_key}: {e}")
            raise

        if stored is None:
            meta = CacheMeta(
                last_updated=self.store.clock().isoformat(),
                cache_source=CacheSource.UPSTREAM.value,
            )
        else:
            meta = self._make_meta(
                CacheSource.UPSTREAM, stored, stored.volatility, stored.ttl_seconds, 0.0
            )
        _local.last_meta = meta
        return value, meta

    def _make_meta(
        self,
        source: CacheSource,
        entry: CacheEntry,
        volatility: Optional[VolatilityClass],
        ttl: float,
        age: float,
    ) -> CacheMeta:
        """Create cache metadata for response."""
        return CacheMeta(
            last_updated=entry.stored_at.isoformat(),
            cache_source=source.value,
            volatility=volatility.value if volatility else None,
            ttl_seconds=ttl,
            age_seconds=age,
        )

    def _count(self, name: str) -> None:
        with self._stats_lock:
            self._stats[name] += 1

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        with self._stats_lock:
            stats = dict(self._stats)
        total_requests = stats["hits"] + stats["misses"] + stats["refreshes"]
        hit_rate = (stats["hits"] / total_requests * 100) if total_requests > 0 else 0
        return {
            **stats,
            **self.store.get_stats(),
            "hit_rate_percent": round(hit_rate, 1),
            "coalescer": self._coalescer.get_stats(),
        }


def get_last_cache_meta() -> Optional[CacheMeta]:
    """Metadata from the most recent cache access on this thread."""
    return getattr(_local, "last_meta", None)


# Global cache managers, one per provider namespace
_cache_managers: Dict[str, CacheManager] = {}
_cache_managers_lock = threading.Lock()


def get_cache_manager(namespace: str) -> CacheManager:
    """Get or create the global cache manager for a provider namespace."""
    with _cache_managers_lock:
        manager = _cache_managers.get(namespace)
        if manager is None:
            from config.settings import settings

            manager = CacheManager(
                get_store(namespace),
                max_age_seconds=settings.cache_max_age_seconds,
                coalesce_timeout=settings.coalesce_timeout_seconds,
            )
            _cache_managers[namespace] = manager
        return manager


def get_all_cache_stats() -> Dict[str, Any]:
    """Statistics for every provider namespace that has been used."""
    with _cache_managers_lock:
        managers = dict(_cache_managers)
    return {namespace: manager.get_stats() for namespace, manager in managers.items()}
