"""
Freshness-aware caching: volatility classification, per-domain TTLs,
per-provider stores, and fetch-with-cache orchestration.
"""
from .core import CacheEntry, CacheMeta, CacheSource, VolatilityClass
from .classifier import (
    classify,
    classify_aggregate,
    classify_collection,
    classify_event,
    classify_scoreboard,
)
from .ttl_policies import (
    TTL_CONFIG,
    FreshnessPolicy,
    build_freshness_policy,
    get_freshness_policy,
)
from .keys import make_cache_key
from .store import CacheStore, CacheRegistry, get_cache_registry, get_store, clear_all_caches
from .coalescer import RequestCoalescer
from .manager import CacheManager, get_cache_manager, get_last_cache_meta, get_all_cache_stats

__all__ = [
    # Core types
    "CacheEntry",
    "CacheMeta",
    "CacheSource",
    "VolatilityClass",
    # Classification
    "classify",
    "classify_aggregate",
    "classify_collection",
    "classify_event",
    "classify_scoreboard",
    # TTL policies
    "TTL_CONFIG",
    "FreshnessPolicy",
    "build_freshness_policy",
    "get_freshness_policy",
    # Keys
    "make_cache_key",
    # Stores
    "CacheStore",
    "CacheRegistry",
    "get_cache_registry",
    "get_store",
    "clear_all_caches",
    # Coalescing
    "RequestCoalescer",
    # Manager
    "CacheManager",
    "get_cache_manager",
    "get_last_cache_meta",
    "get_all_cache_stats",
]
