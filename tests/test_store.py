"""
Unit tests for cache stores and the per-provider registry.
"""
import threading

import pytest

from app.cache import CacheRegistry, CacheStore, VolatilityClass


@pytest.fixture
def store(clock):
    return CacheStore("espn", clock=clock)


def test_get_missing_key_returns_none(store):
    assert store.get("espn:rankings:football") is None


def test_put_then_get(store, clock):
    entry = store.put("k", {"a": 1}, ttl=60, volatility=VolatilityClass.LIVE)
    assert store.get("k") is entry
    assert entry.value == {"a": 1}
    assert entry.stored_at == clock.now
    assert entry.ttl_seconds == 60
    assert entry.volatility == VolatilityClass.LIVE


def test_put_overwrites(store):
    store.put("k", "old", ttl=60)
    store.put("k", "new", ttl=60)
    assert store.get("k").value == "new"
    assert len(store) == 1


def test_entries_are_immutable(store):
    entry = store.put("k", "v", ttl=60)
    with pytest.raises(AttributeError):
        entry.value = "changed"


def test_is_fresh_boundary(store, clock):
    entry = store.put("k", "v", ttl=60)
    clock.advance(59.9)
    assert store.is_fresh(entry)
    clock.advance(0.1)
    assert not store.is_fresh(entry)


def test_is_fresh_with_explicit_ttl(store, clock):
    entry = store.put("k", "v", ttl=60)
    clock.advance(120)
    assert store.is_fresh(entry, ttl=24 * 60 * 60)


def test_invalidate(store):
    store.put("k", "v", ttl=60)
    assert store.invalidate("k") is True
    assert store.invalidate("k") is False
    assert store.get("k") is None


def test_clear_returns_count(store):
    store.put("a", 1, ttl=60)
    store.put("b", 2, ttl=60)
    assert store.clear() == 2
    assert len(store) == 0


def test_lru_bound_evicts_least_recently_used(clock):
    store = CacheStore("ncaa", max_entries=2, clock=clock)
    store.put("a", 1, ttl=60)
    store.put("b", 2, ttl=60)
    store.get("a")  # "b" is now least recently used
    store.put("c", 3, ttl=60)
    assert set(store.keys()) == {"a", "c"}
    assert store.get_stats()["evictions"] == 1


def test_max_entries_must_be_positive():
    with pytest.raises(ValueError):
        CacheStore("espn", max_entries=0)


def test_concurrent_writes_to_different_keys(store):
    def writer(prefix):
        for i in range(200):
            store.put(f"{prefix}:{i}", i, ttl=60)

    threads = [threading.Thread(target=writer, args=(p,)) for p in ("a", "b", "c", "d")]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store) == 800


# =============================================================================
# Registry
# =============================================================================

def test_registry_has_one_store_per_provider():
    registry = CacheRegistry()
    assert set(registry.namespaces) == {"espn", "cfbd", "ncaa"}
    assert registry.store("espn") is registry.store("espn")
    assert registry.store("espn") is not registry.store("cfbd")


def test_same_key_in_different_namespaces_does_not_collide():
    registry = CacheRegistry()
    registry.store("espn").put("rankings", "espn-value", ttl=60)
    registry.store("ncaa").put("rankings", "ncaa-value", ttl=60)
    assert registry.store("espn").get("rankings").value == "espn-value"
    assert registry.store("ncaa").get("rankings").value == "ncaa-value"


def test_clear_all_empties_every_namespace():
    registry = CacheRegistry()
    registry.store("espn").put("a", 1, ttl=60)
    registry.store("cfbd").put("b", 2, ttl=60)
    registry.store("cfbd").put("c", 3, ttl=60)

    cleared = registry.clear_all()

    assert cleared == {"espn": 1, "cfbd": 2, "ncaa": 0}
    assert all(len(registry.store(ns)) == 0 for ns in registry.namespaces)
