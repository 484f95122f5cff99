"""
Core cache data structures.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from enum import Enum


def utc_now() -> datetime:
    """Current UTC time (timezone-aware)."""
    return datetime.now(timezone.utc)


class VolatilityClass(Enum):
    """How often a data item can change in the real world."""
    LIVE = "live"                          # game in progress
    UPCOMING = "upcoming"                  # scheduled, not started
    COMPLETED = "completed"                # final score, never changes again
    AGGREGATE_MIXED = "aggregate_mixed"    # date scoreboard with no live games
    STATIC = "static"                      # rankings, records, season stats


class CacheSource(Enum):
    """Source of returned data."""
    FRESH = "fresh"       # Within TTL
    UPSTREAM = "upstream" # Fetched from API


@dataclass(frozen=True)
class CacheEntry:
    """
    A cached value and the moment it was stored.

    Entries are never mutated; a refresh stores a new entry under the same key.
    ``ttl_seconds`` and ``volatility`` record the assumption in force at write
    time. Adaptive lookups recompute the TTL from the value instead.
    """
    value: Any
    stored_at: datetime
    ttl_seconds: float
    volatility: Optional[VolatilityClass] = None

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds since the value was stored."""
        now = now or utc_now()
        return (now - self.stored_at).total_seconds()

    def is_fresh(self, now: Optional[datetime] = None, ttl: Optional[float] = None) -> bool:
        """Check if the entry is within ``ttl`` (defaults to its write-time TTL)."""
        if ttl is None:
            ttl = self.ttl_seconds
        return self.age_seconds(now) < ttl


@dataclass
class CacheMeta:
    """
    Metadata about a cache access, included in API responses.
    """
    last_updated: str  # ISO timestamp of the stored value
    cache_source: str  # "fresh" or "upstream"
    volatility: Optional[str] = None
    ttl_seconds: Optional[float] = None
    age_seconds: Optional[float] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON response."""
        result = {
            "lastUpdated": self.last_updated,
            "cacheSource": self.cache_source,
        }
        if self.volatility:
            result["_debug"] = {
                "volatility": self.volatility,
                "ttl": self.ttl_seconds,
                "age": round(self.age_seconds, 1) if self.age_seconds is not None else None,
            }
        return result
