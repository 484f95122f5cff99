"""
TTL configuration per provider domain and volatility class.
"""
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .core import VolatilityClass

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR

DEFAULT_DOMAIN = "default"

# Baseline TTLs (seconds). Domains override magnitudes, never the ordering.
DEFAULT_TTLS: Dict[VolatilityClass, int] = {
    VolatilityClass.LIVE: 1 * MINUTE,             # live game, maximum real-time
    VolatilityClass.UPCOMING: 6 * HOUR,           # schedules rarely change
    VolatilityClass.COMPLETED: 24 * HOUR,         # final scores never change
    VolatilityClass.AGGREGATE_MIXED: 15 * MINUTE, # scoreboard, no live games
    VolatilityClass.STATIC: 24 * HOUR,            # rankings update weekly
}

# Per-domain configuration
TTL_CONFIG: Dict[str, Dict[str, Any]] = {
    DEFAULT_DOMAIN: {
        "ttls": {},
        "resources": {},
    },
    "espn": {
        "ttls": {},
        "resources": {
            "schedule": 24 * HOUR,
            "rankings": 24 * HOUR,
        },
    },
    "cfbd": {
        # Advanced stats and ratings update intraday during the season
        "ttls": {VolatilityClass.STATIC: 6 * HOUR},
        "resources": {
            "betting": 1 * HOUR,
            "records": 24 * HOUR,
        },
    },
    "ncaa": {
        "ttls": {VolatilityClass.AGGREGATE_MIXED: 5 * MINUTE},
        "resources": {
            "rankings": 24 * HOUR,
            "standings": 6 * HOUR,
        },
    },
}


def validate_ordering(domain: str, ttls: Mapping[VolatilityClass, float]) -> None:
    """
    Ensure TTLs shrink as real-world change rate grows.

    Raises:
        ValueError: If LIVE < UPCOMING < COMPLETED, LIVE < STATIC or
            LIVE < AGGREGATE_MIXED does not hold
    """
    missing = [vc.name for vc in VolatilityClass if vc not in ttls]
    if missing:
        raise ValueError(f"TTL table for '{domain}' is missing {', '.join(missing)}")

    live = ttls[VolatilityClass.LIVE]
    upcoming = ttls[VolatilityClass.UPCOMING]
    completed = ttls[VolatilityClass.COMPLETED]

    if not 0 < live < upcoming < completed:
        raise ValueError(
            f"TTL table for '{domain}' must satisfy 0 < LIVE < UPCOMING < COMPLETED "
            f"(got {live}, {upcoming}, {completed})"
        )
    if not live < ttls[VolatilityClass.STATIC]:
        raise ValueError(f"TTL table for '{domain}' must satisfy LIVE < STATIC")
    if not live < ttls[VolatilityClass.AGGREGATE_MIXED]:
        raise ValueError(f"TTL table for '{domain}' must satisfy LIVE < AGGREGATE_MIXED")


@dataclass(frozen=True)
class DomainPolicy:
    """TTLs for one provider domain."""
    domain: str
    ttls: Mapping[VolatilityClass, float]
    resource_ttls: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        validate_ordering(self.domain, self.ttls)
        # Freeze the tables; the policy is fixed at process start
        object.__setattr__(self, "ttls", MappingProxyType(dict(self.ttls)))
        object.__setattr__(self, "resource_ttls", MappingProxyType(dict(self.resource_ttls)))


class FreshnessPolicy:
    """
    Maps (domain, volatility class) to a TTL in seconds.

    Unknown domains fall back to the default table.
    """

    def __init__(self, domains: Mapping[str, DomainPolicy]):
        if DEFAULT_DOMAIN not in domains:
            raise ValueError(f"Freshness policy requires a '{DEFAULT_DOMAIN}' domain")
        self._domains = MappingProxyType(dict(domains))

    @property
    def domains(self) -> Mapping[str, DomainPolicy]:
        return self._domains

    def _domain(self, domain: Optional[str]) -> DomainPolicy:
        return self._domains.get(domain or DEFAULT_DOMAIN, self._domains[DEFAULT_DOMAIN])

    def ttl_for(self, domain: Optional[str], volatility: VolatilityClass) -> float:
        """TTL for a volatility class within a domain."""
        return self._domain(domain).ttls[volatility]

    def ttl_for_resource(self, domain: Optional[str], resource: str) -> float:
        """
        TTL for a named resource whose volatility is known before fetching.

        Resources without an explicit entry use the domain's STATIC TTL.
        """
        policy = self._domain(domain)
        if resource in policy.resource_ttls:
            return policy.resource_ttls[resource]
        return policy.ttls[VolatilityClass.STATIC]


def build_freshness_policy(
    overrides: Optional[Mapping[VolatilityClass, Optional[float]]] = None,
    config: Optional[Dict[str, Dict[str, Any]]] = None,
) -> FreshnessPolicy:
    """
    Build the freshness policy from TTL_CONFIG.

    Args:
        overrides: Global per-class TTLs applied on top of every domain (None values ignored)
        config: Domain configuration (defaults to TTL_CONFIG)

    Returns:
        A validated FreshnessPolicy
    """
    config = config if config is not None else TTL_CONFIG
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    domains = {}
    for name, domain_config in config.items():
        ttls = dict(DEFAULT_TTLS)
        ttls.update(domain_config.get("ttls", {}))
        ttls.update(overrides)
        domains[name] = DomainPolicy(
            domain=name,
            ttls=ttls,
            resource_ttls=domain_config.get("resources", {}),
        )
    if DEFAULT_DOMAIN not in domains:
        domains[DEFAULT_DOMAIN] = DomainPolicy(
            domain=DEFAULT_DOMAIN, ttls={**DEFAULT_TTLS, **overrides}
        )
    return FreshnessPolicy(domains)


_freshness_policy: Optional[FreshnessPolicy] = None


def get_freshness_policy() -> FreshnessPolicy:
    """Get or create the process-wide freshness policy from settings."""
    global _freshness_policy
    if _freshness_policy is None:
        from config.settings import settings

        _freshness_policy = build_freshness_policy({
            VolatilityClass.LIVE: settings.ttl_live_seconds,
            VolatilityClass.UPCOMING: settings.ttl_upcoming_seconds,
            VolatilityClass.COMPLETED: settings.ttl_completed_seconds,
            VolatilityClass.AGGREGATE_MIXED: settings.ttl_mixed_seconds,
            VolatilityClass.STATIC: settings.ttl_static_seconds,
        })
    return _freshness_policy
