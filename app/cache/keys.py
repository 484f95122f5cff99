"""
Cache key construction.

Keys are scoped as ``provider:resource:part...[:k=v...]`` so each provider
namespace stays collision-free and the same logical request always maps to
the same key.
"""
from typing import Any


def _normalize_part(value: Any) -> str:
    if isinstance(value, str):
        return value.strip().lower()
    return str(value)


def make_cache_key(provider: str, resource: str, *parts: Any, **params: Any) -> str:
    """
    Build a deterministic cache key.

    Args:
        provider: Provider namespace (e.g. "espn")
        resource: Resource type (e.g. "schedule", "current-game")
        *parts: Positional identifiers (team id, sport, date). None values are kept as "-"
        **params: Optional query parameters; None values are dropped, order is irrelevant

    Returns:
        Cache key string
    """
    segments = [_normalize_part(provider), _normalize_part(resource)]
    segments.extend("-" if part is None else _normalize_part(part) for part in parts)

    sorted_params = sorted((k, v) for k, v in params.items() if v is not None)
    segments.extend(f"{k}={_normalize_part(v)}" for k, v in sorted_params)

    return ":".join(segments)
