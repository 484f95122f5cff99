"""
Utility helper functions for safe data handling.
"""
from typing import Any, Iterable, Optional


def safe_lower(value: Any) -> str:
    """
    Safely lowercase a value, handling None.

    Args:
        value: Any value to lowercase

    Returns:
        Lowercased string or empty string if None
    """
    if value is None:
        return ""
    return str(value).lower()


def normalize_name(value: Any) -> str:
    """Lowercase, trim and collapse internal whitespace for lookups."""
    return " ".join(safe_lower(value).split())


def safe_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    Safely convert value to int, handling None and invalid values.

    Args:
        value: Any value to convert
        default: Default if conversion fails

    Returns:
        Integer or default
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def dig(data: Any, *path: Any, default: Any = None) -> Any:
    """
    Walk nested dicts/lists, returning ``default`` at the first missing step.

    Integer path steps index into lists: ``dig(event, "competitions", 0, "venue")``.
    """
    current = data
    for step in path:
        if isinstance(step, int):
            if not isinstance(current, list) or not -len(current) <= step < len(current):
                return default
            current = current[step]
        else:
            if not isinstance(current, dict):
                return default
            current = current.get(step)
        if current is None:
            return default
    return current


def find_first(items: Optional[Iterable[Any]], **match: Any) -> Optional[dict]:
    """First dict in ``items`` whose fields equal every ``match`` value, or None."""
    for item in items or []:
        if isinstance(item, dict) and all(item.get(k) == v for k, v in match.items()):
            return item
    return None
