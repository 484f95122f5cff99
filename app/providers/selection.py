"""
Item selection: reduce a fetched listing to the item a lookup asks for.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from app.cache.classifier import classify_event
from app.cache.core import VolatilityClass

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)
_LATEST = datetime.max.replace(tzinfo=timezone.utc)


def parse_event_date(value: Any) -> Optional[datetime]:
    """Parse ESPN-style ISO dates ('2025-09-06T23:00Z'); None if unparseable."""
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def select_current_game(events: Optional[Iterable[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """
    Pick the game a "current game" lookup should show.

    Priority: a live game, else the most recent completed game, else the
    nearest upcoming game. Events without a recognizable state are skipped.

    Returns:
        The selected event, or None when there is no game at all
    """
    live: List[Dict[str, Any]] = []
    completed: List[Dict[str, Any]] = []
    upcoming: List[Dict[str, Any]] = []

    for event in events or []:
        volatility = classify_event(event)
        if volatility == VolatilityClass.LIVE:
            live.append(event)
        elif volatility == VolatilityClass.COMPLETED:
            completed.append(event)
        elif volatility == VolatilityClass.UPCOMING:
            upcoming.append(event)

    if live:
        return live[0]
    if completed:
        return max(completed, key=lambda e: parse_event_date(e.get("date")) or _EARLIEST)
    if upcoming:
        return min(upcoming, key=lambda e: parse_event_date(e.get("date")) or _LATEST)
    return None
