"""
Volatility classification of fetched records.

Pure functions: a record goes in, a VolatilityClass comes out. A record whose
shape is not recognized is LIVE, the shortest-lived class.
"""
from typing import Any, Iterable, Optional

from .core import VolatilityClass

LIVE_STATES = ("in",)
COMPLETED_STATES = ("post",)
UPCOMING_STATES = ("pre",)

# Free-text status descriptions seen on feeds that carry no state code
LIVE_DESCRIPTIONS = ("in progress", "halftime", "end of period", "overtime", "delayed")
COMPLETED_DESCRIPTIONS = ("final", "completed", "canceled", "cancelled", "forfeit")

COLLECTION_FIELDS = ("events", "games")


def _description_state(description: str) -> str:
    text = description.strip().lower()
    if any(token in text for token in COMPLETED_DESCRIPTIONS):
        return "post"
    if any(token in text for token in LIVE_DESCRIPTIONS):
        return "in"
    return "pre"


def event_state(record: Any) -> Optional[str]:
    """
    Extract the lifecycle state ('pre', 'in', 'post') of a single event.

    Understands the normalized game shape (``status.state``), the raw ESPN
    event shape (``status.type.state``, falling back to the first
    competition's status), and flat NCAA game records (``state`` /
    ``isLive`` / free-text ``status``). Returns None if no state is present.
    """
    if not isinstance(record, dict):
        return None

    status = record.get("status")
    if isinstance(status, dict):
        status_type = status.get("type") or {}
        state = status.get("state") or status_type.get("state")
        if state:
            return str(state).lower()
        if status.get("completed") or status_type.get("completed"):
            return "post"

    state = record.get("state")
    if state:
        return str(state).lower()

    if record.get("isLive") is True:
        return "in"

    competitions = record.get("competitions") or []
    if competitions and isinstance(competitions[0], dict):
        nested = event_state({"status": competitions[0].get("status")})
        if nested:
            return nested

    if isinstance(status, str) and status.strip():
        return _description_state(status)

    return None


def classify_event(record: Any) -> Optional[VolatilityClass]:
    """Classify a single event, or None if it has no recognizable state."""
    state = event_state(record)
    if state is None:
        return None
    if state in LIVE_STATES:
        return VolatilityClass.LIVE
    if state in COMPLETED_STATES:
        return VolatilityClass.COMPLETED
    return VolatilityClass.UPCOMING


def _collection_members(record: Any) -> Optional[list]:
    if isinstance(record, list):
        return record
    if isinstance(record, dict):
        for field_name in COLLECTION_FIELDS:
            members = record.get(field_name)
            if isinstance(members, list):
                return members
    return None


def classify_collection(events: Iterable[Any]) -> VolatilityClass:
    """
    Classify a listing of events as a whole.

    Any live (or unclassifiable) member makes the whole collection LIVE.
    Otherwise the majority wins between COMPLETED and UPCOMING, and a tie
    goes to UPCOMING, the shorter-lived of the two.
    """
    completed = 0
    upcoming = 0
    for event in events:
        volatility = classify_event(event)
        if volatility is None or volatility == VolatilityClass.LIVE:
            return VolatilityClass.LIVE
        if volatility == VolatilityClass.COMPLETED:
            completed += 1
        else:
            upcoming += 1

    if completed > upcoming:
        return VolatilityClass.COMPLETED
    return VolatilityClass.UPCOMING


def classify_aggregate(record: Any) -> VolatilityClass:
    """Rankings, records and season statistics change at most weekly."""
    return VolatilityClass.STATIC


def classify(record: Any, aggregate: bool = False) -> VolatilityClass:
    """
    Derive the volatility class of a fetched record.

    Args:
        record: A single event, a collection (list or dict with 'events'/'games'),
            or an aggregate dataset
        aggregate: True when the caller knows the record is aggregate season data

    Returns:
        VolatilityClass; LIVE when the shape is not recognized
    """
    if aggregate:
        return classify_aggregate(record)

    members = _collection_members(record)
    if members is not None:
        return classify_collection(members)

    volatility = classify_event(record)
    if volatility is None:
        return VolatilityClass.LIVE
    return volatility


def classify_scoreboard(record: Any) -> VolatilityClass:
    """
    Classify a date scoreboard.

    LIVE when at least one game is in progress; otherwise AGGREGATE_MIXED,
    since a quiet scoreboard for a date can still gain a live game.
    """
    if classify(record) == VolatilityClass.LIVE:
        return VolatilityClass.LIVE
    return VolatilityClass.AGGREGATE_MIXED
