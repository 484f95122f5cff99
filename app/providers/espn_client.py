"""
ESPN site API client.
Real-time scores, schedules, scoreboards and polls with volatility-adaptive caching.
"""
import logging
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from app.cache import (
    classify,
    classify_scoreboard,
    get_cache_manager,
    make_cache_key,
)
from app.providers.http import fetch_json
from app.providers.selection import select_current_game
from app.providers.team_mapping import get_sport_path, get_team_id
from app.utils.helpers import dig, find_first
from config.settings import settings

load_dotenv()

logger = logging.getLogger("providers.espn")

PROVIDER = "espn"


class TeamNotFoundError(LookupError):
    """The requested team is not in the team mapping."""

    def __init__(self, team_name: str):
        super().__init__(f"Team not found: {team_name}")
        self.team_name = team_name


def _url(sport_path: str, *segments: Any) -> str:
    return "/".join([settings.espn_base_url.rstrip("/"), sport_path, *map(str, segments)])


def _resolve_team(team_name: str) -> int:
    team_id = get_team_id(team_name)
    if team_id is None:
        raise TeamNotFoundError(team_name)
    return team_id


def _parse_competitor(competitor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "id": dig(competitor, "id"),
        "name": dig(competitor, "team", "displayName"),
        "abbreviation": dig(competitor, "team", "abbreviation"),
        "logo": dig(competitor, "team", "logo"),
        "score": dig(competitor, "score"),
        "record": dig(competitor, "records", 0, "summary"),
        "rank": dig(competitor, "curatedRank", "current"),
    }


def parse_game_data(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalize a raw ESPN event into the uniform game record.

    Missing fields become None rather than failing the whole record.
    """
    competition = dig(event, "competitions", 0) or {}
    status = dig(event, "status") or dig(competition, "status") or {}
    competitors = competition.get("competitors")
    odds = dig(competition, "odds", 0)

    # Schedule scores come as {"value": 24.0, "displayValue": "24"}
    home = _parse_competitor(find_first(competitors, homeAway="home"))
    away = _parse_competitor(find_first(competitors, homeAway="away"))
    for side in (home, away):
        if isinstance(side["score"], dict):
            side["score"] = side["score"].get("displayValue")

    return {
        "id": dig(event, "id"),
        "name": dig(event, "name"),
        "shortName": dig(event, "shortName"),
        "date": dig(event, "date"),
        "status": {
            "state": dig(status, "type", "state"),  # 'pre', 'in', 'post'
            "detail": dig(status, "type", "detail"),
            "completed": dig(status, "type", "completed"),
            "period": dig(status, "period"),
            "clock": dig(status, "displayClock"),
        },
        "homeTeam": home,
        "awayTeam": away,
        "venue": {
            "name": dig(competition, "venue", "fullName"),
            "city": dig(competition, "venue", "address", "city"),
            "state": dig(competition, "venue", "address", "state"),
        },
        "broadcast": dig(competition, "broadcasts", 0, "names", 0),
        "odds": {
            "spread": odds.get("details"),
            "overUnder": odds.get("overUnder"),
        } if isinstance(odds, dict) else None,
    }


def _fetch_schedule(team_id: int, sport: str) -> Dict[str, Any]:
    """Fetch and normalize a team schedule straight from upstream."""
    sport_config = get_sport_path(sport)
    data = fetch_json(PROVIDER, _url(sport_config["path"], "teams", team_id, "schedule"))
    return {
        "team": dig(data, "team"),
        "events": [parse_game_data(event) for event in dig(data, "events", default=[])],
        "sport": sport_config["name"],
    }


def _schedule_key(team_id: int, sport: str) -> str:
    return make_cache_key(PROVIDER, "schedule", team_id, sport)


def get_team_schedule(
    team_name: str,
    sport: str = "football",
    force_refresh: bool = False,
) -> Dict[str, Any]:
    """
    Get a team's schedule, including scores for completed games.

    Raises:
        TeamNotFoundError: If the team is unknown
        UpstreamError: If ESPN cannot be reached
    """
    team_id = _resolve_team(team_name)
    manager = get_cache_manager(PROVIDER)

    schedule, _ = manager.fetch_with_cache(
        _schedule_key(team_id, sport),
        lambda: _fetch_schedule(team_id, sport),
        ttl=manager.ttl_for_resource("schedule"),
        force_refresh=force_refresh,
    )
    return schedule


def get_current_game(
    team_name: str,
    sport: str = "football",
    force_refresh: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Get the team's live game, else most recent result, else next game.

    Cache lifetime follows the selected game's state: one minute while
    live, six hours while upcoming, a day once final.

    Returns:
        Normalized game record, or None if the team has no games
    """
    team_id = _resolve_team(team_name)
    manager = get_cache_manager(PROVIDER)
    schedule_key = _schedule_key(team_id, sport)

    def fetch_fresh_schedule() -> Dict[str, Any]:
        schedule = _fetch_schedule(team_id, sport)
        # The schedule listing is refreshed as a side effect
        manager.store.put(schedule_key, schedule, manager.ttl_for_resource("schedule"))
        return schedule

    game, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "current-game", team_id, sport),
        fetch_fresh_schedule,
        classify=classify,
        select=lambda schedule: select_current_game(schedule.get("events")),
        force_refresh=force_refresh,
    )
    if game is None:
        logger.info(f"No current game for {team_name} ({sport})")
    return game


def get_scoreboard(
    sport: str = "football",
    date: Optional[str] = None,
    force_refresh: bool = False,
) -> Dict[str, Any]:
    """
    Get the scoreboard for a date (YYYYMMDD, default today).

    Cached for one minute while any game is live, fifteen minutes otherwise.
    """
    sport_config = get_sport_path(sport)
    manager = get_cache_manager(PROVIDER)

    def fetch() -> Dict[str, Any]:
        data = fetch_json(
            PROVIDER,
            _url(sport_config["path"], "scoreboard"),
            params={"dates": date},
        )
        events = [parse_game_data(event) for event in dig(data, "events", default=[])]
        live_count = sum(1 for e in events if e["status"]["state"] == "in")
        if live_count:
            logger.info(f"Scoreboard contains {live_count} LIVE games")
        return {"events": events, "sport": sport_config["name"], "date": date}

    scoreboard, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "scoreboard", sport, date or "today"),
        fetch,
        classify=classify_scoreboard,
        force_refresh=force_refresh,
    )
    return scoreboard


def get_rankings(sport: str = "football", force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """
    Get poll rankings (AP Top 25, Coaches Poll).

    Returns:
        Rankings per poll, or None if ESPN has none for the sport
    """
    sport_config = get_sport_path(sport)
    manager = get_cache_manager(PROVIDER)

    def fetch() -> Dict[str, Any]:
        data = fetch_json(PROVIDER, _url(sport_config["path"], "rankings"))
        return {
            "rankings": [
                {
                    "name": ranking.get("name"),
                    "type": ranking.get("type"),
                    "teams": [
                        {
                            "rank": rank.get("current"),
                            "team": dig(rank, "team", "displayName") or dig(rank, "team", "name"),
                            "record": rank.get("recordSummary"),
                            "points": rank.get("points"),
                        }
                        for rank in ranking.get("ranks") or []
                    ],
                }
                for ranking in dig(data, "rankings", default=[])
            ],
            "sport": sport_config["name"],
        }

    rankings, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "rankings", sport),
        fetch,
        ttl=manager.ttl_for_resource("rankings"),
        force_refresh=force_refresh,
    )
    if not rankings["rankings"]:
        return None
    return rankings
