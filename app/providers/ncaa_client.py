"""
NCAA multi-division client.
Scoreboards, polls and conference standings for every NCAA sport ESPN covers.
No API key required.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from app.cache import classify_scoreboard, get_cache_manager, make_cache_key
from app.providers.http import fetch_json
from app.providers.team_mapping import get_division_group, get_division_path
from app.utils.helpers import dig, find_first, normalize_name
from config.settings import settings

logger = logging.getLogger("providers.ncaa")

PROVIDER = "ncaa"


def _url(sport_path: str, resource: str) -> str:
    return f"{settings.ncaa_base_url.rstrip('/')}/{sport_path}/{resource}"


def _today() -> str:
    return datetime.now().strftime("%Y%m%d")


def _parse_team(competitor: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "name": dig(competitor, "team", "displayName"),
        "shortName": dig(competitor, "team", "shortDisplayName"),
        "abbreviation": dig(competitor, "team", "abbreviation"),
        "score": dig(competitor, "score"),
        "record": dig(competitor, "records", 0, "summary"),
        "conference": dig(competitor, "team", "conferenceId"),
    }


def parse_ncaa_game(event: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize a scoreboard event into the flat NCAA game record."""
    competition = dig(event, "competitions", 0) or {}
    status = competition.get("status") or dig(event, "status") or {}
    competitors = competition.get("competitors")
    state = dig(status, "type", "state")

    return {
        "id": dig(event, "id"),
        "name": dig(event, "name"),
        "date": dig(event, "date"),
        "state": state,
        "status": dig(status, "type", "description"),
        "isLive": state == "in",
        "period": dig(status, "period"),
        "clock": dig(status, "displayClock"),
        "homeTeam": _parse_team(find_first(competitors, homeAway="home")),
        "awayTeam": _parse_team(find_first(competitors, homeAway="away")),
        "venue": dig(competition, "venue", "fullName"),
        "broadcast": dig(competition, "broadcasts", 0, "names", 0),
    }


def get_ncaa_scoreboard(
    sport: str = "football",
    division: str = "fbs",
    date: Optional[str] = None,
    force_refresh: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Get the scoreboard for a sport and division on a date (YYYYMMDD, default today).

    Cached for one minute while any game is live, five minutes otherwise.

    Returns:
        Scoreboard with games, or None if no games were found
    """
    date_str = date or _today()
    sport_path = get_division_path(sport, division)
    manager = get_cache_manager(PROVIDER)

    def fetch() -> Dict[str, Any]:
        data = fetch_json(
            PROVIDER,
            _url(sport_path, "scoreboard"),
            params={"dates": date_str, "groups": get_division_group(sport, division)},
        )
        return {
            "sport": sport,
            "division": division.upper(),
            "date": date_str,
            "games": [parse_ncaa_game(event) for event in dig(data, "events", default=[])],
        }

    scoreboard, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "scoreboard", sport, division, date_str),
        fetch,
        classify=classify_scoreboard,
        force_refresh=force_refresh,
    )
    if not scoreboard["games"]:
        logger.info(f"No {sport} games found for {division.upper()} on {date_str}")
        return None
    return scoreboard


def _select_poll(rankings: List[Dict[str, Any]], poll: str) -> Dict[str, Any]:
    """The poll whose name matches ``poll``; the first poll (AP) otherwise."""
    wanted = normalize_name(poll).replace("-", " ")
    if wanted not in ("ap", "associated press"):
        for ranking in rankings:
            if wanted in normalize_name(ranking.get("name")):
                return ranking
    return rankings[0]


def get_ncaa_rankings(
    sport: str = "football",
    division: str = "fbs",
    poll: str = "ap",
    force_refresh: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Get a poll (AP by default) for a sport and division.

    Returns:
        The poll with ranked teams, or None if no rankings are available
    """
    sport_path = get_division_path(sport, division)
    manager = get_cache_manager(PROVIDER)

    def fetch() -> Optional[Dict[str, Any]]:
        data = fetch_json(PROVIDER, _url(sport_path, "rankings"))
        rankings = [r for r in dig(data, "rankings", default=[]) if isinstance(r, dict)]
        if not rankings:
            return None
        ranking = _select_poll(rankings, poll)
        return {
            "sport": sport,
            "division": division.upper(),
            "poll": ranking.get("name"),
            "week": ranking.get("week"),
            "season": dig(ranking, "season", "year") or ranking.get("season"),
            "teams": [
                {
                    "rank": rank.get("current"),
                    "previousRank": rank.get("previous"),
                    "team": dig(rank, "team", "displayName") or dig(rank, "team", "name"),
                    "abbreviation": dig(rank, "team", "abbreviation"),
                    "record": rank.get("recordSummary"),
                    "points": rank.get("points"),
                    "firstPlaceVotes": rank.get("firstPlaceVotes"),
                }
                for rank in ranking.get("ranks") or []
            ],
        }

    result, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "rankings", sport, division, poll),
        fetch,
        ttl=manager.ttl_for_resource("rankings"),
        force_refresh=force_refresh,
    )
    return result


def _stat(entry: Dict[str, Any], name: str) -> Optional[str]:
    stat = find_first(dig(entry, "stats"), name=name)
    return stat.get("displayValue") if stat else None


def get_conference_standings(
    conference: str,
    sport: str = "football",
    force_refresh: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Get standings for the conference whose name contains ``conference``.

    The full standings listing is cached once per sport; the conference is
    picked out of it on every call.

    Returns:
        Conference standings, or None if the conference is not found
    """
    sport_path = get_division_path(sport, "fbs" if normalize_name(sport) == "football" else "d1")
    manager = get_cache_manager(PROVIDER)

    children, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, "standings", sport),
        lambda: dig(fetch_json(PROVIDER, _url(sport_path, "standings")), "children", default=[]),
        ttl=manager.ttl_for_resource("standings"),
        force_refresh=force_refresh,
    )

    wanted = normalize_name(conference)
    conference_data = next(
        (c for c in children or [] if isinstance(c, dict) and wanted in normalize_name(c.get("name"))),
        None,
    )
    if conference_data is None:
        logger.info(f"Conference '{conference}' not found")
        return None

    return {
        "conference": conference_data.get("name"),
        "standings": [
            {
                "team": dig(entry, "team", "displayName"),
                "record": _stat(entry, "overall"),
                "conferenceRecord": _stat(entry, "vs. Conf."),
                "streak": _stat(entry, "streak"),
            }
            for entry in dig(conference_data, "standings", "entries", default=[])
        ],
    }
