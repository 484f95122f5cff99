"""
CollegeFootballData.com (CFBD) API client.
Advanced analytics, recruiting, betting lines and talent metrics.
An API key is optional for some endpoints: https://collegefootballdata.com
"""
import logging
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from app.cache import get_cache_manager, make_cache_key
from app.providers.http import UpstreamError, fetch_json
from app.utils.helpers import dig, normalize_name
from config.settings import settings

load_dotenv()

logger = logging.getLogger("providers.cfbd")

PROVIDER = "cfbd"


def _get_headers() -> dict:
    """Get API authentication headers."""
    headers = {"Accept": "application/json"}
    if settings.cfbd_api_key:
        headers["Authorization"] = f"Bearer {settings.cfbd_api_key}"
    return headers


def _fetch(endpoint: str, params: Dict[str, Any]) -> Any:
    try:
        return fetch_json(
            PROVIDER,
            f"{settings.cfbd_base_url.rstrip('/')}{endpoint}",
            params=params,
            headers=_get_headers(),
        )
    except UpstreamError as e:
        if e.status == 401:
            raise UpstreamError(
                "CFBD API key required. Get one free at https://collegefootballdata.com",
                status=401,
                provider=PROVIDER,
            ) from e
        raise


def _make_request(
    resource: str,
    endpoint: str,
    params: Dict[str, Any],
    force_refresh: bool = False,
) -> Any:
    """
    Fetch a CFBD endpoint through the cache.

    Every CFBD resource is aggregate season data, so TTLs are fixed up front:
    the domain's STATIC TTL unless the resource has its own (betting lines
    move intraday).
    """
    manager = get_cache_manager(PROVIDER)
    data, _ = manager.fetch_with_cache(
        make_cache_key(PROVIDER, resource, **params),
        lambda: _fetch(endpoint, params),
        ttl=manager.ttl_for_resource(resource),
        force_refresh=force_refresh,
    )
    return data


def _first_row(data: Any) -> Optional[Dict[str, Any]]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


def _year(year: Optional[int]) -> int:
    return year or settings.current_year


def get_recruiting(team_name: str, year: Optional[int] = None, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """Get a team's recruiting class ranking."""
    year = _year(year)
    row = _first_row(_make_request(
        "recruiting", "/recruiting/teams", {"year": year, "team": team_name}, force_refresh
    ))
    if row is None:
        return None

    return {
        "year": year,
        "team": row.get("team"),
        "rank": row.get("rank"),
        "points": row.get("points"),
        "commits": row.get("commits") or 0,
        "avgRating": row.get("avgRating") or 0,
        "avgStars": row.get("avgStars") or 0,
    }


def get_team_talent(team_name: str, year: Optional[int] = None, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """
    Get a team's talent composite and its national rank.

    The talent endpoint lists every school, so one cache entry per year serves all teams.
    """
    year = _year(year)
    data = _make_request("talent", "/talent", {"year": year}, force_refresh)
    if not isinstance(data, list) or not data:
        return None

    wanted = normalize_name(team_name)
    for index, row in enumerate(data):
        if isinstance(row, dict) and normalize_name(row.get("school")) == wanted:
            return {
                "year": year,
                "team": row.get("school"),
                "talent": row.get("talent"),
                "rank": index + 1,
            }
    return None


_ADVANCED_FIELDS = (
    "plays",
    "drives",
    "ppa",  # Predicted Points Added per play
    "successRate",
    "explosiveness",
    "powerSuccess",
    "stuffRate",
    "lineYards",
    "secondLevelYards",
    "openFieldYards",
)


def get_advanced_stats(team_name: str, year: Optional[int] = None, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """Get advanced season stats (EPA, success rate, explosiveness, havoc)."""
    year = _year(year)
    row = _first_row(_make_request(
        "advanced-stats", "/stats/season/advanced", {"year": year, "team": team_name}, force_refresh
    ))
    if row is None:
        return None

    offense = row.get("offense") or {}
    defense = row.get("defense") or {}
    return {
        "year": year,
        "team": row.get("team"),
        "offense": {name: offense.get(name) for name in _ADVANCED_FIELDS},
        "defense": {
            **{name: defense.get(name) for name in _ADVANCED_FIELDS},
            "havoc": defense.get("havoc"),  # TFLs, sacks, PBUs, INTs
        },
    }


def get_betting_lines(
    team_name: str,
    year: Optional[int] = None,
    week: Optional[int] = None,
    force_refresh: bool = False,
) -> Optional[List[Dict[str, Any]]]:
    """Get betting lines for a team's games, optionally for a single week."""
    year = _year(year)
    data = _make_request(
        "betting", "/lines", {"year": year, "team": team_name, "week": week}, force_refresh
    )
    if not isinstance(data, list) or not data:
        return None

    return [
        {
            "id": game.get("id"),
            "season": game.get("season"),
            "week": game.get("week"),
            "seasonType": game.get("seasonType"),
            "startDate": game.get("startDate"),
            "homeTeam": game.get("homeTeam"),
            "awayTeam": game.get("awayTeam"),
            "homeScore": game.get("homeScore"),
            "awayScore": game.get("awayScore"),
            "lines": [
                {
                    "provider": line.get("provider"),
                    "spread": line.get("spread"),
                    "formattedSpread": line.get("formattedSpread"),
                    "overUnder": line.get("overUnder"),
                    "overUnderOpen": line.get("overUnderOpen"),
                    "homeMoneyline": line.get("homeMoneyline"),
                    "awayMoneyline": line.get("awayMoneyline"),
                }
                for line in game.get("lines") or []
            ],
        }
        for game in data
        if isinstance(game, dict)
    ]


def _rating(row: Dict[str, Any], unit: str) -> Dict[str, Any]:
    return {
        "rating": dig(row, unit, "rating"),
        "ranking": dig(row, unit, "ranking"),
    }


def get_sp_ratings(team_name: str, year: Optional[int] = None, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """Get SP+ ratings."""
    year = _year(year)
    row = _first_row(_make_request(
        "sp-ratings", "/ratings/sp", {"year": year, "team": team_name}, force_refresh
    ))
    if row is None:
        return None

    return {
        "year": year,
        "team": row.get("team"),
        "conference": row.get("conference"),
        "rating": row.get("rating"),
        "ranking": row.get("ranking"),
        "secondOrderWins": row.get("secondOrderWins"),
        "sos": row.get("sos"),  # Strength of Schedule
        "offense": _rating(row, "offense"),
        "defense": _rating(row, "defense"),
        "specialTeams": _rating(row, "specialTeams"),
    }


def _split(row: Dict[str, Any], name: str) -> Dict[str, Any]:
    return {
        "games": dig(row, name, "games"),
        "wins": dig(row, name, "wins"),
        "losses": dig(row, name, "losses"),
        "ties": dig(row, name, "ties"),
    }


def get_team_records(team_name: str, year: Optional[int] = None, force_refresh: bool = False) -> Optional[Dict[str, Any]]:
    """Get overall, conference, home and away records."""
    year = _year(year)
    row = _first_row(_make_request(
        "records", "/records", {"year": year, "team": team_name}, force_refresh
    ))
    if row is None:
        return None

    return {
        "year": year,
        "team": row.get("team"),
        "conference": row.get("conference"),
        "division": row.get("division"),
        "total": _split(row, "total"),
        "conferenceGames": _split(row, "conferenceGames"),
        "homeGames": _split(row, "homeGames"),
        "awayGames": _split(row, "awayGames"),
    }
