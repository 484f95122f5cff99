"""
Sports Data Hub - Main FastAPI Application
Multi-source college sports data (ESPN, CFBD, NCAA) for chat bots, served
through a freshness-aware in-memory cache.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.cache import clear_all_caches, get_all_cache_stats, get_last_cache_meta
from app.providers import cfbd_client, espn_client, ncaa_client
from app.providers.espn_client import TeamNotFoundError
from app.providers.http import UpstreamError
from app.utils.helpers import safe_int
from config.settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger("app")

# Version tracking
APP_VERSION = "2.0.0"
APP_NAME = "Sports Data Hub"

app = FastAPI(
    title=APP_NAME,
    description="Multi-source college sports data API",
    version=APP_VERSION,
)

_started_at = time.monotonic()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _with_meta(result: Dict[str, Any]) -> Dict[str, Any]:
    """Attach metadata from the cache access that produced ``result``."""
    meta = get_last_cache_meta()
    if meta:
        result["_meta"] = meta.to_dict()
    return result


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    logger.error(f"Upstream failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"error": str(exc), "upstream": exc.to_dict()})


@app.exception_handler(TeamNotFoundError)
async def team_not_found_handler(request: Request, exc: TeamNotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc)})


# ===== SERVICE =====

@app.get("/")
def index():
    """Server info and available endpoints."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "description": "Multi-source college sports data API",
        "sources": ["ESPN", "CollegeFootballData.com", "NCAA"],
        "endpoints": {
            "mcp": {"/mcp": "Bot tool endpoint (POST, requires Bearer token)"},
            "espn": ["/score", "/schedule", "/scoreboard", "/rankings"],
            "cfbd": [
                "/cfbd/recruiting", "/cfbd/talent", "/cfbd/stats",
                "/cfbd/betting", "/cfbd/ratings", "/cfbd/records",
            ],
            "ncaa": ["/ncaa/scoreboard", "/ncaa/rankings", "/ncaa/standings"],
            "utility": ["/health", "/cache/stats", "POST /clear-cache"],
        },
        "status": "operational",
        "timestamp": _timestamp(),
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "uptime": round(time.monotonic() - _started_at, 1),
        "timestamp": _timestamp(),
    }


@app.get("/cache/stats")
def cache_stats():
    """Get cache statistics per provider namespace."""
    return get_all_cache_stats()


@app.post("/clear-cache")
def clear_cache():
    """Clear every provider cache (manual invalidation)."""
    cleared = clear_all_caches()
    return {
        "message": "All caches cleared successfully",
        "cleared": cleared,
        "timestamp": _timestamp(),
    }


# ===== ESPN =====

@app.get("/score")
def get_score(
    team: str = Query(..., description="Team name or alias"),
    sport: str = Query("football"),
    forceRefresh: bool = Query(default=False, description="Bypass cache and fetch fresh data"),
):
    """Current game for a team: live, else most recent result, else next game."""
    game = espn_client.get_current_game(team, sport, force_refresh=forceRefresh)
    if not game:
        return {"message": f"No recent or upcoming games found for {team}", "team": team, "sport": sport}
    return _with_meta(dict(game))


@app.get("/schedule")
def get_schedule(
    team: str = Query(..., description="Team name or alias"),
    sport: str = Query("football"),
    limit: int = Query(10, ge=1, description="Max events"),
):
    """Team schedule."""
    schedule = espn_client.get_team_schedule(team, sport)
    result = dict(schedule)
    result["events"] = schedule["events"][:limit]
    return _with_meta(result)


@app.get("/scoreboard")
def get_scoreboard(
    sport: str = Query("football"),
    date: Optional[str] = Query(None, description="Date (YYYYMMDD), default today"),
):
    """All games for a date."""
    return _with_meta(dict(espn_client.get_scoreboard(sport, date)))


@app.get("/rankings")
def get_rankings(
    sport: str = Query("football"),
    top: int = Query(25, ge=1, description="Teams per poll"),
):
    """Poll rankings."""
    rankings = espn_client.get_rankings(sport)
    if not rankings:
        return {"message": "No rankings available"}
    result = dict(rankings)
    result["rankings"] = [
        {**ranking, "teams": ranking["teams"][:top]} for ranking in rankings["rankings"]
    ]
    return _with_meta(result)


# ===== CFBD =====

def _cfbd_response(result: Any, message: str):
    if not result:
        return {"message": message}
    if isinstance(result, dict):
        return _with_meta(dict(result))
    return result


@app.get("/cfbd/recruiting")
def cfbd_recruiting(team: str = Query(...), year: Optional[int] = Query(None)):
    """Recruiting class ranking."""
    return _cfbd_response(cfbd_client.get_recruiting(team, year), f"No recruiting data found for {team}")


@app.get("/cfbd/talent")
def cfbd_talent(team: str = Query(...), year: Optional[int] = Query(None)):
    """Team talent composite."""
    return _cfbd_response(cfbd_client.get_team_talent(team, year), f"No talent data found for {team}")


@app.get("/cfbd/stats")
def cfbd_stats(team: str = Query(...), year: Optional[int] = Query(None)):
    """Advanced team statistics."""
    return _cfbd_response(cfbd_client.get_advanced_stats(team, year), f"No stats found for {team}")


@app.get("/cfbd/betting")
def cfbd_betting(team: str = Query(...), year: Optional[int] = Query(None), week: Optional[int] = Query(None)):
    """Betting lines."""
    return _cfbd_response(cfbd_client.get_betting_lines(team, year, week), f"No betting lines found for {team}")


@app.get("/cfbd/ratings")
def cfbd_ratings(team: str = Query(...), year: Optional[int] = Query(None)):
    """SP+ ratings."""
    return _cfbd_response(cfbd_client.get_sp_ratings(team, year), f"No SP+ ratings found for {team}")


@app.get("/cfbd/records")
def cfbd_records(team: str = Query(...), year: Optional[int] = Query(None)):
    """Team records."""
    return _cfbd_response(cfbd_client.get_team_records(team, year), f"No records found for {team}")


# ===== NCAA =====

@app.get("/ncaa/scoreboard")
def ncaa_scoreboard(
    sport: str = Query("football"),
    division: str = Query("fbs"),
    date: Optional[str] = Query(None, description="Date (YYYYMMDD), default today"),
):
    """Scoreboard for any sport and division."""
    scoreboard = ncaa_client.get_ncaa_scoreboard(sport, division, date)
    if not scoreboard:
        return {"message": f"No {sport} games found for {division.upper()}"}
    return _with_meta(dict(scoreboard))


@app.get("/ncaa/rankings")
def ncaa_rankings(
    sport: str = Query("football"),
    division: str = Query("fbs"),
    poll: str = Query("ap"),
):
    """Poll rankings for any sport and division."""
    rankings = ncaa_client.get_ncaa_rankings(sport, division, poll)
    if not rankings:
        return {"message": "No rankings available"}
    return _with_meta(dict(rankings))


@app.get("/ncaa/standings")
def ncaa_standings(conference: str = Query(...), sport: str = Query("football")):
    """Conference standings."""
    standings = ncaa_client.get_conference_standings(conference, sport)
    if not standings:
        return {"message": f"Conference \"{conference}\" not found"}
    return _with_meta(dict(standings))


# ===== BOT TOOL ENDPOINT =====

class McpRequest(BaseModel):
    """Request body for the bot tool endpoint."""
    tool: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


def _team(params: Dict[str, Any]) -> str:
    return params.get("team") or "oklahoma"


def _sport(params: Dict[str, Any]) -> str:
    return params.get("sport") or "football"


def _year(params: Dict[str, Any]) -> Optional[int]:
    return safe_int(params.get("year"))


def _tool_score(params: Dict[str, Any]) -> Any:
    game = espn_client.get_current_game(_team(params), _sport(params))
    return game or f"No recent games found for {_team(params)}"


def _tool_schedule(params: Dict[str, Any]) -> Any:
    schedule = dict(espn_client.get_team_schedule(_team(params), _sport(params)))
    schedule["events"] = schedule["events"][: safe_int(params.get("limit"), 5)]
    return schedule


def _tool_ncaa_scoreboard(params: Dict[str, Any]) -> Any:
    division = str(params.get("division") or "fbs")
    scoreboard = ncaa_client.get_ncaa_scoreboard(_sport(params), division, params.get("date"))
    return scoreboard or f"No {_sport(params)} games found for {division.upper()}"


def _tool_ncaa_rankings(params: Dict[str, Any]) -> Any:
    rankings = ncaa_client.get_ncaa_rankings(
        _sport(params), str(params.get("division") or "fbs"), str(params.get("poll") or "ap")
    )
    return rankings or "No NCAA rankings available"


TOOLS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "get_score": _tool_score,
    "get_schedule": _tool_schedule,
    "get_scoreboard": lambda p: espn_client.get_scoreboard(_sport(p), p.get("date")),
    "get_rankings": lambda p: espn_client.get_rankings(_sport(p)) or "No rankings available",
    "get_recruiting": lambda p: cfbd_client.get_recruiting(_team(p), _year(p))
        or f"No recruiting data found for {_team(p)}",
    "get_talent": lambda p: cfbd_client.get_team_talent(_team(p), _year(p))
        or f"No talent data found for {_team(p)}",
    "get_stats": lambda p: cfbd_client.get_advanced_stats(_team(p), _year(p))
        or f"No stats found for {_team(p)}",
    "get_betting": lambda p: cfbd_client.get_betting_lines(_team(p), _year(p), safe_int(p.get("week")))
        or f"No betting lines found for {_team(p)}",
    "get_ratings": lambda p: cfbd_client.get_sp_ratings(_team(p), _year(p))
        or f"No SP+ ratings found for {_team(p)}",
    "get_records": lambda p: cfbd_client.get_team_records(_team(p), _year(p))
        or f"No records found for {_team(p)}",
    "ncaa_scoreboard": _tool_ncaa_scoreboard,
    "ncaa_rankings": _tool_ncaa_rankings,
}

TOOL_ALIASES: Dict[str, str] = {
    "score": "get_score",
    "schedule": "get_schedule",
    "scoreboard": "get_scoreboard",
    "rankings": "get_rankings",
    "recruiting": "get_recruiting",
    "talent": "get_talent",
    "stats": "get_stats",
    "advanced_stats": "get_stats",
    "betting": "get_betting",
    "betting_lines": "get_betting",
    "ratings": "get_ratings",
    "sp_ratings": "get_ratings",
    "records": "get_records",
}


@app.post("/mcp")
def mcp(request: McpRequest, authorization: Optional[str] = Header(None)):
    """
    Bot tool endpoint.

    Requires ``Authorization: Bearer <MCP_API_KEY>``. Body: ``{"tool": ..., "parameters": {...}}``.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return JSONResponse(status_code=401, content={
            "success": False,
            "error": "Missing or invalid authorization header. Use: Authorization: Bearer YOUR_API_KEY",
        })
    if authorization[len("Bearer "):] != settings.mcp_api_key:
        return JSONResponse(status_code=401, content={"success": False, "error": "Invalid API key"})

    if not request.tool:
        return JSONResponse(status_code=400, content={
            "success": False,
            "error": "Tool name required in request body",
        })

    tool_name = TOOL_ALIASES.get(request.tool, request.tool)
    handler = TOOLS.get(tool_name)
    if handler is None:
        return JSONResponse(status_code=400, content={
            "success": False,
            "error": f"Unknown tool: {request.tool}",
            "availableTools": list(TOOLS.keys()),
        })

    logger.info(f"MCP request: {tool_name} {request.parameters}")
    try:
        result = handler(request.parameters)
    except (UpstreamError, TeamNotFoundError) as e:
        logger.error(f"MCP tool {tool_name} failed: {e}")
        return JSONResponse(status_code=502 if isinstance(e, UpstreamError) else 404, content={
            "success": False,
            "error": str(e),
            "tool": request.tool,
        })

    return {
        "success": True,
        "tool": request.tool,
        "parameters": request.parameters,
        "result": result,
        "timestamp": _timestamp(),
    }
