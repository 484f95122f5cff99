"""
Team, sport and division lookup tables for the ESPN-backed providers.
"""
from typing import Dict, Optional

from app.utils.helpers import normalize_name

# ESPN team IDs (college programs share one ID across sports)
ESPN_TEAM_IDS: Dict[str, int] = {
    "alabama": 333,
    "arizona": 12,
    "arizona state": 9,
    "arkansas": 8,
    "auburn": 2,
    "baylor": 239,
    "clemson": 228,
    "colorado": 38,
    "duke": 150,
    "florida": 57,
    "florida state": 52,
    "georgia": 61,
    "iowa": 2294,
    "kansas": 2305,
    "kansas state": 2306,
    "kentucky": 96,
    "lsu": 99,
    "miami": 2390,
    "michigan": 130,
    "mississippi state": 344,
    "missouri": 142,
    "nebraska": 158,
    "north carolina": 153,
    "notre dame": 87,
    "ohio state": 194,
    "oklahoma": 201,
    "oklahoma state": 197,
    "ole miss": 145,
    "oregon": 2483,
    "penn state": 213,
    "south carolina": 2579,
    "stanford": 24,
    "tcu": 2628,
    "tennessee": 2633,
    "texas": 251,
    "texas a&m": 245,
    "texas tech": 2641,
    "ucla": 26,
    "usc": 30,
    "utah": 254,
    "vanderbilt": 238,
    "washington": 264,
    "wisconsin": 275,
}

TEAM_ALIASES: Dict[str, str] = {
    "ou": "oklahoma",
    "sooners": "oklahoma",
    "okstate": "oklahoma state",
    "osu cowboys": "oklahoma state",
    "longhorns": "texas",
    "ut": "texas",
    "bama": "alabama",
    "crimson tide": "alabama",
    "tamu": "texas a&m",
    "aggies": "texas a&m",
    "buckeyes": "ohio state",
    "wolverines": "michigan",
    "dawgs": "georgia",
    "irish": "notre dame",
    "trojans": "usc",
    "ducks": "oregon",
    "vols": "tennessee",
    "noles": "florida state",
    "fsu": "florida state",
    "hurricanes": "miami",
    "canes": "miami",
    "gators": "florida",
    "horned frogs": "tcu",
    "red raiders": "texas tech",
    "mississippi": "ole miss",
    "unc": "north carolina",
    "tar heels": "north carolina",
}

# ESPN sport paths
SPORT_PATHS: Dict[str, Dict[str, str]] = {
    "football": {"path": "football/college-football", "name": "College Football"},
    "basketball": {"path": "basketball/mens-college-basketball", "name": "Men's College Basketball"},
    "womens-basketball": {"path": "basketball/womens-college-basketball", "name": "Women's College Basketball"},
    "baseball": {"path": "baseball/college-baseball", "name": "College Baseball"},
    "softball": {"path": "softball/college-softball", "name": "College Softball"},
}

DEFAULT_SPORT = "football"

SPORT_ALIASES: Dict[str, str] = {
    "cfb": "football",
    "college-football": "football",
    "cbb": "basketball",
    "mbb": "basketball",
    "mens-basketball": "basketball",
    "wbb": "womens-basketball",
}

# Multi-division NCAA coverage: sport -> division -> ESPN sport path
DIVISION_PATHS: Dict[str, Dict[str, str]] = {
    "football": {
        "fbs": "football/college-football",
        "fcs": "football/college-football",
        "d2": "football/college-football",
        "d3": "football/college-football",
    },
    "basketball": {
        "d1": "basketball/mens-college-basketball",
        "d2": "basketball/mens-college-basketball",
        "d3": "basketball/mens-college-basketball",
    },
    "baseball": {
        "d1": "baseball/college-baseball",
        "d2": "baseball/college-baseball",
        "d3": "baseball/college-baseball",
    },
    "softball": {
        "d1": "softball/college-softball",
        "d2": "softball/college-softball",
        "d3": "softball/college-softball",
    },
}

DEFAULT_DIVISION_PATH = "football/college-football"

# ESPN scoreboard "groups" parameter, unlocks the full division listing
DIVISION_GROUPS: Dict[str, Dict[str, str]] = {
    "football": {"fbs": "80", "fcs": "81"},
    "basketball": {"d1": "50"},
}


def resolve_team_name(team_name: str) -> Optional[str]:
    """Canonical team name for a user-supplied name or alias, or None."""
    key = normalize_name(team_name)
    if key in ESPN_TEAM_IDS:
        return key
    return TEAM_ALIASES.get(key)


def get_team_id(team_name: str) -> Optional[int]:
    """ESPN team ID for a team name or alias, or None if unknown."""
    canonical = resolve_team_name(team_name)
    if canonical is None:
        return None
    return ESPN_TEAM_IDS[canonical]


def get_sport_path(sport: Optional[str]) -> Dict[str, str]:
    """ESPN path and display name for a sport; unknown sports fall back to football."""
    key = normalize_name(sport or DEFAULT_SPORT)
    key = SPORT_ALIASES.get(key, key)
    return SPORT_PATHS.get(key, SPORT_PATHS[DEFAULT_SPORT])


def get_division_path(sport: Optional[str], division: Optional[str]) -> str:
    """ESPN path for a sport/division pair; unknown pairs fall back to FBS football."""
    sport_key = normalize_name(sport or DEFAULT_SPORT)
    division_key = normalize_name(division or "")
    return DIVISION_PATHS.get(sport_key, {}).get(division_key, DEFAULT_DIVISION_PATH)


def get_division_group(sport: Optional[str], division: Optional[str]) -> Optional[str]:
    """ESPN 'groups' value for a sport/division pair, if one is known."""
    sport_key = normalize_name(sport or DEFAULT_SPORT)
    division_key = normalize_name(division or "")
    return DIVISION_GROUPS.get(sport_key, {}).get(division_key)
