"""
Tests for the ESPN client: parsing, current-game selection and caching.
"""
import pytest

from app.cache import get_store
from app.providers import espn_client
from app.providers.espn_client import TeamNotFoundError, parse_game_data
from app.providers.http import UpstreamError


class FakeUpstream:
    """Replaces fetch_json; serves canned payloads by URL suffix."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, provider, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params))
        for suffix, payload in self.routes.items():
            if url.endswith(suffix):
                if isinstance(payload, Exception):
                    raise payload
                return payload
        raise AssertionError(f"unexpected URL {url}")


@pytest.fixture
def upstream(monkeypatch):
    def install(routes):
        fake = FakeUpstream(routes)
        monkeypatch.setattr(espn_client, "fetch_json", fake)
        return fake
    return install


# =============================================================================
# Parsing
# =============================================================================

def test_parse_game_data(espn_event):
    game = parse_game_data(espn_event(401, "in", home_score="14", away_score="7"))

    assert game["id"] == "401"
    assert game["status"]["state"] == "in"
    assert game["status"]["detail"] == "7:12 - 2nd"
    assert game["homeTeam"]["name"] == "Oklahoma"
    assert game["homeTeam"]["score"] == "14"
    assert game["homeTeam"]["rank"] == 12
    assert game["awayTeam"]["score"] == "7"
    assert game["venue"]["city"] == "Dallas"
    assert game["broadcast"] == "ABC"
    assert game["odds"] is None


def test_parse_game_data_schedule_score_objects(espn_event):
    event = espn_event(401, "post")
    event["competitions"][0]["competitors"][0]["score"] = {"value": 24.0, "displayValue": "24"}
    assert parse_game_data(event)["homeTeam"]["score"] == "24"


def test_parse_game_data_tolerates_missing_fields():
    game = parse_game_data({"id": "1"})
    assert game["homeTeam"]["name"] is None
    assert game["status"]["state"] is None
    assert game["broadcast"] is None


# =============================================================================
# Current game
# =============================================================================

def test_current_game_prefers_live(upstream, espn_event):
    fake = upstream({
        "/teams/201/schedule": {
            "team": {"displayName": "Oklahoma Sooners"},
            "events": [
                espn_event(1, "post", date="2025-09-27T19:30Z"),
                espn_event(2, "in", date="2025-10-04T19:30Z"),
            ],
        }
    })

    game = espn_client.get_current_game("Oklahoma")

    assert game["id"] == "2"
    assert len(fake.calls) == 1


def test_current_game_is_served_from_cache(upstream, espn_event):
    fake = upstream({"/teams/201/schedule": {"events": [espn_event(1, "post")]}})

    first = espn_client.get_current_game("oklahoma")
    second = espn_client.get_current_game("Sooners")

    assert first == second
    assert len(fake.calls) == 1


def test_current_game_refreshes_schedule_listing(upstream, espn_event):
    fake = upstream({"/teams/201/schedule": {"events": [espn_event(1, "pre")]}})

    espn_client.get_current_game("Oklahoma")
    schedule = espn_client.get_team_schedule("Oklahoma")

    assert [e["id"] for e in schedule["events"]] == ["1"]
    assert len(fake.calls) == 1


def test_team_with_no_games_returns_none_and_caches_nothing(upstream):
    fake = upstream({"/teams/333/schedule": {"events": []}})

    assert espn_client.get_current_game("Alabama") is None
    assert espn_client.get_current_game("Alabama") is None

    assert len(fake.calls) == 2
    assert not any("current-game" in key for key in get_store("espn").keys())


def test_unknown_team_raises_before_any_upstream_call(upstream):
    fake = upstream({})
    with pytest.raises(TeamNotFoundError, match="Team not found: Nowhere State"):
        espn_client.get_current_game("Nowhere State")
    assert fake.calls == []


def test_upstream_failure_propagates(upstream):
    upstream({"/teams/201/schedule": UpstreamError("Service Unavailable", status=503, provider="espn")})
    with pytest.raises(UpstreamError):
        espn_client.get_current_game("Oklahoma")


# =============================================================================
# Schedule, scoreboard, rankings
# =============================================================================

def test_team_schedule_is_cached(upstream, espn_event):
    fake = upstream({"/teams/251/schedule": {"events": [espn_event(1, "post"), espn_event(2, "pre")]}})

    schedule = espn_client.get_team_schedule("Texas")
    espn_client.get_team_schedule("longhorns")

    assert schedule["sport"] == "College Football"
    assert len(schedule["events"]) == 2
    assert len(fake.calls) == 1


def test_force_refresh_refetches_schedule(upstream, espn_event):
    fake = upstream({"/teams/251/schedule": {"events": [espn_event(1, "post")]}})
    espn_client.get_team_schedule("Texas")
    espn_client.get_team_schedule("Texas", force_refresh=True)
    assert len(fake.calls) == 2


def test_scoreboard_for_date(upstream, espn_event):
    fake = upstream({
        "/football/college-football/scoreboard": {
            "events": [espn_event(1, "post"), espn_event(2, "in")],
        }
    })

    scoreboard = espn_client.get_scoreboard("football", date="20251004")
    espn_client.get_scoreboard("football", date="20251004")

    assert scoreboard["date"] == "20251004"
    assert len(scoreboard["events"]) == 2
    assert fake.calls[0][1] == {"dates": "20251004"}
    assert len(fake.calls) == 1


def test_scoreboards_for_different_dates_are_cached_separately(upstream):
    fake = upstream({"/scoreboard": {"events": []}})
    espn_client.get_scoreboard(date="20251004")
    espn_client.get_scoreboard(date="20251011")
    assert len(fake.calls) == 2


def test_rankings(upstream):
    upstream({
        "/football/college-football/rankings": {
            "rankings": [
                {
                    "name": "AP Top 25",
                    "type": "ap",
                    "ranks": [
                        {"current": 1, "team": {"displayName": "Ohio State"}, "recordSummary": "5-0", "points": 1600},
                    ],
                }
            ]
        }
    })

    rankings = espn_client.get_rankings("football")

    assert rankings["rankings"][0]["name"] == "AP Top 25"
    assert rankings["rankings"][0]["teams"][0] == {
        "rank": 1,
        "team": "Ohio State",
        "record": "5-0",
        "points": 1600,
    }


def test_no_rankings_returns_none(upstream):
    upstream({"/rankings": {"rankings": []}})
    assert espn_client.get_rankings("softball") is None
