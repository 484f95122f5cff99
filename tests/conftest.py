"""
Shared fixtures: a controllable clock, sample ESPN payloads, and cache resets.
"""
from datetime import datetime, timedelta, timezone

import pytest

from app.cache import clear_all_caches


class FakeClock:
    """Clock whose "now" only moves when told to."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 10, 4, 18, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(autouse=True)
def reset_caches():
    """Every test starts from cold caches."""
    clear_all_caches()
    yield
    clear_all_caches()


def make_espn_event(event_id, state, date="2025-10-04T19:30Z", home="Oklahoma", away="Texas",
                    home_score="0", away_score="0"):
    """Raw ESPN event as returned by the schedule and scoreboard endpoints."""
    return {
        "id": str(event_id),
        "name": f"{away} at {home}",
        "shortName": f"{away[:3].upper()} @ {home[:3].upper()}",
        "date": date,
        "status": {
            "period": 2 if state == "in" else 0,
            "displayClock": "7:12",
            "type": {
                "state": state,
                "detail": {"pre": "Sat, Oct 4", "in": "7:12 - 2nd", "post": "Final"}[state],
                "completed": state == "post",
            },
        },
        "competitions": [
            {
                "venue": {"fullName": "Cotton Bowl", "address": {"city": "Dallas", "state": "TX"}},
                "competitors": [
                    {
                        "id": "201",
                        "homeAway": "home",
                        "score": home_score,
                        "team": {"displayName": home, "abbreviation": home[:3].upper()},
                        "records": [{"summary": "4-1"}],
                        "curatedRank": {"current": 12},
                    },
                    {
                        "id": "251",
                        "homeAway": "away",
                        "score": away_score,
                        "team": {"displayName": away, "abbreviation": away[:3].upper()},
                    },
                ],
                "broadcasts": [{"names": ["ABC"]}],
            }
        ],
    }


@pytest.fixture
def espn_event():
    return make_espn_event
