"""
Unit tests for volatility classification.
"""
from app.cache import VolatilityClass, classify, classify_aggregate, classify_scoreboard
from app.cache.classifier import classify_collection, classify_event, event_state
from app.providers.espn_client import parse_game_data


def game(state):
    return {"status": {"state": state}}


# =============================================================================
# Single events
# =============================================================================

def test_in_progress_game_is_live():
    assert classify(game("in")) == VolatilityClass.LIVE


def test_final_game_is_completed():
    assert classify(game("post")) == VolatilityClass.COMPLETED


def test_scheduled_game_is_upcoming():
    assert classify(game("pre")) == VolatilityClass.UPCOMING


def test_unknown_state_code_is_upcoming():
    assert classify(game("postponed")) == VolatilityClass.UPCOMING


def test_raw_espn_event_shape(espn_event):
    assert classify(espn_event(1, "in")) == VolatilityClass.LIVE
    assert classify(espn_event(1, "post")) == VolatilityClass.COMPLETED


def test_normalized_espn_game_shape(espn_event):
    assert classify(parse_game_data(espn_event(1, "post"))) == VolatilityClass.COMPLETED


def test_completed_flag_without_state():
    assert classify({"status": {"type": {"completed": True}}}) == VolatilityClass.COMPLETED


def test_state_from_first_competition():
    record = {"competitions": [{"status": {"type": {"state": "in"}}}]}
    assert classify(record) == VolatilityClass.LIVE


def test_flat_ncaa_game_shapes():
    assert classify({"state": "post", "status": "Final"}) == VolatilityClass.COMPLETED
    assert classify({"isLive": True, "status": "2nd Quarter"}) == VolatilityClass.LIVE


def test_free_text_status():
    assert event_state({"status": "Final/OT"}) == "post"
    assert event_state({"status": "Halftime"}) == "in"
    assert event_state({"status": "Scheduled"}) == "pre"


# =============================================================================
# Unrecognized input
# =============================================================================

def test_unrecognized_shapes_default_to_live():
    for record in (None, 42, "final", {}, {"name": "no status here"}):
        assert classify(record) == VolatilityClass.LIVE


def test_unrecognized_is_never_static():
    assert classify({"unexpected": True}) != VolatilityClass.STATIC


def test_classify_event_returns_none_for_unknown_shape():
    assert classify_event({"foo": "bar"}) is None


# =============================================================================
# Collections
# =============================================================================

def test_any_live_member_makes_collection_live():
    events = [game("post")] * 9 + [game("in")]
    assert classify({"events": events}) == VolatilityClass.LIVE


def test_collection_majority_completed():
    events = [game("post"), game("post"), game("pre")]
    assert classify({"events": events}) == VolatilityClass.COMPLETED


def test_collection_majority_upcoming():
    events = [game("post"), game("pre"), game("pre")]
    assert classify(events) == VolatilityClass.UPCOMING


def test_collection_tie_takes_shorter_ttl_class():
    assert classify_collection([game("post"), game("pre")]) == VolatilityClass.UPCOMING


def test_empty_collection_is_upcoming():
    assert classify({"events": []}) == VolatilityClass.UPCOMING


def test_unclassifiable_member_makes_collection_live():
    assert classify({"games": [game("post"), {"junk": 1}]}) == VolatilityClass.LIVE


def test_scoreboard_with_one_live_game_is_live():
    events = [game("post")] * 9 + [game("in")]
    assert classify_scoreboard({"events": events}) == VolatilityClass.LIVE


def test_quiet_scoreboard_is_aggregate_mixed():
    events = [game("post")] * 9 + [game("pre")]
    assert classify_scoreboard({"events": events}) == VolatilityClass.AGGREGATE_MIXED


# =============================================================================
# Aggregates and purity
# =============================================================================

def test_aggregate_data_is_static_regardless_of_content():
    rankings = {"rankings": [{"name": "AP Top 25"}], "events": [game("in")]}
    assert classify_aggregate(rankings) == VolatilityClass.STATIC
    assert classify(rankings, aggregate=True) == VolatilityClass.STATIC


def test_classification_is_pure():
    record = {"events": [game("post"), game("in")]}
    snapshot = {"events": [dict(e) for e in record["events"]]}
    assert classify(record) == classify(record)
    assert record == snapshot
