"""
Tests for request coalescing.
"""
import threading

import pytest

from app.cache import RequestCoalescer


def test_single_caller_runs_fetch():
    coalescer = RequestCoalescer("espn")
    assert coalescer.run("k", lambda: 42) == 42
    assert coalescer.active_requests == 0


def test_joiners_share_leader_result():
    coalescer = RequestCoalescer("espn")
    started = threading.Event()
    release = threading.Event()
    calls = []

    def fetch():
        calls.append(1)
        started.set()
        release.wait(timeout=5)
        return "shared"

    results = []
    leader = threading.Thread(target=lambda: results.append(coalescer.run("k", fetch)))
    leader.start()
    started.wait(timeout=5)

    joiners = [threading.Thread(target=lambda: results.append(coalescer.run("k", fetch))) for _ in range(3)]
    for t in joiners:
        t.start()
    while coalescer.get_stats()["coalesced"] < 3:
        threading.Event().wait(0.01)
    release.set()
    for t in [leader, *joiners]:
        t.join(timeout=5)

    assert results == ["shared"] * 4
    assert len(calls) == 1


def test_errors_reach_every_caller():
    coalescer = RequestCoalescer("cfbd")
    started = threading.Event()
    release = threading.Event()
    errors = []

    def fetch():
        started.set()
        release.wait(timeout=5)
        raise RuntimeError("upstream down")

    def call():
        try:
            coalescer.run("k", fetch)
        except RuntimeError as e:
            errors.append(str(e))

    leader = threading.Thread(target=call)
    leader.start()
    started.wait(timeout=5)
    joiner = threading.Thread(target=call)
    joiner.start()
    while coalescer.get_stats()["coalesced"] < 1:
        threading.Event().wait(0.01)
    release.set()
    leader.join(timeout=5)
    joiner.join(timeout=5)

    assert errors == ["upstream down", "upstream down"]


def test_joiner_times_out():
    coalescer = RequestCoalescer("ncaa", timeout=0.05)
    started = threading.Event()
    release = threading.Event()

    def fetch():
        started.set()
        release.wait(timeout=5)
        return "late"

    leader = threading.Thread(target=coalescer.run, args=("k", fetch))
    leader.start()
    started.wait(timeout=5)
    try:
        with pytest.raises(TimeoutError):
            coalescer.run("k", fetch)
    finally:
        release.set()
        leader.join(timeout=5)
