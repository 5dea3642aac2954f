"""Round tracker tests."""

from __future__ import annotations

import pytest

from core.rounds import ENTRANTS, SECONDS, NoActiveRound, RoundTracker
from helpers import ENTRANTS as ENTRANT_OPTIONS, SECONDS as SECOND_OPTIONS


def test_start_round_indexes_both_polls() -> None:
    tracker = RoundTracker()
    state = tracker.start_round("c", ENTRANT_OPTIONS, SECOND_OPTIONS, "e1", "s1")

    assert tracker.find_by_poll("e1") == (state, ENTRANTS)
    assert tracker.find_by_poll("s1") == (state, SECONDS)
    assert state.entrants.marker == "XL"
    assert state.first_vote_recorded is False
    assert state.call_made is False


def test_new_round_replaces_previous_and_unindexes_its_polls() -> None:
    tracker = RoundTracker()
    tracker.start_round("c", ENTRANT_OPTIONS, SECOND_OPTIONS, "e1", "s1")
    fresh = tracker.start_round("c", ENTRANT_OPTIONS, SECOND_OPTIONS, "e2", "s2")

    assert tracker.get_round("c") is fresh
    assert tracker.find_by_poll("e1") is None
    assert tracker.find_by_poll("s1") is None
    assert tracker.find_by_poll("e2") == (fresh, ENTRANTS)


def test_rounds_are_independent_per_chat() -> None:
    tracker = RoundTracker()
    first = tracker.start_round("c1", ENTRANT_OPTIONS, SECOND_OPTIONS, "e1", "s1")
    tracker.start_round("c2", ENTRANT_OPTIONS, SECOND_OPTIONS, "e2", "s2")

    assert tracker.get_round("c1") is first
    assert tracker.find_by_poll("e1") == (first, ENTRANTS)


def test_start_round_requires_distinct_poll_ids() -> None:
    with pytest.raises(ValueError):
        RoundTracker().start_round("c", ENTRANT_OPTIONS, SECOND_OPTIONS, "p", "p")


def test_start_round_requires_a_dish_besides_the_marker() -> None:
    with pytest.raises(ValueError):
        RoundTracker().start_round("c", ["XL"], SECOND_OPTIONS, "e1", "s1")


def test_mark_call_made_is_idempotent(alice) -> None:
    tracker = RoundTracker()
    state = tracker.start_round("c", ENTRANT_OPTIONS, SECOND_OPTIONS, "e1", "s1")
    state.last_voting_member = alice

    assert tracker.mark_call_made("c") == alice
    assert tracker.mark_call_made("c") is None
    assert state.call_made is True


def test_mark_call_made_without_round() -> None:
    tracker = RoundTracker()
    assert tracker.mark_call_made("c") is None
    with pytest.raises(NoActiveRound):
        tracker.require_round("c")
