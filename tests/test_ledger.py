"""Score ledger tests."""

from __future__ import annotations

from operator import attrgetter

import pytest

from shared.chat.events import Member
from shared.scoreboards.ledger import COUNTER_FIELDS, ScoreLedger, ScoreRecord


def test_ensure_member_creates_once_and_refreshes_name(alice: Member) -> None:
    ledger = ScoreLedger()
    record = ledger.ensure_member("c", alice)
    ledger.increment("c", alice, "calls_made")

    renamed = Member(member_id=alice.member_id, display_name="Alice B.")
    again = ledger.ensure_member("c", renamed)

    assert again is record
    assert again.display_name == "Alice B."
    assert again.calls_made == 1


def test_records_are_scoped_per_chat(alice: Member) -> None:
    ledger = ScoreLedger()
    ledger.increment("c1", alice, "polls_started")

    assert ledger.get("c1", alice.member_id).polls_started == 1
    assert ledger.get("c2", alice.member_id) is None


def test_increment_rejects_unknown_counter_and_negative_amount(alice: Member) -> None:
    ledger = ScoreLedger()
    with pytest.raises(KeyError):
        ledger.increment("c", alice, "naps_taken")
    with pytest.raises(ValueError):
        ledger.increment("c", alice, "calls_made", amount=-1)


def test_ranking_is_ascending_with_member_id_tie_break() -> None:
    ledger = ScoreLedger()
    zed = Member("9", "Zed")
    amy = Member("4", "Amy")
    max_ = Member("5", "Max")
    ledger.increment("c", zed, "fastest_votes", 2)
    ledger.increment("c", amy, "fastest_votes", 1)
    ledger.increment("c", max_, "fastest_votes", 1)

    rows = ledger.ranking("c", attrgetter("fastest_votes"))

    assert [(member_id, value) for member_id, _, value in rows] == [
        ("4", 1),
        ("5", 1),
        ("9", 2),
    ]


def test_snapshot_round_trip_keeps_names_and_counters(alice: Member, bob: Member) -> None:
    ledger = ScoreLedger()
    for offset, counter in enumerate(COUNTER_FIELDS, start=1):
        ledger.increment("c", alice, counter, offset)
    ledger.ensure_member("c", bob)

    restored = ScoreLedger.from_snapshot(ledger.snapshot())

    assert restored.get("c", alice.member_id) == ledger.get("c", alice.member_id)
    assert restored.get("c", bob.member_id) == ScoreRecord(display_name="Bob")


def test_from_snapshot_tolerates_malformed_entries() -> None:
    restored = ScoreLedger.from_snapshot(
        {
            "c": {
                "1": {"display_name": "Alice", "calls_made": "3", "slowest_votes": "x"},
                "2": "not a record",
            },
            "broken": [],
        }
    )

    record = restored.get("c", "1")
    assert record.calls_made == 3
    assert record.slowest_votes == 0
    assert restored.get("c", "2") is None
