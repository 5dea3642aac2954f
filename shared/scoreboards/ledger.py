"""
Score ledger.

Durable per-(chat, member) counters accumulated across lunch rounds.

The ledger itself performs no locking and no I/O. Callers mutate it
inside the application lock (see core.context) and hand snapshots to
the persistence collaborator after the lock is released.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, List, Optional

from shared.chat.events import Member

# Nested plain mapping: chat_id -> member_id -> record document
LedgerSnapshot = Dict[str, Dict[str, Dict[str, Any]]]

COUNTER_FIELDS = (
    "polls_started",
    "calls_made",
    "oversized_dishes",
    "fastest_votes",
    "slowest_votes",
    "retracted_votes",
    "out_of_time_votes",
    "items_brought",
)


@dataclass
class ScoreRecord:
    """Counters for one member in one chat. Counters never decrease."""

    display_name: str
    polls_started: int = 0
    calls_made: int = 0
    oversized_dishes: int = 0
    fastest_votes: int = 0
    slowest_votes: int = 0
    retracted_votes: int = 0
    out_of_time_votes: int = 0
    items_brought: int = 0

    def to_document(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_document(cls, payload: Dict[str, Any], *, fallback_name: str) -> "ScoreRecord":
        """
        Build a record from a stored mapping.

        Unknown keys are ignored; missing or malformed counters read as 0.
        """
        record = cls(display_name=str(payload.get("display_name") or fallback_name))
        for name in COUNTER_FIELDS:
            raw = payload.get(name, 0)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                value = 0
            setattr(record, name, max(0, value))
        return record


ScoreProjection = Callable[[ScoreRecord], int]


class ScoreLedger:
    """
    In-memory mapping (chat_id, member_id) -> ScoreRecord.

    Records are created lazily on first interaction and never removed.
    """

    def __init__(self) -> None:
        self._chats: Dict[str, Dict[str, ScoreRecord]] = {}

    # ------------------------------------------------------------------
    # Record access
    # ------------------------------------------------------------------

    def ensure_member(self, chat_id: str, member: Member) -> ScoreRecord:
        """
        Return the member's record, creating it if needed.

        The stored display name is refreshed to the latest one seen.
        """
        members = self._chats.setdefault(str(chat_id), {})
        record = members.get(member.member_id)
        if record is None:
            record = ScoreRecord(display_name=member.display_name)
            members[member.member_id] = record
        elif member.display_name and record.display_name != member.display_name:
            record.display_name = member.display_name
        return record

    def get(self, chat_id: str, member_id: str) -> Optional[ScoreRecord]:
        return self._chats.get(str(chat_id), {}).get(str(member_id))

    def chats(self) -> List[str]:
        return list(self._chats.keys())

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def increment(self, chat_id: str, member: Member, counter: str, amount: int = 1) -> int:
        """Add a non-negative amount to one counter and return the new value."""
        if counter not in COUNTER_FIELDS:
            raise KeyError(f"Unknown counter: {counter}")
        if amount < 0:
            raise ValueError("Counters are monotonic; amount must be >= 0")

        record = self.ensure_member(chat_id, member)
        value = getattr(record, counter) + amount
        setattr(record, counter, value)
        return value

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def ranking(
        self,
        chat_id: str,
        projection: ScoreProjection,
    ) -> List[tuple[str, ScoreRecord, int]]:
        """
        Rows (member_id, record, value) sorted ascending by value.

        Equal values are ordered by member id so output is stable.
        """
        rows = [
            (member_id, record, int(projection(record)))
            for member_id, record in self._chats.get(str(chat_id), {}).items()
        ]
        rows.sort(key=lambda row: (row[2], row[0]))
        return rows

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Deep, plain-data copy suitable for JSON encoding."""
        return {
            chat_id: {
                member_id: record.to_document()
                for member_id, record in members.items()
            }
            for chat_id, members in self._chats.items()
        }

    @classmethod
    def from_snapshot(cls, snapshot: Optional[LedgerSnapshot]) -> "ScoreLedger":
        ledger = cls()
        if not isinstance(snapshot, dict):
            return ledger

        for chat_id, members in snapshot.items():
            if not isinstance(members, dict):
                continue
            chat = ledger._chats.setdefault(str(chat_id), {})
            for member_id, payload in members.items():
                if not isinstance(payload, dict):
                    continue
                chat[str(member_id)] = ScoreRecord.from_document(
                    payload, fallback_name=str(member_id)
                )
        return ledger


__all__ = [
    "COUNTER_FIELDS",
    "LedgerSnapshot",
    "ScoreLedger",
    "ScoreProjection",
    "ScoreRecord",
]
