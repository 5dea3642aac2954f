"""
Lunch round data model.

A round is one ordering cycle for a chat: two linked multi-select polls
(entrants and seconds), the per-member vote ledger and the round flags.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from shared.chat.events import Member

ENTRANTS = "entrants"
SECONDS = "seconds"
POLL_SIDES = (ENTRANTS, SECONDS)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class DishOptions:
    """
    Ordered poll options for one side.

    The last option is the oversized marker and is never a dish.
    """

    labels: Tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.labels) < 2:
            raise ValueError("A poll needs at least one dish plus the oversized marker")

    @classmethod
    def of(cls, labels: Iterable[str]) -> "DishOptions":
        return cls(labels=tuple(str(label) for label in labels))

    @property
    def marker_index(self) -> int:
        return len(self.labels) - 1

    @property
    def marker(self) -> str:
        return self.labels[-1]

    def dish(self, index: int) -> Optional[str]:
        """Dish label for an index, or None for the marker / out of range."""
        if 0 <= index < self.marker_index:
            return self.labels[index]
        return None


@dataclass
class VoteSelection:
    """Current selection of one member in one round, per poll side."""

    member: Member
    entrants: FrozenSet[int] = frozenset()
    seconds: FrozenSet[int] = frozenset()

    def for_side(self, side: str) -> FrozenSet[int]:
        if side == ENTRANTS:
            return self.entrants
        if side == SECONDS:
            return self.seconds
        raise ValueError(f"Unknown poll side: {side}")

    def replace(self, side: str, indices: Iterable[int]) -> None:
        selected = frozenset(int(i) for i in indices)
        if side == ENTRANTS:
            self.entrants = selected
        elif side == SECONDS:
            self.seconds = selected
        else:
            raise ValueError(f"Unknown poll side: {side}")

    @property
    def has_vote(self) -> bool:
        return bool(self.entrants or self.seconds)


@dataclass
class RoundState:
    chat_id: str
    entrants_poll_id: str
    seconds_poll_id: str
    entrants: DishOptions
    seconds: DishOptions
    started_by: Optional[Member] = None
    started_at: str = field(default_factory=_utc_now)
    selections: Dict[str, VoteSelection] = field(default_factory=dict)
    first_vote_recorded: bool = False
    last_voting_member: Optional[Member] = None
    call_made: bool = False
    # Members already credited with an oversized dish this round
    oversized_credited: Set[str] = field(default_factory=set)
    # Members already told their vote came after the call
    late_notified: Set[str] = field(default_factory=set)

    def side_for_poll(self, poll_id: str) -> Optional[str]:
        if poll_id == self.entrants_poll_id:
            return ENTRANTS
        if poll_id == self.seconds_poll_id:
            return SECONDS
        return None

    def options_for(self, side: str) -> DishOptions:
        if side == ENTRANTS:
            return self.entrants
        if side == SECONDS:
            return self.seconds
        raise ValueError(f"Unknown poll side: {side}")

    def selection_for(self, member: Member) -> VoteSelection:
        selection = self.selections.get(member.member_id)
        if selection is None:
            selection = VoteSelection(member=member)
            self.selections[member.member_id] = selection
        else:
            selection.member = member
        return selection

    def voters(self) -> List[Member]:
        """Members with at least one selected option in either poll."""
        return [s.member for s in self.selections.values() if s.has_vote]

    def poll_ids(self) -> Tuple[str, str]:
        return self.entrants_poll_id, self.seconds_poll_id
