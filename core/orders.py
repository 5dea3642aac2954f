"""
Order aggregator.

Read-only view over a round's vote ledger producing the dish tally for
each poll and the members who asked for an oversized dish.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from core.rounds.models import ENTRANTS, SECONDS, DishOptions, RoundState
from shared.chat.events import Member


@dataclass
class OrderSummary:
    entrants: Dict[str, int] = field(default_factory=dict)
    seconds: Dict[str, int] = field(default_factory=dict)
    # Deduplicated across both polls, in first-seen order
    oversized_members: List[Member] = field(default_factory=list)


def oversized_key(marker: str, dish: str) -> str:
    return f"{marker} - {dish}"


def _tally_side(
    state: RoundState,
    side: str,
    options: DishOptions,
    oversized: Dict[str, Member],
) -> Dict[str, int]:
    tally: Dict[str, int] = {}
    for selection in state.selections.values():
        chosen = selection.for_side(side)
        if not chosen:
            continue

        is_oversized = options.marker_index in chosen
        if is_oversized:
            oversized.setdefault(selection.member.member_id, selection.member)

        for index in sorted(chosen):
            dish = options.dish(index)
            if dish is None:
                continue
            key = oversized_key(options.marker, dish) if is_oversized else dish
            tally[key] = tally.get(key, 0) + 1
    return tally


def aggregate(state: RoundState) -> OrderSummary:
    oversized: Dict[str, Member] = {}
    entrants = _tally_side(state, ENTRANTS, state.entrants, oversized)
    seconds = _tally_side(state, SECONDS, state.seconds, oversized)
    return OrderSummary(
        entrants=entrants,
        seconds=seconds,
        oversized_members=list(oversized.values()),
    )
