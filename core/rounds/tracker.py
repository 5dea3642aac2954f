"""
Round tracker.

Holds at most one live round per chat and indexes rounds by poll id so
vote events can be routed without knowing the chat.

Not thread-safe on its own: every call happens under AppContext.lock.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from core.rounds.models import DishOptions, RoundState
from shared.chat.events import Member
from shared.logging.logger import get_logger

log = get_logger("core.rounds.tracker")


class NoActiveRound(LookupError):
    """Raised when an operation needs a round and the chat has none."""


class RoundTracker:
    def __init__(self) -> None:
        self._rounds: Dict[str, RoundState] = {}
        self._poll_index: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_round(
        self,
        chat_id: str,
        entrants_options: Iterable[str],
        seconds_options: Iterable[str],
        entrants_poll_id: str,
        seconds_poll_id: str,
        *,
        started_by: Optional[Member] = None,
    ) -> RoundState:
        """Replace any round for the chat with a fresh one."""
        chat_id = str(chat_id)
        entrants_poll_id = str(entrants_poll_id)
        seconds_poll_id = str(seconds_poll_id)
        if entrants_poll_id == seconds_poll_id:
            raise ValueError("Entrants and seconds polls must have distinct ids")

        state = RoundState(
            chat_id=chat_id,
            entrants_poll_id=entrants_poll_id,
            seconds_poll_id=seconds_poll_id,
            entrants=DishOptions.of(entrants_options),
            seconds=DishOptions.of(seconds_options),
            started_by=started_by,
        )

        previous = self._rounds.get(chat_id)
        if previous is not None:
            for poll_id in previous.poll_ids():
                self._poll_index.pop(poll_id, None)
            log.info(
                f"[{chat_id}] Replacing round (polls={previous.poll_ids()}, "
                f"voters={len(previous.selections)})"
            )

        self._rounds[chat_id] = state
        for poll_id in state.poll_ids():
            self._poll_index[poll_id] = chat_id

        log.info(f"[{chat_id}] Round started (polls={state.poll_ids()})")
        return state

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_round(self, chat_id: str) -> Optional[RoundState]:
        return self._rounds.get(str(chat_id))

    def require_round(self, chat_id: str) -> RoundState:
        state = self.get_round(chat_id)
        if state is None:
            raise NoActiveRound(f"No active round for chat {chat_id}")
        return state

    def find_by_poll(self, poll_id: str) -> Optional[Tuple[RoundState, str]]:
        """Return (round, side) owning the poll, or None."""
        chat_id = self._poll_index.get(str(poll_id))
        if chat_id is None:
            return None
        state = self._rounds.get(chat_id)
        if state is None:
            return None
        side = state.side_for_poll(str(poll_id))
        if side is None:
            return None
        return state, side

    # ------------------------------------------------------------------
    # Call state
    # ------------------------------------------------------------------

    def mark_call_made(self, chat_id: str) -> Optional[Member]:
        """
        Flag the chat's round as called.

        Returns the last voter at the moment of the call, or None when
        there is no round or the call was already made.
        """
        state = self.get_round(chat_id)
        if state is None or state.call_made:
            return None
        state.call_made = True
        return state.last_voting_member
