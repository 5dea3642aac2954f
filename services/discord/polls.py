"""
Discord poll helpers.

Discord reports poll votes one answer at a time (1-based answer ids),
while the core expects the complete current selection of a member on a
poll. PollSelectionFolder keeps the per-(poll, member) answer sets and
turns every add/remove delta into a full 0-based selection.
"""

from __future__ import annotations

import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

import discord

from shared.chat.events import CreatePoll
from shared.logging.logger import get_logger

log = get_logger("discord.polls", runtime="discord")

MAX_POLL_ANSWERS = 10
MAX_ANSWER_LENGTH = 55
MAX_QUESTION_LENGTH = 300


def _clip(text: str, limit: int) -> str:
    text = " ".join(str(text).split())
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def build_poll(request: CreatePoll, *, duration_hours: int) -> discord.Poll:
    """Translate a CreatePoll effect into a discord.py Poll object."""
    if request.anonymous:
        # Discord polls always expose voters
        log.warning("Anonymous polls are not supported by Discord; creating a public poll")

    poll = discord.Poll(
        question=_clip(request.question, MAX_QUESTION_LENGTH),
        duration=datetime.timedelta(hours=duration_hours),
        multiple=request.multi_select,
    )
    for option in request.options[:MAX_POLL_ANSWERS]:
        poll.add_answer(text=_clip(option, MAX_ANSWER_LENGTH))
    return poll


class PollSelectionFolder:
    """Answer sets of the polls opened through open_round(). Other polls are ignored."""

    def __init__(self) -> None:
        self._answers: Dict[str, Dict[str, Set[int]]] = {}
        self._chat_polls: Dict[str, List[str]] = {}

    def open_round(self, chat_id: str, poll_ids: Iterable[str]) -> None:
        """Start tracking a round's polls and forget the chat's previous ones."""
        chat_id = str(chat_id)
        for stale in self._chat_polls.pop(chat_id, []):
            self._answers.pop(stale, None)

        poll_ids = [str(p) for p in poll_ids]
        self._chat_polls[chat_id] = poll_ids
        for poll_id in poll_ids:
            self._answers.setdefault(poll_id, {})

    def tracks(self, poll_id: str) -> bool:
        return str(poll_id) in self._answers

    def apply(
        self,
        poll_id: str,
        member_id: str,
        answer_id: int,
        *,
        added: bool,
    ) -> Optional[Tuple[int, ...]]:
        """
        Apply one answer delta and return the member's full selection
        as sorted 0-based option indices, or None for an untracked poll.
        """
        members = self._answers.get(str(poll_id))
        if members is None:
            return None
        answers = members.setdefault(str(member_id), set())

        index = int(answer_id) - 1
        if index < 0:
            log.warning(f"Ignoring invalid answer id {answer_id} on poll {poll_id}")
        elif added:
            answers.add(index)
        else:
            answers.discard(index)

        return tuple(sorted(answers))
