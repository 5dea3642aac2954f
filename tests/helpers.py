"""Fakes and builders shared by the test modules."""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from services.menu.provider import MenuProvider, MenuUnavailable
from shared.chat.events import CreatePoll, Member, VoteChanged

CHAT = "chat-1"
ENTRANTS = ["soup", "salad", "XL"]
SECONDS = ["fish", "meat", "XL"]


class StaticMenu(MenuProvider):
    def __init__(self, entrants=None, seconds=None, error: Optional[str] = None):
        self.entrants = list(entrants or ENTRANTS)
        self.seconds = list(seconds or SECONDS)
        self.error = error
        self.calls = 0

    async def fetch_today_menu(self) -> Tuple[List[str], List[str]]:
        self.calls += 1
        if self.error:
            raise MenuUnavailable(self.error)
        return list(self.entrants), list(self.seconds)


class PollRecorder:
    """Fake transport poll factory handing out sequential ids."""

    def __init__(self, fail: bool = False):
        self.requests: List[CreatePoll] = []
        self.fail = fail

    async def __call__(self, request: CreatePoll) -> str:
        if self.fail:
            raise RuntimeError("send failed")
        self.requests.append(request)
        return f"poll-{len(self.requests)}"


class ForbiddenRandom(random.Random):
    def choice(self, seq):
        raise AssertionError("no random draw expected")


def vote(poll_id: str, member: Member, *indices: int) -> VoteChanged:
    return VoteChanged(poll_id=poll_id, member=member, selected_option_indices=tuple(indices))
