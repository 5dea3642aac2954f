"""Events and effects exchanged between the chat transport and the core."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

COMMAND_KINDS = (
    "alive",
    "nominate_caller",
    "show_order",
    "call_made",
    "brought_lunch",
    "rank",
)


@dataclass(frozen=True)
class Member:
    """External chat identity. Owned by the transport, immutable here."""

    member_id: str
    display_name: str


@dataclass(frozen=True)
class CommandInvoked:
    chat_id: str
    member: Member
    command_kind: str
    argument: Optional[str] = None


@dataclass(frozen=True)
class VoteChanged:
    """
    Complete current selection of one member on one poll.

    Option indices are 0-based. An empty tuple means the member
    cleared their answer.
    """

    poll_id: str
    member: Member
    selected_option_indices: Tuple[int, ...] = ()


@dataclass(frozen=True)
class SendText:
    chat_id: str
    text: str


@dataclass(frozen=True)
class CreatePoll:
    chat_id: str
    question: str
    options: List[str] = field(default_factory=list)
    multi_select: bool = True
    anonymous: bool = False


def make_member(member_id, display_name: Optional[str]) -> Member:
    """
    Normalize a transport identity into a Member.

    Ids are stored as strings so they survive a JSON round-trip
    unchanged. A missing display name falls back to the id.
    """
    mid = str(member_id)
    if not mid:
        raise ValueError("member_id is required")
    name = (display_name or "").strip() or mid
    return Member(member_id=mid, display_name=name)


__all__ = [
    "COMMAND_KINDS",
    "Member",
    "CommandInvoked",
    "VoteChanged",
    "SendText",
    "CreatePoll",
    "make_member",
]
