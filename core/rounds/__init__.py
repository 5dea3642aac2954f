"""
Rounds package.

One live lunch round per chat: models plus the tracker that owns them.
"""

from .models import (
    ENTRANTS,
    POLL_SIDES,
    SECONDS,
    DishOptions,
    RoundState,
    VoteSelection,
)
from .tracker import NoActiveRound, RoundTracker

__all__ = [
    "ENTRANTS",
    "POLL_SIDES",
    "SECONDS",
    "DishOptions",
    "NoActiveRound",
    "RoundState",
    "RoundTracker",
    "VoteSelection",
]
