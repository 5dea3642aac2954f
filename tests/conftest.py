"""Shared test fixtures."""

from __future__ import annotations

import os
import random
import sys
from pathlib import Path

os.environ.setdefault("LUNCHPOLL_LOG_TO_FILE", "0")

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest  # noqa: E402

from core.context import AppContext  # noqa: E402
from core.orchestrator import RoundOrchestrator  # noqa: E402
from core.votes import VoteEventProcessor  # noqa: E402
from shared.chat.events import Member  # noqa: E402
from shared.storage.state_store import LedgerStore  # noqa: E402

from helpers import CHAT, ENTRANTS, SECONDS, StaticMenu  # noqa: E402


@pytest.fixture
def alice() -> Member:
    return Member(member_id="1", display_name="Alice")


@pytest.fixture
def bob() -> Member:
    return Member(member_id="2", display_name="Bob")


@pytest.fixture
def carol() -> Member:
    return Member(member_id="3", display_name="Carol")


@pytest.fixture
def store(tmp_path) -> LedgerStore:
    return LedgerStore(tmp_path / "ledger.json")


@pytest.fixture
def ctx(store) -> AppContext:
    return AppContext.from_store(store)


@pytest.fixture
def votes(ctx) -> VoteEventProcessor:
    return VoteEventProcessor(ctx)


@pytest.fixture
def menu() -> StaticMenu:
    return StaticMenu()


@pytest.fixture
def orchestrator(ctx, menu) -> RoundOrchestrator:
    return RoundOrchestrator(ctx, menu, rng=random.Random(7))


@pytest.fixture
def started_round(ctx):
    """Round with entrants poll 'e1' and seconds poll 's1' in CHAT."""
    with ctx.lock:
        return ctx.tracker.start_round(CHAT, ENTRANTS, SECONDS, "e1", "s1")

