"""Discord transport boundary tests (no network)."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import discord
import pytest
from discord.ext import commands

from services.discord.client import DiscordClient
from services.discord.commands import setup as setup_commands
from services.discord.commands.lunch import COMMANDS
from services.discord.polls import PollSelectionFolder
from helpers import CHAT


def _payload(message_id, user_id, answer_id):
    return SimpleNamespace(
        message_id=message_id,
        user_id=user_id,
        answer_id=answer_id,
        guild_id=None,
        channel_id=CHAT,
    )


@pytest.fixture
def client(monkeypatch, ctx, orchestrator, votes) -> DiscordClient:
    monkeypatch.setenv("DISCORD_BOT_TOKEN", "test-token")
    return DiscordClient(
        orchestrator=orchestrator,
        votes=votes,
        rankings=ctx.rankings,
        poll_duration_hours=4,
    )


def test_missing_token_is_fatal(monkeypatch, ctx, orchestrator, votes) -> None:
    monkeypatch.setattr("services.discord.client.load_dotenv", lambda: None)
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)

    with pytest.raises(RuntimeError):
        DiscordClient(
            orchestrator=orchestrator,
            votes=votes,
            rankings=ctx.rankings,
            poll_duration_hours=4,
        )


def test_setup_registers_every_lunch_command(ctx, orchestrator) -> None:
    bot = commands.Bot(command_prefix="!", intents=discord.Intents.default())

    setup_commands(
        bot,
        orchestrator=orchestrator,
        rankings=ctx.rankings,
        folder=PollSelectionFolder(),
        poll_duration_hours=4,
    )

    registered = {command.name for command in bot.tree.get_commands()}
    assert registered == {name for name, _ in COMMANDS}


@pytest.mark.asyncio
async def test_vote_deltas_reach_the_round_as_full_selections(
    client, ctx, started_round
) -> None:
    client.folder.open_round(CHAT, ("e1", "s1"))

    await client._handle_vote(_payload("e1", 42, 1), added=True)
    await client._handle_vote(_payload("e1", 42, 3), added=True)

    selection = started_round.selections["42"]
    assert selection.entrants == frozenset({0, 2})
    assert ctx.ledger.get(CHAT, "42").fastest_votes == 1

    await client._handle_vote(_payload("e1", 42, 1), added=False)
    await client._handle_vote(_payload("e1", 42, 3), added=False)

    assert started_round.selections["42"].entrants == frozenset()
    assert ctx.ledger.get(CHAT, "42").retracted_votes == 1


class _SlowFirstLookupBot:
    """Bot stand-in whose first user lookup is slower than the next ones."""

    def __init__(self) -> None:
        self.lookups = 0

    def get_user(self, user_id):
        return None

    async def fetch_user(self, user_id):
        self.lookups += 1
        if self.lookups == 1:
            await asyncio.sleep(0.05)
        return SimpleNamespace(display_name="Voter")


@pytest.mark.asyncio
async def test_overlapping_deltas_leave_the_latest_selection(
    client, ctx, started_round
) -> None:
    client.folder.open_round(CHAT, ("e1", "s1"))
    client._bot = _SlowFirstLookupBot()

    await asyncio.gather(
        client._handle_vote(_payload("e1", 42, 1), added=True),
        client._handle_vote(_payload("e1", 42, 3), added=True),
    )

    assert started_round.selections["42"].entrants == frozenset({0, 2})
    assert started_round.selections["42"].member.display_name == "Voter"


@pytest.mark.asyncio
async def test_votes_on_unregistered_polls_are_ignored(
    client, ctx, started_round
) -> None:
    client.folder.open_round(CHAT, ("e1", "s1"))

    await client._handle_vote(_payload("other-poll", 42, 1), added=True)

    assert not client.folder.tracks("other-poll")
    assert ctx.ledger.get(CHAT, "42") is None
    assert started_round.selections == {}
