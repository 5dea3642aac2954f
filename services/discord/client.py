"""
Discord Client

This module owns the Discord connection itself and is the transport
boundary of the lunch bot.

Responsibilities:
- connect to Discord
- register the lunch command surface
- fold poll vote add/remove events into complete selections and hand
  them to the vote processor
- deliver the vote processor's notifications
- expose a clean async run() / shutdown() contract

IMPORTANT:
- This client MUST NOT create its own event loop
- This client MUST NOT hold the application lock across awaits
"""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import discord
from discord.ext import commands
from dotenv import load_dotenv

from core.orchestrator import RoundOrchestrator
from core.votes import VoteEventProcessor
from services.discord import commands as lunch_command_surfaces
from services.discord.polls import PollSelectionFolder
from shared.chat.events import Member, SendText, VoteChanged, make_member
from shared.logging.logger import get_logger
from shared.scoreboards.registry import RankingRegistry

# NOTE: routed to Discord runtime log file
log = get_logger("discord.client", runtime="discord")

TOKEN_ENV_KEY = "DISCORD_BOT_TOKEN"


class DiscordClient:
    """
    Thin wrapper around discord.py Bot.

    This class provides:
    - async run() entrypoint
    - async shutdown()
    - lifecycle event logging
    - command surface and poll vote wiring
    """

    def __init__(
        self,
        *,
        orchestrator: RoundOrchestrator,
        votes: VoteEventProcessor,
        rankings: RankingRegistry,
        poll_duration_hours: int,
    ):
        load_dotenv()

        token = os.getenv(TOKEN_ENV_KEY)
        if not token:
            raise RuntimeError(f"{TOKEN_ENV_KEY} not found in environment")

        self._token: str = token
        self._bot: Optional[commands.Bot] = None

        self._orchestrator = orchestrator
        self._votes = votes
        self._rankings = rankings
        self._poll_duration_hours = poll_duration_hours
        self.folder = PollSelectionFolder()

    # --------------------------------------------------

    def _build_bot(self) -> commands.Bot:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.polls = True
        intents.message_content = False  # slash-command focused

        bot = commands.Bot(
            command_prefix="!",
            intents=intents,
        )

        # --------------------------------------------------
        # Command Registration
        # --------------------------------------------------

        lunch_command_surfaces.setup(
            bot,
            orchestrator=self._orchestrator,
            rankings=self._rankings,
            folder=self.folder,
            poll_duration_hours=self._poll_duration_hours,
        )

        # --------------------------------------------------
        # Lifecycle Events
        # --------------------------------------------------

        @bot.event
        async def on_ready():
            log.info(
                f"Discord connected as {bot.user} "
                f"(id={bot.user.id}) "
                f"guilds={len(bot.guilds)}"
            )

            try:
                await bot.tree.sync()
                log.info("Discord command tree synced")
            except Exception as e:
                log.error(f"Failed to sync Discord commands: {e}")

        @bot.event
        async def on_disconnect():
            log.warning("Discord connection lost")

        # --------------------------------------------------
        # Poll Votes
        # --------------------------------------------------

        @bot.event
        async def on_raw_poll_vote_add(payload: discord.RawPollVoteActionEvent):
            await self._handle_vote(payload, added=True)

        @bot.event
        async def on_raw_poll_vote_remove(payload: discord.RawPollVoteActionEvent):
            await self._handle_vote(payload, added=False)

        return bot

    # --------------------------------------------------

    async def _resolve_member(self, payload: discord.RawPollVoteActionEvent) -> Member:
        bot = self._bot
        user = None

        if bot is not None:
            if payload.guild_id:
                guild = bot.get_guild(payload.guild_id)
                if guild is not None:
                    user = guild.get_member(payload.user_id)
            if user is None:
                user = bot.get_user(payload.user_id)
            if user is None:
                try:
                    user = await bot.fetch_user(payload.user_id)
                except discord.HTTPException as e:
                    log.warning(f"Failed to resolve voter {payload.user_id}: {e}")

        return make_member(payload.user_id, user.display_name if user else None)

    async def _handle_vote(
        self,
        payload: discord.RawPollVoteActionEvent,
        *,
        added: bool,
    ) -> None:
        poll_id = str(payload.message_id)
        if not self.folder.tracks(poll_id):
            return

        member = await self._resolve_member(payload)

        # No await between folding and applying: one member's deltas
        # must reach the round in arrival order.
        selection = self.folder.apply(
            poll_id,
            member.member_id,
            payload.answer_id,
            added=added,
        )
        if selection is None:
            return

        notification = self._votes.apply_vote(
            VoteChanged(
                poll_id=poll_id,
                member=member,
                selected_option_indices=selection,
            )
        )
        if notification is not None:
            await self._notify(notification)

    async def _notify(self, notification: SendText) -> None:
        bot = self._bot
        if bot is None:
            return

        try:
            channel = bot.get_channel(int(notification.chat_id))
            if channel is None:
                channel = await bot.fetch_channel(int(notification.chat_id))
            await channel.send(notification.text)
        except (discord.HTTPException, ValueError) as e:
            log.warning(
                f"[{notification.chat_id}] Failed to deliver notification: {e}"
            )

    # --------------------------------------------------

    async def run(self):
        """
        Start the Discord client and block until shutdown.
        """
        if self._bot is not None:
            raise RuntimeError("Discord client already running")

        log.info("Initializing Discord client")

        self._bot = self._build_bot()

        try:
            await self._bot.start(self._token)
        except asyncio.CancelledError:
            log.info("Discord client task cancelled")
            raise
        except Exception as e:
            log.error(f"Discord client crashed: {e}")
            raise
        finally:
            log.info("Discord client stopped")

    # --------------------------------------------------

    async def shutdown(self):
        """
        Gracefully close the Discord connection.
        """
        if not self._bot:
            return

        log.info("Closing Discord connection")

        try:
            await self._bot.close()
        except Exception as e:
            log.warning(f"Discord close error ignored: {e}")

        self._bot = None

    # --------------------------------------------------

    @property
    def bot(self) -> Optional[commands.Bot]:
        """
        Expose bot instance (read-only).
        """
        return self._bot
