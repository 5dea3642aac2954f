"""
Discord Lunch Slash Command Registration

Thin registration layer that exposes the lunch round commands and
delegates ALL logic to RoundOrchestrator.

Responsibilities:
- Register slash commands
- Translate Interaction objects into chat ids and Members
- Perform Discord I/O (polls, responses) ONLY at the boundary

IMPORTANT DESIGN RULES:
- NO business logic
- NO persistence
- NO Discord client creation
"""

from __future__ import annotations

from typing import List, Tuple

import discord
from discord import app_commands
from discord.ext import commands

from core import messages
from core.orchestrator import Reply, RoundOrchestrator
from services.discord.polls import PollSelectionFolder, build_poll
from shared.chat.events import CommandInvoked, CreatePoll, Member, make_member
from shared.logging.logger import get_logger
from shared.scoreboards.registry import RankingRegistry

log = get_logger("discord.commands.lunch", runtime="discord")

COMMANDS: List[Tuple[str, str]] = [
    ("help", "List the available commands"),
    ("alive", "Check the bot is running"),
    ("makepoll", "Create today's entrants and seconds polls"),
    ("whocalls", "Pick who calls the restaurant among today's voters"),
    ("showorder", "Show the simplified order"),
    ("callmade", "Use after you placed the call"),
    ("tupper", "Use when you brought your own lunch"),
    ("rank", "Show a ranking"),
]


def _chat_and_member(interaction: discord.Interaction) -> Tuple[str, Member]:
    return (
        str(interaction.channel_id),
        make_member(interaction.user.id, interaction.user.display_name),
    )


def _command(interaction: discord.Interaction, kind: str, argument=None) -> CommandInvoked:
    chat_id, member = _chat_and_member(interaction)
    return CommandInvoked(chat_id, member, kind, argument)


async def _respond(interaction: discord.Interaction, reply: Reply) -> None:
    log.info(
        f"[{interaction.channel_id}] /{interaction.command.name if interaction.command else '?'} "
        f"by {interaction.user.id} -> {reply.kind}"
    )
    await interaction.followup.send(reply.text)


# ==================================================
# Registration Entry Point
# ==================================================

def setup(
    bot: commands.Bot,
    *,
    orchestrator: RoundOrchestrator,
    rankings: RankingRegistry,
    folder: PollSelectionFolder,
    poll_duration_hours: int,
):
    """
    Register all lunch slash commands.

    Called explicitly by the Discord client during startup.
    """

    # --------------------------------------------------
    # /help
    # --------------------------------------------------

    @app_commands.command(name="help", description="List the available commands")
    async def help_command(interaction: discord.Interaction):
        chat_id, member = _chat_and_member(interaction)
        orchestrator.register_member(chat_id, member)
        await interaction.response.send_message(messages.help_text(COMMANDS))

    # --------------------------------------------------
    # /alive
    # --------------------------------------------------

    @app_commands.command(name="alive", description="Check the bot is running")
    async def alive(interaction: discord.Interaction):
        reply = orchestrator.handle(_command(interaction, "alive"))
        await interaction.response.send_message(reply.text)

    # --------------------------------------------------
    # /makepoll
    # --------------------------------------------------

    @app_commands.command(
        name="makepoll",
        description="Create today's entrants and seconds polls",
    )
    async def makepoll(interaction: discord.Interaction):
        await interaction.response.defer()
        chat_id, member = _chat_and_member(interaction)
        channel = interaction.channel

        async def create_poll(request: CreatePoll) -> str:
            if channel is None:
                raise RuntimeError("Interaction has no channel")
            message = await channel.send(
                poll=build_poll(request, duration_hours=poll_duration_hours)
            )
            return str(message.id)

        reply = await orchestrator.start_round(chat_id, member, create_poll)
        if reply.ok:
            folder.open_round(
                chat_id,
                (reply.data["entrants_poll_id"], reply.data["seconds_poll_id"]),
            )
        await _respond(interaction, reply)

    # --------------------------------------------------
    # /whocalls
    # --------------------------------------------------

    @app_commands.command(
        name="whocalls",
        description="Pick who calls the restaurant among today's voters",
    )
    async def whocalls(interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, orchestrator.handle(_command(interaction, "nominate_caller")))

    # --------------------------------------------------
    # /showorder
    # --------------------------------------------------

    @app_commands.command(name="showorder", description="Show the simplified order")
    async def showorder(interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, orchestrator.handle(_command(interaction, "show_order")))

    # --------------------------------------------------
    # /callmade
    # --------------------------------------------------

    @app_commands.command(name="callmade", description="Use after you placed the call")
    async def callmade(interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, orchestrator.handle(_command(interaction, "call_made")))

    # --------------------------------------------------
    # /tupper
    # --------------------------------------------------

    @app_commands.command(name="tupper", description="Use when you brought your own lunch")
    async def tupper(interaction: discord.Interaction):
        await interaction.response.defer()
        await _respond(interaction, orchestrator.handle(_command(interaction, "brought_lunch")))

    # --------------------------------------------------
    # /rank <metric>
    # --------------------------------------------------

    @app_commands.command(name="rank", description="Show a ranking")
    @app_commands.describe(metric="Which ranking to show")
    @app_commands.choices(
        metric=[
            app_commands.Choice(name=m.description, value=m.key)
            for m in rankings.metrics()
        ]
    )
    async def rank(interaction: discord.Interaction, metric: app_commands.Choice[str]):
        await interaction.response.defer()
        await _respond(interaction, orchestrator.handle(_command(interaction, "rank", metric.value)))

    for command in (help_command, alive, makepoll, whocalls, showorder, callmade, tupper, rank):
        bot.tree.add_command(command)

    log.info("Discord lunch commands registered")
