"""
Discord Command Package

Centralizes registration for the Discord command surfaces.

IMPORTANT DESIGN RULES:
- No command registration on import
- No Discord client ownership
- Explicit setup() calls only
"""

from __future__ import annotations

from discord.ext import commands

from shared.logging.logger import get_logger

from services.discord.commands import lunch as lunch_commands

log = get_logger("discord.commands", runtime="discord")


def setup(
    bot: commands.Bot,
    *,
    orchestrator,
    rankings,
    folder,
    poll_duration_hours: int,
):
    """
    Register all Discord command surfaces.

    This function is called exactly once by the Discord client
    during startup.
    """

    lunch_commands.setup(
        bot,
        orchestrator=orchestrator,
        rankings=rankings,
        folder=folder,
        poll_duration_hours=poll_duration_hours,
    )

    log.info("Discord command surfaces initialized")
