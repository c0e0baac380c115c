"""
Core command handlers.

Contains handlers for basic commands: help, status.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import owner_only
from ...constants import HELP_TEXT, OWNER_HELP_TEXT

if TYPE_CHECKING:
    from ..commands import CommandContext

logger = logging.getLogger(__name__)


def make_core_handlers():
    """
    Factory that returns core command handlers.

    Returns a dict of command_name -> handler_function.
    """

    async def help_command(ctx: "CommandContext", args: list[str]) -> None:
        text = HELP_TEXT
        if ctx.is_owner:
            text += OWNER_HELP_TEXT
        await ctx.reply(text, markdown=True)

    @owner_only
    async def status_command(ctx: "CommandContext", args: list[str]) -> None:
        status = "Online" if ctx.state.is_online else "Offline"
        await ctx.reply(
            f"*Bot Status:* {status}\n\n"
            f"*Allowed Groups:* {len(ctx.allowlist)}\n",
            markdown=True,
        )

    return {
        "help": help_command,
        "status": status_command,
    }
