"""
Allow-list management handlers: addgroup, removegroup, listgroups.

All three are owner-only; add/remove also require a group chat.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram.helpers import escape_markdown

from .base import groups_only, owner_only
from ...constants import REPLIES

if TYPE_CHECKING:
    from ..commands import CommandContext

logger = logging.getLogger(__name__)


def make_group_handlers():
    """
    Factory that returns allow-list handlers.

    Returns a dict of command_name -> handler_function.
    """

    @owner_only
    @groups_only
    async def addgroup_command(ctx: "CommandContext", args: list[str]) -> None:
        await ctx.allowlist.add(ctx.message.chat_id)
        await ctx.reply(REPLIES["group_added"])

    @owner_only
    @groups_only
    async def removegroup_command(ctx: "CommandContext", args: list[str]) -> None:
        await ctx.allowlist.remove(ctx.message.chat_id)
        await ctx.reply(REPLIES["group_removed"])

    @owner_only
    async def listgroups_command(ctx: "CommandContext", args: list[str]) -> None:
        if len(ctx.allowlist) == 0:
            await ctx.reply(REPLIES["no_groups"])
            return
        lines = ["*Allowed Groups:*", ""]
        for group_id in ctx.allowlist:
            name = await ctx.adapter.get_chat_name(group_id)
            lines.append(f"- {escape_markdown(name)}")
        await ctx.reply("\n".join(lines) + "\n", markdown=True)

    return {
        "addgroup": addgroup_command,
        "removegroup": removegroup_command,
        "listgroups": listgroups_command,
    }
