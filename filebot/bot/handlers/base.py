"""
Base utilities for command handlers.

Contains the authorization predicate and the per-command access guards
shared across handler modules.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Collection

from ...constants import REPLIES
from ...exceptions import UserError

if TYPE_CHECKING:
    from ..commands import CommandContext, CommandHandler

logger = logging.getLogger(__name__)


def is_authorized(
    sender_id: str, chat_id: str, allowed_groups: Collection[str], owner_id: str
) -> bool:
    """Permit the owner anywhere, and anyone inside an allow-listed group."""
    return sender_id == owner_id or chat_id in allowed_groups


def owner_only(handler: "CommandHandler") -> "CommandHandler":
    """Silently ignore the command unless the owner sent it."""
    @functools.wraps(handler)
    async def wrapper(ctx: "CommandContext", args: list[str]) -> None:
        if not ctx.is_owner:
            logger.debug(
                "Owner-only %s ignored for sender=%s", handler.__name__, ctx.message.sender_id
            )
            return
        await handler(ctx, args)
    return wrapper


def groups_only(handler: "CommandHandler") -> "CommandHandler":
    """Reject the command with a corrective reply outside group chats."""
    @functools.wraps(handler)
    async def wrapper(ctx: "CommandContext", args: list[str]) -> None:
        if not ctx.message.is_group:
            raise UserError(REPLIES["groups_only"])
        await handler(ctx, args)
    return wrapper
