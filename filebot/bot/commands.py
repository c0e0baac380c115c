"""
Command parsing and dispatch.

A message is a command iff it starts with COMMAND_MARKER. The command name is
the lowercased token right after the marker; the remaining whitespace-separated
tokens are positional arguments. Handlers share one signature:

    async def handler(ctx: CommandContext, args: list[str]) -> None
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from .handlers.base import is_authorized
from ..constants import BROADCAST_CHAT_ID, COMMAND_MARKER, REPLIES
from ..exceptions import TransportError, UserError
from ..logging_config import message_context
from ..models import BotState, InboundMessage

if TYPE_CHECKING:
    from .adapter import MessagingAdapter
    from ..storage.allowlist import AllowList

logger = logging.getLogger(__name__)


@dataclass
class ParsedCommand:
    name: str
    args: list[str] = field(default_factory=list)


def parse_command(text: str | None) -> ParsedCommand | None:
    """Return the parsed command, or None if `text` is not a command."""
    if not text or not text.startswith(COMMAND_MARKER):
        return None
    tokens = text[len(COMMAND_MARKER):].split()
    # "!" alone or "! help": empty name, routed to the unknown-command reply
    if not tokens or text[len(COMMAND_MARKER)].isspace():
        return ParsedCommand(name="", args=tokens)
    return ParsedCommand(name=tokens[0].lower(), args=tokens[1:])


@dataclass
class CommandContext:
    """Everything a handler needs for one invocation."""
    message: InboundMessage
    adapter: "MessagingAdapter"
    allowlist: "AllowList"
    state: BotState
    is_owner: bool

    async def reply(self, text: str, markdown: bool = False) -> None:
        await self.adapter.reply(self.message, text, markdown=markdown)


CommandHandler = Callable[[CommandContext, list[str]], Awaitable[None]]


class CommandDispatcher:
    """Authorizes an inbound message, parses it and runs the matching handler."""

    def __init__(
        self,
        *,
        adapter: "MessagingAdapter",
        allowlist: "AllowList",
        state: BotState,
        owner_id: str,
        handlers: dict[str, CommandHandler],
    ) -> None:
        self.adapter = adapter
        self.allowlist = allowlist
        self.state = state
        self.owner_id = owner_id
        self.handlers = handlers

    async def handle(self, message: InboundMessage) -> None:
        if BROADCAST_CHAT_ID in (message.chat_id, message.sender_id):
            return
        if not is_authorized(
            message.sender_id, message.chat_id, self.allowlist, self.owner_id
        ):
            logger.debug("Ignoring unauthorised message", extra=message_context(message))
            return

        parsed = parse_command(message.text)
        if parsed is None:
            return

        ctx = CommandContext(
            message=message,
            adapter=self.adapter,
            allowlist=self.allowlist,
            state=self.state,
            is_owner=message.sender_id == self.owner_id,
        )
        handler = self.handlers.get(parsed.name)
        if handler is None:
            await ctx.reply(REPLIES["unknown_command"])
            return

        context = message_context(message, parsed.name)
        logger.info("Command !%s (args=%d)", parsed.name, len(parsed.args), extra=context)
        try:
            await handler(ctx, parsed.args)
        except UserError as e:
            await ctx.reply(str(e))
        except TransportError as e:
            logger.warning("Command !%s failed: %s", parsed.name, e, extra=context)
            await ctx.reply(str(e))
        except Exception:
            logger.exception("Command !%s failed", parsed.name, extra=context)
            await ctx.reply(REPLIES["command_failed"])
