"""
File transfer handlers.

  !download <url> — fetch a URL and relay it into the chat as a document
  !upload         — (as a reply) store the quoted attachment and return a public link
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from ...constants import REPLIES
from ...exceptions import UserError
from ...transfer.download import download_to_temp
from ...transfer.upload import public_link, save_upload

if TYPE_CHECKING:
    from ..commands import CommandContext

logger = logging.getLogger(__name__)


def make_file_handlers(
    *,
    uploads_dir: str,
    temp_dir: str,
    base_url: str,
    download_timeout: float = 120.0,
    transport: httpx.AsyncBaseTransport | None = None,
):
    """
    Factory that returns file transfer handlers.

    `transport` lets tests substitute an httpx mock transport.
    Returns a dict of command_name -> handler_function.
    """

    async def download_command(ctx: "CommandContext", args: list[str]) -> None:
        if not args:
            raise UserError(REPLIES["download_usage"])
        url = args[0]
        await ctx.reply(REPLIES["downloading"])
        async with download_to_temp(
            url, temp_dir, timeout=download_timeout, transport=transport
        ) as pending:
            await ctx.adapter.send_file(
                ctx.message.chat_id,
                pending.path,
                filename=pending.filename,
                caption=REPLIES["download_caption"].format(filename=pending.filename),
            )
        logger.info("Relayed %s to chat %s", pending.filename, ctx.message.chat_id)

    async def upload_command(ctx: "CommandContext", args: list[str]) -> None:
        if not ctx.message.has_quoted:
            raise UserError(REPLIES["upload_usage"])
        if not ctx.message.quoted_has_media:
            raise UserError(REPLIES["upload_no_media"])

        await ctx.reply(REPLIES["processing"])
        payload = await ctx.adapter.download_quoted_media(ctx.message)
        if payload is None:
            await ctx.reply(REPLIES["media_fetch_failed"])
            return

        try:
            filename = await save_upload(payload, uploads_dir)
        except OSError as e:
            logger.error("Error saving upload into %s: %s", uploads_dir, e)
            await ctx.reply(REPLIES["upload_failed"])
            return

        link = public_link(base_url, filename)
        await ctx.reply(REPLIES["upload_done"].format(link=link))

    return {
        "download": download_command,
        "upload": upload_command,
    }
