"""
filebot entry point.
Loads the allow-list, starts the web server, then brings up the Telegram session.
"""

import asyncio
import logging
import os
import signal

from .bot.commands import CommandDispatcher
from .bot.handlers import make_handlers
from .bot.inbox import MessageInbox
from .bot.telegram_bot import TelegramBot
from .config import settings
from .constants import REPLIES
from .exceptions import AuthFailure
from .logging_config import setup_logging
from .models import BotState
from .storage.allowlist import AllowList, JsonFileAllowListBackend
from .web import run_web_server

logger = logging.getLogger(__name__)


async def notify_owner_online(bot: TelegramBot, state: BotState) -> None:
    """Mark the bot ready and greet the owner on the first transition only."""
    if not state.mark_ready():
        return
    try:
        await bot.adapter.send_text(settings.owner_id, REPLIES["online_notice"])
    except Exception as e:
        logger.warning("Could not send online notice to owner: %s", e)


async def run() -> None:
    state = BotState()
    allowlist = AllowList(JsonFileAllowListBackend(settings.allowed_groups_file))
    await allowlist.load()

    web_task = asyncio.create_task(
        run_web_server(state, settings.uploads_dir, port=settings.port)
    )

    handlers = make_handlers(
        uploads_dir=settings.uploads_dir,
        temp_dir=settings.temp_dir,
        base_url=settings.public_base_url,
        download_timeout=settings.download_timeout,
    )

    # Mutable container for late-binding the dispatcher: it needs the bot's
    # adapter, and the bot needs the inbox.
    _late: dict = {"dispatcher": None}

    async def _process(message):
        await _late["dispatcher"].handle(message)

    inbox = MessageInbox(_process)
    bot = TelegramBot(
        settings.telegram_bot_token,
        inbox,
        state,
        timeout=settings.telegram_timeout,
        session_check_interval=settings.session_check_interval,
    )
    _late["dispatcher"] = CommandDispatcher(
        adapter=bot.adapter,
        allowlist=allowlist,
        state=state,
        owner_id=settings.owner_id,
        handlers=handlers,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    inbox.start()
    try:
        try:
            await bot.start()
        except AuthFailure as e:
            logger.error("Authentication failed: %s", e)
            state.mark_offline()
        else:
            await notify_owner_online(bot, state)

        await stop_event.wait()
        logger.info("Shutting down...")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)
        await bot.stop()
        await inbox.stop()
        await allowlist.flush()
        web_task.cancel()
        await asyncio.gather(web_task, return_exceptions=True)


def main() -> None:
    os.makedirs(settings.data_dir, exist_ok=True)
    os.makedirs(settings.logs_dir, exist_ok=True)
    os.makedirs(settings.uploads_dir, exist_ok=True)

    setup_logging(settings.log_level, settings.logs_dir, settings.json_logs)

    logger.info(
        "Starting filebot (data_dir=%s, uploads_dir=%s, port=%d)",
        settings.data_dir, settings.uploads_dir, settings.port,
    )
    asyncio.run(run())


if __name__ == "__main__":
    main()
