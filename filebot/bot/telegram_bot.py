"""
Telegram application builder and lifecycle.
Feeds every new text/caption message into the inbox; command handling happens there.

Connection resilience: configures generous timeouts to handle transient
Telegram API disconnections gracefully. A watchdog re-checks the token while
running so a revoked token shows up as Offline.
"""

import asyncio
import logging

import telegram.error
from telegram import Update
from telegram.ext import (
    Application,
    ContextTypes,
    MessageHandler,
    filters,
)

from .adapter import TelegramAdapter
from .inbox import MessageInbox
from ..exceptions import AuthFailure
from ..models import BotState

logger = logging.getLogger(__name__)

# Errors meaning Telegram no longer accepts this bot's token
_SESSION_REJECTED = (telegram.error.InvalidToken, telegram.error.Forbidden)


class TelegramBot:
    def __init__(
        self,
        token: str,
        inbox: MessageInbox,
        state: BotState,
        timeout: float = 30.0,
        session_check_interval: float = 60.0,
    ) -> None:
        self._inbox = inbox
        self._state = state
        self._started = False
        self._session_check_interval = session_check_interval
        self._watchdog: asyncio.Task | None = None
        self.application = (
            Application.builder()
            .token(token)
            .connect_timeout(timeout)
            .read_timeout(timeout)
            .write_timeout(timeout)
            .pool_timeout(timeout)
            .get_updates_connect_timeout(timeout)
            .get_updates_read_timeout(timeout)
            .get_updates_write_timeout(timeout)
            .get_updates_pool_timeout(timeout)
            .build()
        )
        self.adapter = TelegramAdapter(self.application.bot)
        self._register_handlers()

    def _register_handlers(self) -> None:
        app = self.application
        app.add_handler(
            MessageHandler(
                (filters.TEXT | filters.CAPTION) & filters.UpdateType.MESSAGE,
                self._on_message,
            )
        )
        app.add_error_handler(self._error_handler)

    async def _on_message(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = TelegramAdapter.to_inbound(update)
        if message is not None:
            await self._inbox.publish(message)

    async def _error_handler(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Catch-all error handler registered with PTB Application.

        Only errors raised while handling an update reach this (publishing to
        the inbox). Network/timeout errors are logged at WARNING, anything
        else at ERROR.
        """
        err = context.error

        if isinstance(err, (telegram.error.NetworkError, telegram.error.TimedOut)):
            logger.warning("Telegram transient error: %s", err)
            return

        update_type = type(update).__name__ if update else "unknown"
        logger.error(
            "Unhandled Telegram exception (update_type=%s): %s",
            update_type, err, exc_info=err,
        )

    def _on_polling_error(self, err: telegram.error.TelegramError) -> None:
        """getUpdates error callback. Must stay synchronous for PTB."""
        if isinstance(err, _SESSION_REJECTED):
            logger.error("Telegram rejected polling: %s", err)
            self._state.mark_offline()
            return
        logger.warning("Telegram polling error: %s", err)

    async def _watch_session(self) -> None:
        """
        Re-check the token with getMe every `session_check_interval` seconds.

        A token revoked mid-session makes PTB abort its polling loop without
        telling the application, so this is what takes the bot offline.
        """
        while True:
            await asyncio.sleep(self._session_check_interval)
            try:
                await self.application.bot.get_me()
            except _SESSION_REJECTED as e:
                logger.error("Telegram session rejected: %s", e)
                self._state.mark_offline()
                return
            except telegram.error.TelegramError as e:
                logger.warning("Telegram session check failed: %s", e)

    def _warn_if_privacy_mode(self, me) -> None:
        if not me.can_read_all_group_messages:
            logger.warning(
                "Privacy mode is on for @%s: group messages that are not replies "
                "to the bot will not arrive, so group members cannot use !commands. "
                "Disable it with BotFather /setprivacy.",
                me.username,
            )

    async def start(self) -> None:
        """Authenticate and begin polling. Raises AuthFailure on a rejected token."""
        try:
            await self.application.initialize()
            me = await self.application.bot.get_me()
        except _SESSION_REJECTED as e:
            raise AuthFailure(str(e)) from e
        await self.application.start()
        await self.application.updater.start_polling(
            drop_pending_updates=True,
            error_callback=self._on_polling_error,
        )
        self._started = True
        logger.info("Telegram session established as @%s", me.username)
        self._warn_if_privacy_mode(me)
        self._watchdog = asyncio.create_task(self._watch_session())

    async def stop(self) -> None:
        if not self._started:
            return
        self._started = False
        if self._watchdog is not None:
            self._watchdog.cancel()
            await asyncio.gather(self._watchdog, return_exceptions=True)
            self._watchdog = None
        if self.application.updater.running:
            await self.application.updater.stop()
        await self.application.stop()
        await self.application.shutdown()
        logger.info("Telegram session closed")
