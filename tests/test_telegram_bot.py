"""Tests for filebot/bot/telegram_bot.py — PTB wiring and lifecycle."""

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
import telegram.error
from telegram.constants import ChatType
from telegram.ext import Application, ExtBot, MessageHandler, Updater

from filebot.bot.inbox import MessageInbox
from filebot.bot.telegram_bot import TelegramBot
from filebot.exceptions import AuthFailure
from filebot.models import BotState, BotStatus


@pytest.fixture
def inbox():
    return MessageInbox(AsyncMock())


@pytest.fixture
def lifecycle():
    """Stub out PTB's network-facing lifecycle calls."""
    mocks = {
        "initialize": AsyncMock(),
        "start": AsyncMock(),
        "stop": AsyncMock(),
        "shutdown": AsyncMock(),
    }
    start_polling = AsyncMock()
    with patch.multiple(Application, **mocks), patch.object(Updater, "start_polling", start_polling):
        yield {**mocks, "start_polling": start_polling}


def make_bot(inbox, state=None, **kwargs):
    return TelegramBot("123456:TEST-token", inbox, state or BotState(), timeout=5.0, **kwargs)


def make_me(can_read_all_group_messages=True):
    return SimpleNamespace(
        username="filebot", can_read_all_group_messages=can_read_all_group_messages
    )


async def wait_for(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            return False
        await asyncio.sleep(0.01)
    return True


def test_registers_single_message_handler(inbox):
    bot = make_bot(inbox)
    registered = [h for group in bot.application.handlers.values() for h in group]
    assert len(registered) == 1
    assert isinstance(registered[0], MessageHandler)


@pytest.mark.asyncio
async def test_on_message_publishes_to_inbox(inbox):
    bot = make_bot(inbox)
    message = SimpleNamespace(
        text="!help", caption=None, reply_to_message=None,
    )
    update = SimpleNamespace(
        effective_message=message,
        effective_chat=SimpleNamespace(id=-100, type=ChatType.GROUP),
        effective_user=SimpleNamespace(id=7),
    )
    await bot._on_message(update, None)

    queued = inbox.queue.get_nowait()
    assert queued.text == "!help"
    assert queued.chat_id == "-100"
    assert queued.sender_id == "7"


@pytest.mark.asyncio
async def test_on_message_skips_updates_without_sender(inbox):
    bot = make_bot(inbox)
    update = SimpleNamespace(effective_message=None, effective_chat=None, effective_user=None)
    await bot._on_message(update, None)
    assert inbox.queue.empty()


@pytest.mark.asyncio
async def test_error_handler_only_logs(inbox):
    state = BotState()
    state.mark_ready()
    bot = make_bot(inbox, state)
    await bot._error_handler(None, SimpleNamespace(error=telegram.error.NetworkError("reset")))
    await bot._error_handler(None, SimpleNamespace(error=ValueError("unexpected")))
    assert state.status is BotStatus.READY


def test_polling_error_callback_marks_offline_on_rejected_token(inbox):
    for err in (telegram.error.InvalidToken(), telegram.error.Forbidden("bot was kicked")):
        state = BotState()
        state.mark_ready()
        make_bot(inbox, state)._on_polling_error(err)
        assert state.status is BotStatus.OFFLINE


def test_polling_error_callback_tolerates_network_errors(inbox):
    state = BotState()
    state.mark_ready()
    make_bot(inbox, state)._on_polling_error(telegram.error.NetworkError("reset"))
    assert state.status is BotStatus.READY


@pytest.mark.asyncio
async def test_start_raises_auth_failure_on_invalid_token(inbox):
    bot = make_bot(inbox)
    with patch.object(
        Application, "initialize", AsyncMock(side_effect=telegram.error.InvalidToken())
    ):
        with pytest.raises(AuthFailure):
            await bot.start()
    # Never started, so stop is a no-op
    await bot.stop()


@pytest.mark.asyncio
async def test_start_polls_with_error_callback(inbox, lifecycle):
    bot = make_bot(inbox)
    with patch.object(ExtBot, "get_me", AsyncMock(return_value=make_me())):
        await bot.start()
    try:
        kwargs = lifecycle["start_polling"].call_args.kwargs
        assert kwargs["error_callback"] == bot._on_polling_error
        assert kwargs["drop_pending_updates"] is True
    finally:
        await bot.stop()
    lifecycle["shutdown"].assert_awaited_once()


@pytest.mark.asyncio
async def test_revoked_token_takes_bot_offline(inbox, lifecycle):
    state = BotState()
    bot = make_bot(inbox, state, session_check_interval=0.01)
    get_me = AsyncMock(side_effect=[make_me(), telegram.error.InvalidToken()])

    with patch.object(ExtBot, "get_me", get_me):
        await bot.start()
        assert state.mark_ready()
        went_offline = await wait_for(lambda: state.status is BotStatus.OFFLINE)
        await bot.stop()

    assert went_offline
    assert get_me.await_count == 2


@pytest.mark.asyncio
async def test_session_check_survives_network_errors(inbox, lifecycle):
    state = BotState()
    bot = make_bot(inbox, state, session_check_interval=0.01)
    calls = []

    async def flaky_get_me():
        calls.append(1)
        if len(calls) == 2:
            raise telegram.error.NetworkError("connection reset")
        return make_me()

    with patch.object(ExtBot, "get_me", AsyncMock(side_effect=flaky_get_me)):
        await bot.start()
        state.mark_ready()
        assert await wait_for(lambda: len(calls) >= 4)
        await bot.stop()

    assert state.status is BotStatus.READY


@pytest.mark.asyncio
async def test_start_warns_when_privacy_mode_is_on(inbox, lifecycle, caplog):
    bot = make_bot(inbox)
    with patch.object(ExtBot, "get_me", AsyncMock(return_value=make_me(False))):
        with caplog.at_level(logging.WARNING, logger="filebot.bot.telegram_bot"):
            await bot.start()
    await bot.stop()

    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any("/setprivacy" in w for w in warnings)


@pytest.mark.asyncio
async def test_start_quiet_when_bot_reads_all_group_messages(inbox, lifecycle, caplog):
    bot = make_bot(inbox)
    with patch.object(ExtBot, "get_me", AsyncMock(return_value=make_me(True))):
        with caplog.at_level(logging.WARNING, logger="filebot.bot.telegram_bot"):
            await bot.start()
    await bot.stop()

    assert not any("/setprivacy" in r.getMessage() for r in caplog.records)
