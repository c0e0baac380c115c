"""
Messaging client adapter.

MessagingAdapter is the narrow surface the dispatcher and handlers use to talk
back to the chat platform. TelegramAdapter implements it on top of
python-telegram-bot; tests substitute a recording fake.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

import telegram.error
from telegram import Bot, Message, Update
from telegram.constants import ChatType, ParseMode

from ..constants import REPLIES
from ..exceptions import TransportError
from ..models import InboundMessage, MediaPayload

logger = logging.getLogger(__name__)

_GROUP_CHAT_TYPES = (ChatType.GROUP, ChatType.SUPERGROUP)


class MessagingAdapter(ABC):

    @abstractmethod
    async def reply(self, message: InboundMessage, text: str, markdown: bool = False) -> None:
        ...

    @abstractmethod
    async def send_text(self, chat_id: str, text: str) -> None:
        ...

    @abstractmethod
    async def send_file(self, chat_id: str, path: str, *, filename: str, caption: str) -> None:
        """Send a local file as an attachment. Raises TransportError on failure."""

    @abstractmethod
    async def get_chat_name(self, chat_id: str) -> str:
        """Display name for a chat; falls back to the id itself."""

    @abstractmethod
    async def download_quoted_media(self, message: InboundMessage) -> MediaPayload | None:
        """Fetch the attachment of the quoted message, or None if unavailable."""


def _attachment_of(message: Message | None) -> tuple[str, str, str | None] | None:
    """(file_id, mimetype, filename) of the message's attachment, if any."""
    if message is None:
        return None
    if message.document:
        doc = message.document
        return doc.file_id, doc.mime_type or "application/octet-stream", doc.file_name
    if message.photo:
        # Largest size comes last
        return message.photo[-1].file_id, "image/jpeg", None
    for media in (message.video, message.audio, message.animation):
        if media:
            return media.file_id, media.mime_type or "application/octet-stream", media.file_name
    if message.voice:
        return message.voice.file_id, message.voice.mime_type or "audio/ogg", None
    if message.video_note:
        return message.video_note.file_id, "video/mp4", None
    if message.sticker:
        mimetype = "video/webm" if message.sticker.is_video else "image/webp"
        return message.sticker.file_id, mimetype, None
    return None


class TelegramAdapter(MessagingAdapter):
    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    @staticmethod
    def to_inbound(update: Update) -> InboundMessage | None:
        """Translate a PTB update; None for updates without a sender or message."""
        message = update.effective_message
        chat = update.effective_chat
        user = update.effective_user
        if message is None or chat is None or user is None:
            return None
        quoted = message.reply_to_message
        return InboundMessage(
            chat_id=str(chat.id),
            sender_id=str(user.id),
            text=message.text or message.caption or "",
            is_group=chat.type in _GROUP_CHAT_TYPES,
            has_quoted=quoted is not None,
            quoted_has_media=_attachment_of(quoted) is not None,
            raw=message,
        )

    async def reply(self, message: InboundMessage, text: str, markdown: bool = False) -> None:
        await message.raw.reply_text(
            text, parse_mode=ParseMode.MARKDOWN if markdown else None
        )

    async def send_text(self, chat_id: str, text: str) -> None:
        await self.bot.send_message(chat_id=chat_id, text=text)

    async def send_file(self, chat_id: str, path: str, *, filename: str, caption: str) -> None:
        try:
            with open(path, "rb") as f:
                await self.bot.send_document(
                    chat_id=chat_id, document=f, filename=filename, caption=caption
                )
        except (telegram.error.TelegramError, OSError) as e:
            logger.error("Error sending file %s to chat %s: %s", filename, chat_id, e)
            raise TransportError(REPLIES["send_failed"]) from e

    async def get_chat_name(self, chat_id: str) -> str:
        try:
            chat = await self.bot.get_chat(chat_id)
        except telegram.error.TelegramError as e:
            logger.warning("Could not resolve chat %s: %s", chat_id, e)
            return chat_id
        return chat.title or chat.full_name or chat.username or chat_id

    async def download_quoted_media(self, message: InboundMessage) -> MediaPayload | None:
        quoted = message.raw.reply_to_message if message.raw is not None else None
        attachment = _attachment_of(quoted)
        if attachment is None:
            return None
        file_id, mimetype, filename = attachment
        try:
            tg_file = await self.bot.get_file(file_id)
            data = await tg_file.download_as_bytearray()
        except telegram.error.TelegramError as e:
            logger.error("Error downloading quoted media %s: %s", file_id, e)
            return None
        return MediaPayload(data=bytes(data), mimetype=mimetype, filename=filename)
