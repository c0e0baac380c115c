"""Shared fixtures for filebot tests."""

import os

import pytest

from filebot.bot.adapter import MessagingAdapter
from filebot.models import InboundMessage, MediaPayload

OWNER_ID = "111"


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch, tmp_path):
    """Prevent tests from reading real .env or touching real data."""
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123456:TEST-token")
    monkeypatch.setenv("OWNER_ID", OWNER_ID)
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    for key in ("PORT", "BASE_URL", "UPLOADS_DIR", "TEMP_DIR", "ALLOWED_GROUPS_FILE"):
        monkeypatch.delenv(key, raising=False)

    import filebot.config
    filebot.config._settings = None
    yield
    filebot.config._settings = None


class FakeAdapter(MessagingAdapter):
    """Records everything the bot would have sent."""

    def __init__(self, chat_names=None, media=None, send_error=None):
        self.replies: list[str] = []
        self.markdown_flags: list[bool] = []
        self.sent_texts: list[tuple[str, str]] = []
        self.sent_files: list[dict] = []
        self.chat_names = chat_names or {}
        self.media = media
        self.send_error = send_error
        self.media_requests = 0

    async def reply(self, message, text, markdown=False):
        self.replies.append(text)
        self.markdown_flags.append(markdown)

    async def send_text(self, chat_id, text):
        self.sent_texts.append((chat_id, text))

    async def send_file(self, chat_id, path, *, filename, caption):
        with open(path, "rb") as f:
            content = f.read()
        self.sent_files.append({
            "chat_id": chat_id,
            "path": path,
            "filename": filename,
            "caption": caption,
            "existed": os.path.exists(path),
            "content": content,
        })
        if self.send_error is not None:
            raise self.send_error

    async def get_chat_name(self, chat_id):
        return self.chat_names.get(chat_id, chat_id)

    async def download_quoted_media(self, message):
        self.media_requests += 1
        return self.media


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def make_message():
    """Factory for InboundMessage with sensible defaults (owner, private chat)."""
    def _make(
        text="",
        sender_id=OWNER_ID,
        chat_id=None,
        is_group=False,
        has_quoted=False,
        quoted_has_media=False,
    ):
        return InboundMessage(
            chat_id=chat_id if chat_id is not None else sender_id,
            sender_id=sender_id,
            text=text,
            is_group=is_group,
            has_quoted=has_quoted,
            quoted_has_media=quoted_has_media,
        )
    return _make


@pytest.fixture
def pdf_payload():
    return MediaPayload(data=b"%PDF-1.4 test", mimetype="application/pdf", filename="report.pdf")
