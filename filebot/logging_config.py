"""
Logging configuration for filebot.

Console output is human-readable text, or one JSON object per line when
JSON_LOGS is set. Records about an inbound chat message carry `chat_id`,
`sender_id` and `command` (passed with `extra=message_context(...)`); both
formats surface them so a single command can be followed through the log.
The file log rotates under DATA_DIR/logs.
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone

CONTEXT_FIELDS = ("chat_id", "sender_id", "command")

LOG_FILE_NAME = "filebot.log"
_MAX_LOG_BYTES = 10 * 1024 * 1024
_LOG_BACKUPS = 5

_TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_CONTEXT_LABELS = {"chat_id": "chat", "sender_id": "sender", "command": "cmd"}

# Per-request chatter, WARNING and above only
_NOISY_LOGGERS = ("httpx", "httpcore", "telegram", "aiohttp.access")


def message_context(message, command: str | None = None) -> dict:
    """`extra=` mapping tying a log record to an inbound message."""
    context = {"chat_id": message.chat_id, "sender_id": message.sender_id}
    if command is not None:
        context["command"] = command
    return context


def _context_of(record: logging.LogRecord) -> dict:
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record; message context fields are top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(_context_of(record))
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, default=str)


class ContextTextFormatter(logging.Formatter):
    """Plain text, with `[chat=… sender=… cmd=…]` appended when the record has context."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        text = super().formatMessage(record)
        context = _context_of(record)
        if not context:
            return text
        tags = " ".join(f"{_CONTEXT_LABELS[k]}={v}" for k, v in context.items())
        return f"{text} [{tags}]"


def setup_logging(log_level: str, logs_dir: str, json_logs: bool) -> None:
    """Install console and rotating file handlers on the root logger."""
    os.makedirs(logs_dir, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stdout)
    if json_logs:
        console.setFormatter(JsonFormatter())
    else:
        console.setFormatter(ContextTextFormatter(fmt=_TEXT_FORMAT, datefmt="%H:%M:%S"))

    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(logs_dir, LOG_FILE_NAME),
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(
        ContextTextFormatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    )

    for handler in (console, file_handler):
        handler.setLevel(level)
    logging.basicConfig(level=level, handlers=[console, file_handler], force=True)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
