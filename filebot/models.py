"""
Pydantic v2 data models for filebot, plus the bot availability state machine.
"""

import logging
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class InboundMessage(BaseModel):
    """Adapter-neutral view of one incoming chat message."""
    chat_id: str
    sender_id: str
    text: str = ""
    is_group: bool = False
    has_quoted: bool = False
    quoted_has_media: bool = False
    # Native message object, handed back to the adapter for replies and media
    raw: Any = None


class MediaPayload(BaseModel):
    data: bytes
    mimetype: str
    filename: Optional[str] = None


class BotStatus(str, Enum):
    INITIALIZING = "initializing"
    READY = "ready"
    OFFLINE = "offline"


class BotState:
    """
    Availability flag shared read-only with the web server.

    INITIALIZING → READY on session establishment; any state → OFFLINE on
    auth failure. OFFLINE is terminal.
    """

    def __init__(self) -> None:
        self._status = BotStatus.INITIALIZING

    @property
    def status(self) -> BotStatus:
        return self._status

    @property
    def is_online(self) -> bool:
        return self._status is BotStatus.READY

    def mark_ready(self) -> bool:
        """Transition to READY. Returns True only on the first transition."""
        if self._status is not BotStatus.INITIALIZING:
            return False
        self._status = BotStatus.READY
        logger.info("Bot status: ready")
        return True

    def mark_offline(self) -> None:
        if self._status is BotStatus.OFFLINE:
            return
        self._status = BotStatus.OFFLINE
        logger.warning("Bot status: offline")
