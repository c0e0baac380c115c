"""Single-consumer inbox: inbound messages are processed one at a time, in order."""

import asyncio
import logging
from typing import Awaitable, Callable

from ..logging_config import message_context
from ..models import InboundMessage

logger = logging.getLogger(__name__)


class MessageInbox:
    """
    Decouples the messaging client's callbacks from command processing.

    The adapter publishes messages; one consumer task runs `process` on each
    to completion before taking the next, so allow-list mutations never overlap.
    """

    def __init__(self, process: Callable[[InboundMessage], Awaitable[None]]) -> None:
        self._process = process
        self.queue: asyncio.Queue[InboundMessage] = asyncio.Queue()
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def publish(self, message: InboundMessage) -> None:
        await self.queue.put(message)
        logger.debug(
            "Inbox enqueue (size=%d)", self.queue.qsize(), extra=message_context(message)
        )

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
            logger.info("Inbox consumer started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Inbox consumer stopped")

    async def _run(self) -> None:
        while True:
            message = await self.queue.get()
            try:
                await self._process(message)
            except Exception:
                logger.exception("Error handling message", extra=message_context(message))
            finally:
                self.queue.task_done()
