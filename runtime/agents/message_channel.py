"""
MessageChannel: fan-out of helper events to UI subscribers.

Every subscriber gets its own unbounded asyncio.Queue, so a slow UI
connection never drops or reorders messages for the others. Messages
published while nobody is subscribed are not kept.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from ..models.channel_models import ChannelMessage


logger = logging.getLogger(__name__)


class MessageChannel:
    def __init__(self) -> None:
        self._subscribers: List[asyncio.Queue] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, message: ChannelMessage) -> None:
        for queue in list(self._subscribers):
            queue.put_nowait(message)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        try:
            self._subscribers.remove(queue)
        except ValueError:
            logger.debug("Queue was not subscribed")

    @asynccontextmanager
    async def subscription(self) -> AsyncIterator[asyncio.Queue]:
        queue = self.subscribe()
        try:
            yield queue
        finally:
            self.unsubscribe(queue)
