"""In-memory value channels for host-pushed state (settings, discount codes, instructions)."""

import asyncio
import logging
from typing import Any, Generic, NamedTuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChannelEvent(NamedTuple):
    channel: str
    value: Any


class Channel(Generic[T]):
    """Holds the current value of one host-owned piece of state and fans updates out.

    Subscribers attach an ``asyncio.Queue``; several channels may share one queue,
    in which case the consumer tells events apart by ``ChannelEvent.channel``.
    """

    def __init__(self, name: str, initial: T):
        self.name = name
        self._current: T = initial
        self._subscribers: set[asyncio.Queue] = set()

    @property
    def current(self) -> T:
        return self._current

    def publish(self, value: T, notify: bool = True) -> None:
        """Replace the current value and, unless ``notify`` is False, tell every subscriber."""
        self._current = value
        if not notify:
            return
        if not self._subscribers:
            logger.debug(f"No subscribers for channel '{self.name}'")
            return
        event = ChannelEvent(self.name, value)
        for queue in list(self._subscribers):
            queue.put_nowait(event)

    def attach(self, queue: asyncio.Queue) -> None:
        logger.debug(f"New subscription to channel '{self.name}'")
        self._subscribers.add(queue)

    def detach(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
