"""
In-process change feed

The record store publishes row changes here after each commit; consumers
subscribe per table with an optional predicate and receive events through
a callback or an asyncio queue. Publishing may happen on a worker thread;
queued events are handed to the loop that owns the subscription.
"""
import asyncio
import logging
import threading
from typing import Callable, List, Optional

from debug_contest.models import ChangeEvent


logger = logging.getLogger(__name__)

Predicate = Callable[[ChangeEvent], bool]


def updates_only(event: ChangeEvent) -> bool:
    return event.type == "UPDATE"


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """One consumer of a table's change stream"""

    def __init__(
        self,
        feed: "ChangeFeed",
        table: str,
        predicate: Optional[Predicate] = None,
        callback: Optional[Callable[[ChangeEvent], None]] = None,
    ):
        self.feed = feed
        self.table = table
        self.predicate = predicate
        self.callback = callback
        self.queue: asyncio.Queue = asyncio.Queue()
        self.loop = _running_loop()
        self.closed = False

    def matches(self, event: ChangeEvent) -> bool:
        if self.closed or event.table != self.table:
            return False
        return self.predicate is None or self.predicate(event)

    def deliver(self, event: ChangeEvent) -> None:
        if self.callback is not None:
            self.callback(event)
        elif self.loop is None or _running_loop() is self.loop:
            self.queue.put_nowait(event)
        elif not self.loop.is_closed():
            # asyncio.Queue is not thread-safe
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)

    async def get(self) -> ChangeEvent:
        """Wait for the next queued event"""
        return await self.queue.get()

    def pending(self) -> List[ChangeEvent]:
        """Drain queued events without waiting"""
        events = []
        while not self.queue.empty():
            events.append(self.queue.get_nowait())
        return events

    def close(self) -> None:
        self.feed.unsubscribe(self)


class ChangeFeed:
    """Fan-out of committed row changes to subscribers"""

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        predicate: Optional[Predicate] = None,
        callback: Optional[Callable[[ChangeEvent], None]] = None,
    ) -> Subscription:
        subscription = Subscription(self, table, predicate, callback)
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.closed = True
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if not subscription.matches(event):
                continue
            try:
                subscription.deliver(event)
            except Exception:
                # one broken consumer must not stop delivery to the rest
                logger.error(f"❌ Change feed subscriber failed on {event.table} {event.type}", exc_info=True)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)
