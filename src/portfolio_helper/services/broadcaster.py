"""
Fan-out of update events to live-stream subscribers.

Each subscriber owns a bounded buffer. ``publish`` never waits on a
subscriber: when a buffer is full its oldest event is discarded so the
newest price is always kept (drop-oldest).
"""

import asyncio
import logging
import threading
from collections import deque
from typing import Iterator, Optional

from portfolio_helper.domain.events import UpdateEvent

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 256


class Subscription:
    """One consumer's view of the event stream."""

    def __init__(self, broadcaster: "UpdateBroadcaster", buffer_size: int):
        self._broadcaster = broadcaster
        self._buffer: deque = deque(maxlen=buffer_size)
        self._cond = threading.Condition()
        self._closed = False
        self._async_waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, event: UpdateEvent) -> bool:
        """Buffer ``event`` without blocking; returns False once closed."""
        with self._cond:
            if self._closed:
                return False
            if len(self._buffer) == self._buffer.maxlen:
                self.dropped += 1
                logger.debug(f"Subscriber buffer full, dropping oldest event ({self.dropped} dropped)")
            self._buffer.append(event)
            self._cond.notify()
            waiters = list(self._async_waiters)
        self._wake(waiters)
        return True

    def get_nowait(self) -> Optional[UpdateEvent]:
        with self._cond:
            return self._buffer.popleft() if self._buffer else None

    def get(self, timeout: Optional[float] = None) -> Optional[UpdateEvent]:
        """Block until an event arrives; None on timeout or close."""
        with self._cond:
            self._cond.wait_for(lambda: self._buffer or self._closed, timeout)
            return self._buffer.popleft() if self._buffer else None

    async def next_event(self, timeout: Optional[float] = None) -> Optional[UpdateEvent]:
        """Await the next event without tying up a thread; None on timeout or close."""
        event = self.get_nowait()
        if event is not None or self._closed:
            return event

        loop = asyncio.get_running_loop()
        ready = asyncio.Event()
        waiter = (loop, ready)
        with self._cond:
            self._async_waiters.append(waiter)
        try:
            event = self.get_nowait()
            if event is not None or self._closed:
                return event
            try:
                await asyncio.wait_for(ready.wait(), timeout)
            except asyncio.TimeoutError:
                return None
            return self.get_nowait()
        finally:
            with self._cond:
                if waiter in self._async_waiters:
                    self._async_waiters.remove(waiter)

    def drain(self) -> list[UpdateEvent]:
        with self._cond:
            events = list(self._buffer)
            self._buffer.clear()
            return events

    def close(self) -> None:
        """Unsubscribe and release the buffer; idempotent."""
        self._broadcaster._remove(self)
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._buffer.clear()
            self._cond.notify_all()
            waiters = list(self._async_waiters)
        self._wake(waiters)

    @staticmethod
    def _wake(waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Event]]) -> None:
        for loop, ready in waiters:
            try:
                loop.call_soon_threadsafe(ready.set)
            except RuntimeError:
                # Loop already closed
                pass

    def __iter__(self) -> Iterator[UpdateEvent]:
        while True:
            event = self.get()
            if event is None:
                return
            yield event

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class UpdateBroadcaster:
    """
    Distributes PriceUpdate, NavUpdate and ReloadSignal events.

    The subscriber list is copy-on-write, so publishing iterates a stable
    tuple while subscribers come and go.
    """

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE):
        if buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")
        self._buffer_size = buffer_size
        self._subscribers: tuple[Subscription, ...] = ()
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        subscription = Subscription(self, self._buffer_size)
        with self._lock:
            self._subscribers = self._subscribers + (subscription,)
        logger.debug(f"Stream subscriber added ({len(self._subscribers)} connected)")
        return subscription

    def publish(self, event: UpdateEvent) -> int:
        """Offer ``event`` to every subscriber; returns how many accepted it."""
        delivered = 0
        for subscription in self._subscribers:
            if subscription.offer(event):
                delivered += 1
        return delivered

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def close(self) -> None:
        """Close every subscription (process shutdown)."""
        for subscription in self._subscribers:
            subscription.close()

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers = tuple(s for s in self._subscribers if s is not subscription)
                logger.debug(f"Stream subscriber removed ({len(self._subscribers)} connected)")
