"""Revision broadcaster — fans reload signals out to connected viewers.

Every successful re-render calls ``notify()`` once.  Each connected viewer
owns a ``Subscriber`` with a small bounded queue of pending signals.  A signal
carries no payload: it only tells the viewer to fetch the current snapshot
again, so any number of pending signals collapse to the same outcome.

That makes the slow-viewer policy simple.  When a subscriber's queue is full
the oldest pending signal is dropped to make room for the new one.  The
broadcaster never blocks and the latest signal always lands.
"""

from __future__ import annotations

import asyncio
import itertools
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

# The directive sent to viewers; the browser client reloads on it.
RELOAD = "reload"

_ids = itertools.count(1)


class Subscriber:
    """One viewer's notification channel.

    Bound to the event loop it was created on.  Signals offered from other
    threads are handed over with ``call_soon_threadsafe``.

    Attributes:
        client_id: Unique identifier for this connection.

    """

    __slots__ = ("_closed", "_loop", "_queue", "client_id")

    def __init__(self, queue_size: int = 8) -> None:
        self.client_id = f"viewer-{next(_ids)}"
        self._loop = asyncio.get_running_loop()
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    def __repr__(self) -> str:
        return f"Subscriber({self.client_id!r}, pending={self._queue.qsize()})"

    @property
    def closed(self) -> bool:
        """Whether the subscriber has been removed from its broadcaster."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of undelivered signals."""
        return self._queue.qsize()

    def offer(self) -> None:
        """Queue one signal without blocking, from any thread."""
        if not self._closed:
            self._call(self._offer)

    def close(self) -> None:
        """Stop accepting signals and wake a suspended ``stream()``."""
        if self._closed:
            return
        self._closed = True
        self._call(self._wake)

    async def wait(self) -> str:
        """Suspend until the next signal arrives."""
        return await self._queue.get()

    async def stream(self) -> AsyncIterator[str]:
        """Yield a reload directive for every signal until closed.

        Ends quietly on task cancellation (client disconnect) so no
        ``StopAsyncIteration`` noise leaks into the event loop.

        """
        try:
            while not self._closed:
                signal = await self._queue.get()
                if self._closed:
                    return
                yield signal
        except (asyncio.CancelledError, GeneratorExit):
            return

    def _call(self, callback: Callable[[], None]) -> None:
        """Run *callback* on the subscriber's loop, now if already on it."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            callback()
            return
        try:
            self._loop.call_soon_threadsafe(callback)
        except RuntimeError:
            # Loop closed: the viewer is gone.
            self._closed = True

    def _offer(self) -> None:
        if self._closed:
            return
        if self._queue.full():
            self._queue.get_nowait()
        self._queue.put_nowait(RELOAD)

    def _wake(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(RELOAD)


class Broadcaster:
    """Manages viewer subscriptions and fans out reload signals.

    The only component allowed to add or remove subscribers.

    Thread-safe: the subscriber set is protected by a lock and ``notify()``
    works from the watcher thread as well as from the event loop.

    Args:
        queue_size: Pending signals kept per subscriber before the oldest
            is dropped.

    """

    def __init__(self, queue_size: int = 8) -> None:
        self._queue_size = queue_size
        self._subscribers: set[Subscriber] = set()
        self._lock = threading.Lock()

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        with self._lock:
            return len(self._subscribers)

    def subscribe(self) -> Subscriber:
        """Register a new subscriber on the running loop.

        Signals sent before registration are not replayed.

        """
        subscriber = Subscriber(self._queue_size)
        with self._lock:
            self._subscribers.add(subscriber)
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        """Remove a subscriber.  Safe to call twice or during ``notify()``."""
        with self._lock:
            self._subscribers.discard(subscriber)
        subscriber.close()

    def get_subscribers(self) -> frozenset[Subscriber]:
        """Snapshot of registered subscribers (no lock held on return)."""
        with self._lock:
            return frozenset(self._subscribers)

    def notify(self) -> int:
        """Offer one reload signal to every registered subscriber.

        Returns:
            Number of subscribers the signal was offered to.

        """
        subscribers = self.get_subscribers()
        for subscriber in subscribers:
            subscriber.offer()
        return len(subscribers)

    def close_all(self) -> int:
        """Unsubscribe everyone (server shutdown).  Returns how many were removed."""
        with self._lock:
            subscribers = tuple(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            subscriber.close()
        return len(subscribers)
