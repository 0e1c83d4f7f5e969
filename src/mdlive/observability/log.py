"""Event log — bounded, thread-safe store of preview events.

Keeps the most recent events in a ring buffer so a long-running preview
never grows without bound.  The watcher thread, the pipeline task and
pounce's connection handling all append concurrently.

Thread Safety:
    All methods are protected by a ``threading.Lock``.

"""

import threading
from collections import Counter, deque
from typing import Any

from mdlive.observability.events import StackEvent


class EventLog:
    """Ring buffer of events with simple filtering.

    When the buffer is full, the oldest events are discarded automatically.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 2_000) -> None:
        self._max_events = max_events
        self._events: deque[StackEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: StackEvent) -> None:
        """Record an event in the log."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        limit: int = 100,
    ) -> list[StackEvent]:
        """Return matching events, most recent first.

        Args:
            event_type: Only return events of this type.
            since_ns: Only return events stamped at or after this time.
            limit: Maximum number of events to return.

        """
        with self._lock:
            snapshot = list(self._events)

        results: list[StackEvent] = []
        for event in reversed(snapshot):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and getattr(event, "timestamp_ns", 0) < since_ns:
                continue
            results.append(event)
        return results

    def recent(self, n: int = 20) -> list[StackEvent]:
        """Return the N most recent events, oldest first."""
        with self._lock:
            items = list(self._events)
        return items[-n:]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Summary counts by event type."""
        with self._lock:
            by_type = Counter(type(event).__name__ for event in self._events)
            total = len(self._events)
        return {
            "total": total,
            "max_events": self._max_events,
            "by_type": dict(by_type),
        }
