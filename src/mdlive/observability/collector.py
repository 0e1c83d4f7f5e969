"""Stack collector — one sink for pipeline, watcher and server events.

Implements Pounce's ``LifecycleCollector`` protocol (``record(event)``) so it
can be handed to ``app.run(lifecycle_collector=...)``; connection events then
land in the same log as the render pipeline's.

Thread Safety:
    Delegates to ``EventLog``, which is internally locked.

"""

from __future__ import annotations

from typing import Any

from mdlive.observability.events import (
    BackendFallback,
    RenderFailed,
    RevisionPublished,
    SourceReadFailed,
    ViewerConnected,
    ViewerDisconnected,
    now_ns,
)
from mdlive.observability.log import EventLog


class StackCollector:
    """Typed recording helpers over an ``EventLog``.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: Any) -> None:
        """Pounce ``LifecycleCollector`` protocol: store the event as-is."""
        self._log.append(event)

    def record_publish(
        self,
        path: str,
        version: int,
        *,
        viewers_notified: int = 0,
        read_ms: float = 0.0,
        render_ms: float = 0.0,
    ) -> None:
        self._log.append(
            RevisionPublished(
                path=path,
                version=version,
                viewers_notified=viewers_notified,
                read_ms=read_ms,
                render_ms=render_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_read_failure(self, path: str, exc: BaseException) -> None:
        self._log.append(SourceReadFailed(path=path, error=str(exc), timestamp_ns=now_ns()))

    def record_render_failure(self, path: str, exc: BaseException) -> None:
        self._log.append(RenderFailed(path=path, error=str(exc), timestamp_ns=now_ns()))

    def record_fallback(
        self, from_backend: str, to_backend: str | None, exc: BaseException,
    ) -> None:
        """Record a watcher backend change.  Matches ``SourceWatcher(on_fallback=...)``."""
        self._log.append(
            BackendFallback(
                from_backend=from_backend,
                to_backend=to_backend,
                error=str(exc),
                timestamp_ns=now_ns(),
            )
        )

    def record_viewer(self, client_id: str, viewers: int, *, connected: bool) -> None:
        """Record a viewer joining or leaving the push stream."""
        event_cls = ViewerConnected if connected else ViewerDisconnected
        self._log.append(event_cls(client_id=client_id, viewers=viewers, timestamp_ns=now_ns()))
