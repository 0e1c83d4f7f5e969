"""Source watcher — detects edits to the previewed document.

Watches the document's directory (non-recursively) so that editors which save
through a temp file and rename keep being seen, and reduces every filesystem
change to a ``WatchEvent``.  Only ``modified`` events for the watched file
reach the render pipeline; everything else is dropped here.

Two interchangeable backends produce events:

- ``NativeBackend``: OS notifications (inotify, FSEvents, ReadDirectoryChangesW)
- ``PollingBackend``: periodic stat polling, for network mounts, containers
  and other places where notifications never arrive

Both run through watchfiles.  Which one to use is decided at startup; polling
stays available as the fallback if the native backend fails mid-run.
"""

from __future__ import annotations

import asyncio
import sys
import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Protocol

from watchfiles import Change

from mdlive._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator, Sequence

    from mdlive._types import BackendName, WatchKind


# How long watchfiles may block without yielding.  Idle yields let the
# watcher notice the stop event and signal that the watch is established.
_IDLE_TIMEOUT_MS = 250


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A filesystem change seen next to the watched document.

    Attributes:
        path: Absolute path reported by the backend.
        kind: ``modified`` if the watched file's contents may have changed,
            ``other`` for everything else.

    """

    path: Path
    kind: WatchKind


def classify_change(change: Change, path: Path, target: Path) -> WatchKind:
    """Classify a raw watchfiles change against the watched file.

    A file created at the target path counts as a modification: editors that
    save by renaming a temp file over the original report an add, not a
    modify.  Deletions and changes to any other path are ``other``.

    """
    if change is Change.deleted:
        return "other"
    if path != target and path.resolve() != target:
        return "other"
    return "modified"


class WatchBackend(Protocol):
    """Strategy producing batches of ``WatchEvent`` for one file.

    ``watch()`` blocks, yielding a (possibly empty) set at least every few
    hundred milliseconds, and returns once *stop_event* is set.  A backend
    that cannot watch raises ``OSError`` or ``RuntimeError``.
    """

    name: str

    def watch(self, target: Path, stop_event: threading.Event) -> Iterator[set[WatchEvent]]: ...


class _WatchfilesBackend:
    """watchfiles-driven backend; subclasses pick native or polling mode."""

    name: ClassVar[str] = "watchfiles"
    force_polling: ClassVar[bool] = False

    def __init__(self, *, debounce_ms: int = 50, poll_interval_ms: int = 300) -> None:
        self.debounce_ms = debounce_ms
        self.poll_interval_ms = poll_interval_ms

    def watch(self, target: Path, stop_event: threading.Event) -> Iterator[set[WatchEvent]]:
        from watchfiles import watch

        for raw_changes in watch(
            target.parent,
            watch_filter=None,
            debounce=self.debounce_ms,
            step=50,
            stop_event=stop_event,
            rust_timeout=_IDLE_TIMEOUT_MS,
            yield_on_timeout=True,
            raise_interrupt=False,
            force_polling=self.force_polling,
            poll_delay_ms=self.poll_interval_ms,
            recursive=False,
        ):
            events: set[WatchEvent] = set()
            for change_type, path_str in raw_changes:
                path = Path(path_str)
                events.add(WatchEvent(path=path, kind=classify_change(change_type, path, target)))
            yield events


class NativeBackend(_WatchfilesBackend):
    """OS change notifications."""

    name = "native"
    force_polling = False


class PollingBackend(_WatchfilesBackend):
    """Stat polling every ``poll_interval_ms``.

    The poller compares whole-second mtimes, so a save landing in the same
    second as the one before it goes unreported.  Every batch (idle batches
    included) also compares the target's ``(st_mtime_ns, st_size)`` and adds
    a ``modified`` event when it moved.
    """

    name = "polling"
    force_polling = True

    def watch(self, target: Path, stop_event: threading.Event) -> Iterator[set[WatchEvent]]:
        signature = _stat_signature(target)
        for events in super().watch(target, stop_event):
            current = _stat_signature(target)
            if current is not None and current != signature:
                events.add(WatchEvent(path=target, kind="modified"))
            signature = current
            yield events


def _stat_signature(path: Path) -> tuple[int, int] | None:
    """``(st_mtime_ns, st_size)`` of *path*, or ``None`` if it cannot be stat'ed."""
    try:
        st = path.stat()
    except OSError:
        return None
    return st.st_mtime_ns, st.st_size


def select_backends(
    choice: BackendName,
    *,
    debounce_ms: int = 50,
    poll_interval_ms: int = 300,
) -> tuple[WatchBackend, ...]:
    """Return the backends to try, in order, for a configured *choice*."""
    native = NativeBackend(debounce_ms=debounce_ms, poll_interval_ms=poll_interval_ms)
    polling = PollingBackend(debounce_ms=debounce_ms, poll_interval_ms=poll_interval_ms)
    if choice == "native":
        return (native,)
    if choice == "polling":
        return (polling,)
    return (native, polling)


class SourceWatcher:
    """Watches one document and hands its modifications to the event loop.

    The chosen backend runs in a daemon thread.  Actionable events are
    bridged onto an asyncio queue with ``call_soon_threadsafe`` and consumed
    through ``changes()``.  Events seen before a consumer attaches are kept
    and delivered on attach.

    If the active backend fails mid-run, the watcher moves on to the next
    candidate, or to *fallback* once the candidates are used up, and keeps
    going.  A backend taking over mid-run emits one synthetic ``modified``
    event so that edits saved during the switch are rendered.

    Args:
        path: The document to watch.
        backends: Candidate backends, tried in order.
        fallback: Backend used only after an established backend fails
            mid-run.  Ignored when the failing backend has the same name.
        on_fallback: Called as ``on_fallback(from_name, to_name, exc)`` when
            the watcher abandons a backend.

    """

    def __init__(
        self,
        path: Path,
        backends: Sequence[WatchBackend],
        *,
        fallback: WatchBackend | None = None,
        on_fallback: Callable[[str, str | None, BaseException], None] | None = None,
    ) -> None:
        if not backends:
            msg = "SourceWatcher needs at least one backend"
            raise ValueError(msg)
        self._path = Path(path).resolve()
        self._backends = tuple(backends)
        self._fallback = fallback
        self._on_fallback = on_fallback
        self._queue: asyncio.Queue[WatchEvent] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._backlog: deque[WatchEvent] = deque()
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._established = threading.Event()
        self._thread: threading.Thread | None = None
        self._backend: WatchBackend | None = None
        self._error: BaseException | None = None

    @property
    def path(self) -> Path:
        """Absolute path of the watched document."""
        return self._path

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    @property
    def backend_name(self) -> str | None:
        """Name of the backend currently producing events."""
        backend = self._backend
        return backend.name if backend is not None else None

    def start(self, timeout: float = 5.0) -> None:
        """Start watching and wait until a backend is established.

        Raises:
            WatchError: If no backend could watch the document.

        """
        if self.is_running:
            return

        self._stop_event.clear()
        self._established.clear()
        self._backend = None
        self._error = None
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="mdlive-watcher",
            daemon=True,
        )
        self._thread.start()

        if not self._established.wait(timeout):
            self.stop()
            msg = f"Timed out after {timeout}s establishing a watch on {self._path}"
            raise WatchError(msg)
        if self._error is not None:
            self.stop()
            msg = f"Cannot watch {self._path}: {self._error}"
            raise WatchError(msg) from self._error

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    async def changes(self) -> AsyncIterator[WatchEvent]:
        """Async iterator yielding ``modified`` events as they occur.

        Binds the watcher to the running loop on first use.  Ends once the
        watcher is stopped and the queue is drained.

        """
        with self._lock:
            self._loop = asyncio.get_running_loop()
            while self._backlog:
                self._queue.put_nowait(self._backlog.popleft())

        while self.is_running or not self._queue.empty():
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.5)
                yield event
            except TimeoutError:
                if not self.is_running:
                    break

    def _deliver(self, event: WatchEvent) -> None:
        """Hand one event to the consuming loop (called on the watcher thread)."""
        with self._lock:
            loop = self._loop
            if loop is None:
                self._backlog.append(event)
                return
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop already closed: shutting down.
            pass

    def _watch_loop(self) -> None:
        """Background thread: run backends in order, bridging events to the loop."""
        remaining = list(self._backends)
        while remaining and not self._stop_event.is_set():
            backend = remaining.pop(0)
            try:
                for events in backend.watch(self._path, self._stop_event):
                    if self._backend is not backend:
                        self._backend = backend
                        if self._established.is_set():
                            # Taking over mid-run: edits during the switch went unseen.
                            self._deliver(WatchEvent(path=self._path, kind="modified"))
                        self._established.set()
                    for event in events:
                        if event.kind == "modified":
                            self._deliver(event)
                return
            except (OSError, RuntimeError) as exc:
                if (
                    not remaining
                    and self._backend is backend
                    and self._fallback is not None
                    and self._fallback.name != backend.name
                ):
                    remaining.append(self._fallback)
                successor = remaining[0].name if remaining else None
                if successor is not None:
                    print(
                        f"  Watch error ({backend.name}): {exc}; falling back to {successor}",
                        file=sys.stderr,
                    )
                else:
                    print(f"  Watch error ({backend.name}): {exc}", file=sys.stderr)
                if self._on_fallback is not None:
                    self._on_fallback(backend.name, successor, exc)
                self._backend = None
                if not remaining:
                    self._error = exc
                    self._established.set()
