"""Content store — the single source of truth for the current preview.

Holds exactly one immutable ``ContentRevision`` at a time.  Publishing builds
a new revision and swaps the reference; readers take the reference without
locking.  Because revisions are frozen, a reader always sees a whole
revision, old or new, never a mix of the two.

Thread Safety:
    ``publish()`` holds a ``threading.Lock`` only for the version bump and
    reference swap, never for I/O.  ``snapshot()`` is lock-free once the first
    revision exists.

"""

from __future__ import annotations

import threading
from dataclasses import dataclass

from mdlive._errors import NotReadyError


@dataclass(frozen=True, slots=True)
class ContentRevision:
    """One immutable, versioned rendering of the source document.

    Attributes:
        html: Rendered HTML fragment.
        version: Revision number, starting at 1 for the first publish.

    """

    html: str
    version: int


class ContentStore:
    """Versioned holder for the latest rendered document.

    One writer (the render pipeline) and any number of concurrent readers
    (request handlers).  Versions increase by exactly one per publish.

    """

    __slots__ = ("_current", "_lock", "_ready")

    def __init__(self) -> None:
        self._current: ContentRevision | None = None
        self._lock = threading.Lock()
        self._ready = threading.Event()

    @property
    def ready(self) -> bool:
        """Whether at least one revision has been published."""
        return self._ready.is_set()

    @property
    def version(self) -> int:
        """Version of the current revision, 0 before the first publish."""
        current = self._current
        return current.version if current is not None else 0

    def publish(self, html: str) -> int:
        """Install a new revision and return its version.

        Publishing identical HTML twice is allowed and still bumps the
        version.

        """
        with self._lock:
            previous = self._current
            version = previous.version + 1 if previous is not None else 1
            self._current = ContentRevision(html=html, version=version)
        self._ready.set()
        return version

    def snapshot(self, timeout: float | None = None) -> ContentRevision:
        """Return the current revision.

        Blocks until the first revision is published.  With a *timeout*,
        raises ``NotReadyError`` if none arrives in time.

        """
        current = self._current
        if current is not None:
            return current
        if not self._ready.wait(timeout):
            msg = f"no revision published within {timeout}s"
            raise NotReadyError(msg)
        current = self._current
        assert current is not None
        return current
