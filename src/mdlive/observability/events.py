"""Event model for preview observability.

Defines event types for the render pipeline, the watcher, and viewer
connections.  Pounce lifecycle events are stored as-is alongside these.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Render pipeline events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RevisionPublished:
    """A re-render was committed to the content store.

    Attributes:
        path: Source file path.
        version: Version number of the new revision.
        viewers_notified: Subscribers the reload signal was offered to.
        read_ms: Time spent reading the source file.
        render_ms: Time spent rendering Markdown to HTML.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    version: int
    viewers_notified: int
    read_ms: float
    render_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SourceReadFailed:
    """The source file could not be read; the previous revision stays.

    Attributes:
        path: Source file path.
        error: Exception message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    error: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """The render function raised; the previous revision stays."""

    path: str
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Watcher events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class BackendFallback:
    """The watcher abandoned a backend.

    Attributes:
        from_backend: Name of the backend that failed.
        to_backend: Name of the backend taking over, or ``None`` if watching
            stopped.
        error: Exception message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    from_backend: str
    to_backend: str | None
    error: str
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Viewer events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ViewerConnected:
    """A viewer opened the push stream."""

    client_id: str
    viewers: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class ViewerDisconnected:
    """A viewer's push stream closed and its subscriber was removed."""

    client_id: str
    viewers: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type StackEvent = (
    RevisionPublished
    | SourceReadFailed
    | RenderFailed
    | BackendFallback
    | ViewerConnected
    | ViewerDisconnected
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
