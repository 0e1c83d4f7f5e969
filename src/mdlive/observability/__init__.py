"""Observability — structured events from the whole preview stack.

Aggregates events from:
- **Pounce**: Connection lifecycle (open, request, response, close)
- **Watcher**: Backend fallbacks
- **Pipeline**: Published revisions and absorbed read/render failures
- **Server**: Viewers joining and leaving the push stream

Quick Start:
    >>> from mdlive.observability import StackCollector, EventLog
    >>> collector = StackCollector(EventLog())
    >>> collector.record_publish("/docs/README.md", 2, viewers_notified=1)

"""

from mdlive.observability.collector import StackCollector
from mdlive.observability.events import (
    BackendFallback,
    RenderFailed,
    RevisionPublished,
    SourceReadFailed,
    StackEvent,
    ViewerConnected,
    ViewerDisconnected,
    now_ns,
)
from mdlive.observability.log import EventLog

__all__ = [
    "BackendFallback",
    "EventLog",
    "RenderFailed",
    "RevisionPublished",
    "SourceReadFailed",
    "StackCollector",
    "StackEvent",
    "ViewerConnected",
    "ViewerDisconnected",
    "now_ns",
]
