"""Content layer — the previewed document as versioned data.

Handles file watching, Markdown rendering, and the store holding the
current rendered revision.
"""

from mdlive.content.render import render_markdown
from mdlive.content.store import ContentRevision, ContentStore
from mdlive.content.watcher import (
    NativeBackend,
    PollingBackend,
    SourceWatcher,
    WatchEvent,
    select_backends,
)

__all__ = [
    "ContentRevision",
    "ContentStore",
    "NativeBackend",
    "PollingBackend",
    "SourceWatcher",
    "WatchEvent",
    "render_markdown",
    "select_backends",
]
