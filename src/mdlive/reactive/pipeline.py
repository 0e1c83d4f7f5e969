"""Revision pipeline — connects the watcher to the store and broadcaster.

Runs once per actionable change:
    1. SourceWatcher reports a ``modified`` WatchEvent
    2. The whole source file is read (UTF-8)
    3. The Markdown is rendered to an HTML fragment
    4. The fragment is published to the ContentStore (version + 1)
    5. The Broadcaster offers a reload signal to every viewer

A failed read or render stops the run before step 4: the previous revision
stays authoritative and no viewer is signalled.  The pipeline is the only
writer to the store.
"""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

from mdlive.content.render import render_markdown

if TYPE_CHECKING:
    from mdlive._types import RenderFunc
    from mdlive.content.store import ContentStore
    from mdlive.content.watcher import SourceWatcher, WatchEvent
    from mdlive.observability.collector import StackCollector
    from mdlive.reactive.broadcaster import Broadcaster


def read_source(path: Path) -> str:
    """Read the whole document as UTF-8.

    Raises:
        OSError: The file is missing or unreadable.
        UnicodeDecodeError: The file is not valid UTF-8.

    """
    return path.read_text(encoding="utf-8")


class RevisionPipeline:
    """Re-renders the document and publishes each new revision.

    Args:
        path: The document being previewed.
        store: Content store to publish into.
        broadcaster: Broadcaster notified after every publish.
        render: Markdown-to-HTML function.
        collector: Optional StackCollector for structured events.

    """

    def __init__(
        self,
        path: Path,
        store: ContentStore,
        broadcaster: Broadcaster,
        *,
        render: RenderFunc = render_markdown,
        collector: StackCollector | None = None,
    ) -> None:
        self._path = Path(path)
        self._store = store
        self._broadcaster = broadcaster
        self._render = render
        self._collector = collector

    @property
    def path(self) -> Path:
        return self._path

    def refresh(self) -> int:
        """Read, render and publish synchronously.  Used for the first revision.

        Returns:
            The published version.

        Raises:
            OSError, UnicodeDecodeError: The source could not be read.

        """
        html = self._render(read_source(self._path))
        return self._store.publish(html)

    async def handle_change(self, event: WatchEvent) -> int | None:
        """Process one change event through the pipeline.

        Returns:
            The new version, or ``None`` if the change was dropped.

        """
        if event.kind != "modified":
            return None

        name = self._path.name
        path_str = str(self._path)

        start = time.perf_counter()
        try:
            source = await asyncio.to_thread(read_source, self._path)
        except (OSError, UnicodeDecodeError) as exc:
            print(f"  Read error: {name}: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_read_failure(path_str, exc)
            return None
        read_ms = (time.perf_counter() - start) * 1000

        start = time.perf_counter()
        try:
            html = await asyncio.to_thread(self._render, source)
        except Exception as exc:
            print(f"  Render error: {name}: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_render_failure(path_str, exc)
            return None
        render_ms = (time.perf_counter() - start) * 1000

        version = self._store.publish(html)
        notified = self._broadcaster.notify()

        if self._collector is not None:
            self._collector.record_publish(
                path_str,
                version,
                viewers_notified=notified,
                read_ms=read_ms,
                render_ms=render_ms,
            )
        return version

    async def run(self, watcher: SourceWatcher) -> None:
        """Consume watcher changes until the watcher stops or the task is cancelled.

        An unexpected failure in one pass is reported and the next change is
        still processed.
        """
        async for event in watcher.changes():
            try:
                await self.handle_change(event)
            except Exception as exc:
                print(f"  Pipeline error: {exc}", file=sys.stderr)
