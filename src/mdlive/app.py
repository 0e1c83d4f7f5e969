"""mdlive application — wires watcher, pipeline, store and server together.

The two public functions (preview, render_static) are the primary entry
points.  ``preview`` owns the process-wide ContentStore and Broadcaster and
hands them to the pipeline (the only writer) and the server (readers).
"""

from __future__ import annotations

import asyncio
import os
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING

from mdlive._errors import ServeError, SourceError
from mdlive.config_loader import load_config

if TYPE_CHECKING:
    from chirp import App

    from mdlive.config import LiveConfig
    from mdlive.content.store import ContentStore
    from mdlive.content.watcher import SourceWatcher
    from mdlive.observability.collector import StackCollector
    from mdlive.reactive.broadcaster import Broadcaster
    from mdlive.reactive.pipeline import RevisionPipeline


# Title used when the document comes from stdin.
STDIN_TITLE = "New file"


def create_app(
    config: LiveConfig,
    store: ContentStore,
    broadcaster: Broadcaster,
    collector: StackCollector | None = None,
) -> App:
    """Create a Chirp App serving the preview routes.

    No templates, static directory or htmx helpers: every response is built
    by ``PreviewServer``.  The server runs a single in-process worker: the
    store and broadcaster live in this process and are shared with the
    pipeline task.

    """
    from chirp import App, AppConfig

    from mdlive.server import PreviewServer

    app_config = AppConfig(
        debug=False,
        host=config.host,
        port=config.port,
        static_dir=None,
        safe_target=False,
        sse_lifecycle=False,
        workers=1,
        worker_mode="async",
    )
    app = App(config=app_config)
    PreviewServer(app, store, broadcaster, config, collector).register()
    return app


def _initial_revision(pipeline: RevisionPipeline) -> int:
    """Render the first revision before the server accepts connections.

    Raises:
        SourceError: If the document cannot be read.

    """
    try:
        return pipeline.refresh()
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read {pipeline.path}: {exc}"
        raise SourceError(msg) from exc


def _start_watcher(
    app: App,
    watcher: SourceWatcher,
    pipeline: RevisionPipeline,
    broadcaster: Broadcaster,
) -> None:
    """Wire the SourceWatcher to the pipeline via Chirp lifecycle hooks.

    Registers ``on_startup`` / ``on_shutdown`` hooks on *app* so the pipeline
    task lives inside the event loop managed by Pounce.

    Flow:
        on_startup  → spawn the ``pipeline.run(watcher)`` task
        file change → watcher thread → loop queue → pipeline.handle_change()
        on_shutdown → cancel consumer task, stop watcher, close viewers

    """
    _task: asyncio.Task[None] | None = None

    @app.on_startup
    async def _start_change_consumer() -> None:
        nonlocal _task
        _task = asyncio.create_task(pipeline.run(watcher))

    @app.on_shutdown
    async def _stop_change_consumer() -> None:
        if _task is not None and not _task.done():
            _task.cancel()
        await asyncio.to_thread(watcher.stop)
        broadcaster.close_all()


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def preview(source: str | Path, **kwargs: object) -> None:
    """Serve a live preview of *source* until interrupted.

    Starts watching the document, renders it once, opens the browser and
    runs the Pounce server.  Every saved edit is re-rendered and every open
    tab reloads.

    Args:
        source: Path to the Markdown file.
        **kwargs: Override LiveConfig fields (and ``config_dir``).

    Raises:
        ConfigError: Bad configuration.
        SourceError: The document cannot be read at startup.
        WatchError: No watch backend could be established.
        ServeError: The server could not bind.

    """
    from mdlive.banner import print_banner
    from mdlive.browser import select_opener
    from mdlive.content.store import ContentStore
    from mdlive.content.watcher import PollingBackend, SourceWatcher, select_backends
    from mdlive.observability import EventLog, StackCollector
    from mdlive.reactive.broadcaster import Broadcaster
    from mdlive.reactive.pipeline import RevisionPipeline

    config_dir = kwargs.pop("config_dir", None)
    config = load_config(Path(source), config_dir, **kwargs)  # type: ignore[arg-type]
    t0 = time.perf_counter()

    store = ContentStore()
    broadcaster = Broadcaster(queue_size=config.queue_size)
    collector = StackCollector(EventLog())
    pipeline = RevisionPipeline(config.source, store, broadcaster, collector=collector)

    # The watcher starts before the first render; edits saved in between
    # wait in its backlog.
    watcher: SourceWatcher | None = None
    if config.live:
        watcher = SourceWatcher(
            config.source,
            select_backends(
                config.watch_backend,
                debounce_ms=config.debounce_ms,
                poll_interval_ms=config.poll_interval_ms,
            ),
            fallback=PollingBackend(
                debounce_ms=config.debounce_ms,
                poll_interval_ms=config.poll_interval_ms,
            ),
            on_fallback=collector.record_fallback,
        )
        watcher.start()

    try:
        version = _initial_revision(pipeline)
    except SourceError:
        if watcher is not None:
            watcher.stop()
        raise

    app = create_app(config, store, broadcaster, collector)

    backend_name: str | None = None
    if watcher is not None:
        backend_name = watcher.backend_name
        _start_watcher(app, watcher, pipeline, broadcaster)

    load_ms = (time.perf_counter() - t0) * 1000
    print_banner(config, version=version, backend=backend_name, load_ms=load_ms)

    select_opener(enabled=config.open_browser).open(config.url)

    # Pounce connection events flow into the same EventLog as pipeline events.
    try:
        app.run(host=config.host, port=config.port, lifecycle_collector=collector)
    except OSError as exc:
        if watcher is not None:
            watcher.stop()
        msg = f"Cannot serve on {config.host}:{config.port}: {exc}"
        raise ServeError(msg) from exc


def render_static(
    source: str | Path | None = None,
    *,
    output: str | Path | None = None,
    text: str | None = None,
    title: str | None = None,
) -> Path:
    """Render a document once to a self-contained HTML file.

    Reads *source*, or uses *text* (for stdin) when no source is given.  The
    document is written to *output*, or to a new ``mdlive_preview_*.html``
    file in the temp directory.

    Returns:
        Path of the written file.

    Raises:
        SourceError: The document cannot be read or the output cannot be
            written.

    """
    from mdlive.content.render import render_markdown
    from mdlive.document import build_document
    from mdlive.reactive.pipeline import read_source

    if source is not None:
        path = Path(source)
        try:
            text = read_source(path)
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Cannot read {path}: {exc}"
            raise SourceError(msg) from exc
        title = title or path.name
    elif text is None:
        msg = "render_static needs a source path or text"
        raise SourceError(msg)

    document = build_document(title or STDIN_TITLE, render_markdown(text), live=False)

    try:
        if output is not None:
            out_path = Path(output)
            out_path.write_text(document, encoding="utf-8")
        else:
            fd, name = tempfile.mkstemp(prefix="mdlive_preview_", suffix=".html")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(document)
            out_path = Path(name)
    except OSError as exc:
        msg = f"Cannot write preview: {exc}"
        raise SourceError(msg) from exc
    return out_path
