"""Preview server — the document snapshot and the push stream as Chirp routes.

Three endpoints on a Chirp ``App``:

- ``GET /``: the current revision wrapped in the document template
- ``GET /events``: a Server-Sent Events stream of ``reload`` directives
- ``GET /__mdlive/stats``: version, viewer count, event-log summary and the
  most recent events (JSON)

Handlers only read: ``/`` takes a lock-free snapshot of the store and
``/events`` waits on its own subscriber.  Nothing here writes content.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from mdlive.document import build_document
from mdlive.reactive.hmr import SSE_ENDPOINT

if TYPE_CHECKING:
    from chirp import App

    from mdlive.config import LiveConfig
    from mdlive.content.store import ContentStore
    from mdlive.observability.collector import StackCollector
    from mdlive.observability.events import StackEvent
    from mdlive.reactive.broadcaster import Broadcaster


ROOT_ENDPOINT = "/"
STATS_ENDPOINT = "/__mdlive/stats"

# Response header carrying the served revision number.
VERSION_HEADER = "X-Mdlive-Version"

# Events included in the stats payload.
RECENT_EVENTS = 20


def _event_payload(event: StackEvent) -> dict[str, Any]:
    return {"type": type(event).__name__, **asdict(event)}


class PreviewServer:
    """Registers the preview routes on a Chirp app.

    Args:
        app: Chirp App to register routes on (must not yet be frozen).
        store: Content store to read snapshots from.
        broadcaster: Broadcaster handing out viewer subscriptions.
        config: Resolved LiveConfig.
        collector: Optional StackCollector for viewer events and stats.

    """

    def __init__(
        self,
        app: App,
        store: ContentStore,
        broadcaster: Broadcaster,
        config: LiveConfig,
        collector: StackCollector | None = None,
    ) -> None:
        self._app = app
        self._store = store
        self._broadcaster = broadcaster
        self._config = config
        self._collector = collector

    def register(self) -> None:
        """Register every preview route."""
        self.register_document_endpoint()
        if self._config.live:
            self.register_sse_endpoint()
        if self._collector is not None:
            self.register_stats_endpoint()

    def render_current(self) -> tuple[str, int]:
        """Return the full document for the current revision and its version."""
        revision = self._store.snapshot()
        document = build_document(
            self._config.document_title,
            revision.html,
            live=self._config.live,
        )
        return document, revision.version

    def register_document_endpoint(self) -> None:
        """Register ``GET /``."""
        from chirp import Response

        def document_handler() -> Any:
            body, version = self.render_current()
            return Response(body=body).with_header(VERSION_HEADER, str(version))

        document_handler.__name__ = "mdlive_document"
        document_handler.__qualname__ = "PreviewServer.mdlive_document"

        self._app.route(ROOT_ENDPOINT, name="mdlive:document")(document_handler)

    def register_sse_endpoint(self) -> None:
        """Register the ``/events`` push stream.

        Each connection gets its own subscriber.  The stream yields one
        ``reload`` directive per received signal; Chirp adds keep-alive
        comments every ``heartbeat_interval`` seconds.  When the client goes
        away the producer is cancelled and the ``finally`` block removes the
        subscriber.

        """
        from chirp import EventStream

        broadcaster = self._broadcaster
        collector = self._collector
        heartbeat = self._config.heartbeat_interval

        async def sse_handler() -> Any:
            subscriber = broadcaster.subscribe()
            if collector is not None:
                collector.record_viewer(
                    subscriber.client_id, broadcaster.subscriber_count, connected=True,
                )

            async def generate():  # type: ignore[return]
                try:
                    async for directive in subscriber.stream():
                        yield directive
                finally:
                    broadcaster.unsubscribe(subscriber)
                    if collector is not None:
                        collector.record_viewer(
                            subscriber.client_id,
                            broadcaster.subscriber_count,
                            connected=False,
                        )

            return EventStream(generate(), heartbeat_interval=heartbeat)

        sse_handler.__name__ = "mdlive_events"
        sse_handler.__qualname__ = "PreviewServer.mdlive_events"

        self._app.route(SSE_ENDPOINT, name="mdlive:events")(sse_handler)

    def register_stats_endpoint(self) -> None:
        """Register the ``/__mdlive/stats`` JSON endpoint."""
        from chirp import Response

        from mdlive.observability.events import RevisionPublished

        collector = self._collector
        assert collector is not None

        def stats_handler() -> Any:
            payload = json.dumps(
                {
                    "source": str(self._config.source),
                    "version": self._store.version,
                    "viewers": self._broadcaster.subscriber_count,
                    "event_log": collector.log.stats(),
                    "last_publish": [
                        _event_payload(e)
                        for e in collector.log.query(event_type=RevisionPublished, limit=1)
                    ],
                    "recent": [_event_payload(e) for e in collector.log.recent(RECENT_EVENTS)],
                },
                indent=2,
                default=str,
            )
            return Response(
                body=payload,
                status=200,
                content_type="application/json",
            )

        stats_handler.__name__ = "mdlive_stats"
        stats_handler.__qualname__ = "PreviewServer.mdlive_stats"

        self._app.route(STATS_ENDPOINT, name="mdlive:stats")(stats_handler)
