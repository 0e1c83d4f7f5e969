"""Tests for mdlive.app — preview() wiring and render_static()."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from chirp import App

from mdlive._errors import ConfigError, ServeError, SourceError
from mdlive.app import STDIN_TITLE, create_app, preview, render_static
from mdlive.config import LiveConfig
from mdlive.content.store import ContentStore
from mdlive.content.watcher import PollingBackend, SourceWatcher
from mdlive.observability import StackCollector
from mdlive.reactive.broadcaster import Broadcaster
from mdlive.reactive.pipeline import RevisionPipeline


class TestCreateApp:
    """create_app() — server configuration."""

    def test_single_in_process_worker(
        self, config: LiveConfig, store: ContentStore, broadcaster: Broadcaster,
    ) -> None:
        app = create_app(config, store, broadcaster)
        assert app.config.workers == 1
        assert app.config.worker_mode == "async"

    def test_binds_configured_address(
        self, doc: Path, store: ContentStore, broadcaster: Broadcaster,
    ) -> None:
        config = LiveConfig(source=doc, host="0.0.0.0", port=4100, open_browser=False)
        app = create_app(config, store, broadcaster)
        assert (app.config.host, app.config.port) == ("0.0.0.0", 4100)


class TestRenderStatic:
    """render_static() — one-shot rendering to a file."""

    def test_writes_output(self, doc: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        assert render_static(doc, output=out) == out
        html = out.read_text(encoding="utf-8")
        assert "<title>README.md</title>" in html
        assert "Hi" in html
        assert "EventSource" not in html

    def test_temp_file(self, doc: Path) -> None:
        path = render_static(doc)
        try:
            assert path.name.startswith("mdlive_preview_")
            assert path.suffix == ".html"
            assert "Hi" in path.read_text(encoding="utf-8")
        finally:
            path.unlink()

    def test_text_input(self, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        render_static(text="# Piped\n", output=out)
        html = out.read_text(encoding="utf-8")
        assert f"<title>{STDIN_TITLE}</title>" in html
        assert "Piped" in html

    def test_custom_title(self, doc: Path, tmp_path: Path) -> None:
        out = tmp_path / "out.html"
        render_static(doc, output=out, title="Notes")
        assert "<title>Notes</title>" in out.read_text(encoding="utf-8")

    def test_missing_source(self, tmp_path: Path) -> None:
        with pytest.raises(SourceError, match="Cannot read"):
            render_static(tmp_path / "missing.md")

    def test_nothing_to_render(self) -> None:
        with pytest.raises(SourceError):
            render_static()

    def test_unwritable_output(self, doc: Path, tmp_path: Path) -> None:
        with pytest.raises(SourceError, match="Cannot write"):
            render_static(doc, output=tmp_path / "no" / "such" / "dir.html")


class TestPreview:
    """preview() — startup sequence with the server stubbed out."""

    def test_runs_server_with_collector(self, doc: Path) -> None:
        with patch.object(App, "run") as run:
            preview(doc, live=False, open_browser=False, port=4321)

        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 4321
        assert isinstance(kwargs["lifecycle_collector"], StackCollector)

    def test_live_starts_watcher(self, doc: Path) -> None:
        with (
            patch.object(App, "run"),
            patch.object(SourceWatcher, "start") as start,
        ):
            preview(doc, open_browser=False)
        start.assert_called_once()

    def test_opens_browser_at_url(self, doc: Path) -> None:
        opened: list[str] = []

        class _Opener:
            name = "fake"

            def open(self, url: str) -> bool:
                opened.append(url)
                return True

        with (
            patch.object(App, "run"),
            patch("mdlive.browser.select_opener", return_value=_Opener()),
        ):
            preview(doc, live=False, port=4322)

        assert opened == ["http://127.0.0.1:4322/"]

    def test_missing_source(self, tmp_path: Path) -> None:
        with patch.object(App, "run") as run:
            with pytest.raises(SourceError):
                preview(tmp_path / "missing.md", open_browser=False)
        run.assert_not_called()

    def test_bad_config(self, doc: Path) -> None:
        with pytest.raises(ConfigError):
            preview(doc, watch_backend="fsevents", open_browser=False)

    def test_bind_failure(self, doc: Path) -> None:
        with patch.object(App, "run", side_effect=OSError("address in use")):
            with pytest.raises(ServeError, match="address in use"):
                preview(doc, live=False, open_browser=False)

    def test_watcher_starts_before_first_render(self, doc: Path) -> None:
        order: list[str] = []

        def fake_start(self: SourceWatcher, timeout: float = 5.0) -> None:
            order.append("watch")

        def fake_refresh(self: RevisionPipeline) -> int:
            order.append("render")
            return 1

        with (
            patch.object(App, "run"),
            patch.object(SourceWatcher, "start", autospec=True, side_effect=fake_start),
            patch.object(RevisionPipeline, "refresh", autospec=True, side_effect=fake_refresh),
        ):
            preview(doc, open_browser=False)

        assert order == ["watch", "render"]

    def test_watcher_has_polling_fallback(self, doc: Path) -> None:
        with (
            patch.object(App, "run"),
            patch.object(SourceWatcher, "start", autospec=True) as start,
        ):
            preview(doc, open_browser=False, watch_backend="native", poll_interval_ms=150)

        watcher = start.call_args.args[0]
        assert isinstance(watcher._fallback, PollingBackend)
        assert watcher._fallback.poll_interval_ms == 150

    def test_missing_source_stops_watcher(self, tmp_path: Path) -> None:
        (tmp_path / "notes.md").write_text("x", encoding="utf-8")
        with (
            patch.object(App, "run"),
            patch.object(SourceWatcher, "start"),
            patch.object(SourceWatcher, "stop") as stop,
            patch.object(RevisionPipeline, "refresh", side_effect=FileNotFoundError("gone")),
        ):
            with pytest.raises(SourceError, match="gone"):
                preview(tmp_path / "notes.md", open_browser=False)
        stop.assert_called_once()
