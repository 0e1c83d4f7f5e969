"""Shared test fixtures for mdlive."""

from __future__ import annotations

from pathlib import Path

import pytest

from mdlive.config import LiveConfig
from mdlive.content.store import ContentStore
from mdlive.observability import EventLog, StackCollector
from mdlive.reactive.broadcaster import Broadcaster


@pytest.fixture
def doc(tmp_path: Path) -> Path:
    """A Markdown document in a temp directory, starting as ``# Hi``."""
    path = tmp_path / "README.md"
    path.write_text("# Hi\n", encoding="utf-8")
    return path


@pytest.fixture
def config(doc: Path) -> LiveConfig:
    """A LiveConfig for *doc* that never opens a browser."""
    return LiveConfig(source=doc, open_browser=False)


@pytest.fixture
def store() -> ContentStore:
    return ContentStore()


@pytest.fixture
def broadcaster() -> Broadcaster:
    return Broadcaster()


@pytest.fixture
def collector() -> StackCollector:
    return StackCollector(EventLog())
