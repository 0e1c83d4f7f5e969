"""Tests for mdlive.content.store — versioned, tear-free revisions."""

from __future__ import annotations

import threading

import pytest

from mdlive._errors import NotReadyError
from mdlive.content.store import ContentRevision, ContentStore


class TestContentRevision:
    """Verify ContentRevision is immutable."""

    def test_frozen(self) -> None:
        rev = ContentRevision(html="<p>x</p>", version=1)
        with pytest.raises(AttributeError):
            rev.html = "<p>y</p>"  # type: ignore[misc]

    def test_equality(self) -> None:
        assert ContentRevision("<p>x</p>", 1) == ContentRevision("<p>x</p>", 1)


class TestPublish:
    """publish() — version bumps and readiness."""

    def test_not_ready_before_publish(self, store: ContentStore) -> None:
        assert store.ready is False
        assert store.version == 0

    def test_first_publish_is_version_one(self, store: ContentStore) -> None:
        assert store.publish("<h1>Hi</h1>") == 1
        assert store.ready is True
        assert store.version == 1

    def test_versions_increase_by_one(self, store: ContentStore) -> None:
        versions = [store.publish(f"<p>{i}</p>") for i in range(5)]
        assert versions == [1, 2, 3, 4, 5]

    def test_identical_content_still_bumps(self, store: ContentStore) -> None:
        store.publish("<p>same</p>")
        store.publish("<p>same</p>")
        rev = store.snapshot()
        assert rev.version == 2
        assert rev.html == "<p>same</p>"


class TestSnapshot:
    """snapshot() — latest revision, blocking until ready."""

    def test_returns_latest(self, store: ContentStore) -> None:
        store.publish("<p>old</p>")
        store.publish("<p>new</p>")
        assert store.snapshot() == ContentRevision("<p>new</p>", 2)

    def test_timeout_before_first_publish(self, store: ContentStore) -> None:
        with pytest.raises(NotReadyError):
            store.snapshot(timeout=0.01)

    def test_blocks_until_first_publish(self, store: ContentStore) -> None:
        result: list[ContentRevision] = []

        def reader() -> None:
            result.append(store.snapshot(timeout=5.0))

        thread = threading.Thread(target=reader)
        thread.start()
        store.publish("<p>first</p>")
        thread.join(timeout=5.0)

        assert result == [ContentRevision("<p>first</p>", 1)]


class TestConcurrency:
    """Readers racing one writer never see torn or regressing revisions."""

    def test_no_torn_reads_and_monotonic_versions(self, store: ContentStore) -> None:
        store.publish("<p>0</p>")
        stop = threading.Event()
        failures: list[str] = []

        def reader() -> None:
            last = 0
            while not stop.is_set():
                rev = store.snapshot()
                if rev.html != f"<p>{rev.version - 1}</p>":
                    failures.append(f"torn: {rev}")
                if rev.version < last:
                    failures.append(f"regressed: {rev.version} < {last}")
                last = rev.version

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for i in range(1, 2_000):
            store.publish(f"<p>{i}</p>")
        stop.set()
        for t in readers:
            t.join(timeout=5.0)

        assert failures == []
        assert store.version == 2_000
