"""Tests for the response inbox watcher."""

import threading
import time
from types import SimpleNamespace

import pytest

from chatpatch.api import ResponseAnalyzer
from chatpatch.storage.file_store import LocalFileStore
from chatpatch.watcher import ResponseFileHandler, ResponseInboxWatcher

RESPONSE = "Create utils/math.js:\n```js\nfunction add(a,b){return a+b;}\n```"


@pytest.fixture
def analyzer(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    return ResponseAnalyzer(LocalFileStore(str(project)))


@pytest.fixture
def inbox(tmp_path):
    path = tmp_path / "inbox"
    path.mkdir()
    return path


def _handler(analyzer, calls, debounce=0.0, callback=None):
    def _record(path, result):
        calls.append((path, result))

    return ResponseFileHandler(
        analyzer, callback or _record, debounce_seconds=debounce,
    )


class TestResponseFileHandler:
    def test_analyses_response(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls)
        path = inbox / "reply.md"
        path.write_text(RESPONSE)

        result = handler.handle_path(str(path))

        assert result is not None
        assert len(result.file_changes) == 1
        assert calls == [(str(path), result)]

    def test_ignores_other_extensions(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls)
        path = inbox / "reply.json"
        path.write_text(RESPONSE)

        assert handler.handle_path(str(path)) is None
        assert calls == []

    def test_unchanged_content_skipped(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls)
        path = inbox / "reply.txt"
        path.write_text(RESPONSE)

        assert handler.handle_path(str(path)) is not None
        assert handler.handle_path(str(path)) is None
        path.write_text(RESPONSE + "\n\nThanks!")
        assert handler.handle_path(str(path)) is not None
        assert len(calls) == 2

    def test_debounce(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls, debounce=60)
        path = inbox / "reply.md"
        path.write_text(RESPONSE)

        assert handler.handle_path(str(path)) is not None
        path.write_text(RESPONSE + "\nmore")
        assert handler.handle_path(str(path)) is None
        assert len(calls) == 1

    def test_unreadable_file(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls)
        assert handler.handle_path(str(inbox / "gone.md")) is None
        assert calls == []

    def test_callback_failure_is_logged(self, analyzer, inbox, caplog):
        def _boom(path, result):
            raise RuntimeError("callback exploded")

        handler = _handler(analyzer, [], callback=_boom)
        path = inbox / "reply.md"
        path.write_text(RESPONSE)

        with caplog.at_level("WARNING", logger="chatpatch.watcher"):
            result = handler.handle_path(str(path))

        assert result is not None
        assert "callback exploded" in caplog.text

    def test_events_dispatch(self, analyzer, inbox):
        calls = []
        handler = _handler(analyzer, calls)
        created = inbox / "a.md"
        moved = inbox / "b.md"
        created.write_text(RESPONSE)
        moved.write_text(RESPONSE + "\n")

        handler.on_created(SimpleNamespace(is_directory=False, src_path=str(created)))
        handler.on_moved(SimpleNamespace(
            is_directory=False, src_path=str(inbox / "tmp"), dest_path=str(moved),
        ))
        handler.on_modified(SimpleNamespace(is_directory=True, src_path=str(inbox)))

        assert [path for path, _ in calls] == [str(created), str(moved)]


class TestResponseInboxWatcher:
    def test_start_stop(self, analyzer, tmp_path):
        watcher = ResponseInboxWatcher(
            str(tmp_path / "new-inbox"), analyzer, lambda path, result: None,
        )
        watcher.start()
        try:
            assert watcher.is_running
            assert (tmp_path / "new-inbox").is_dir()
        finally:
            watcher.stop()
        assert not watcher.is_running

    def test_picks_up_saved_response(self, analyzer, inbox):
        seen = threading.Event()
        results = []

        def _on_response(path, result):
            results.append(result)
            seen.set()

        watcher = ResponseInboxWatcher(str(inbox), analyzer, _on_response,
                                       debounce_seconds=0)
        watcher.start()
        try:
            time.sleep(0.2)
            (inbox / "reply.md").write_text(RESPONSE)
            assert seen.wait(timeout=10)
        finally:
            watcher.stop()

        assert results[0].file_changes[0].path.endswith("utils/math.js")

    def test_run_forever_honours_stop_event(self, analyzer, inbox):
        watcher = ResponseInboxWatcher(str(inbox), analyzer, lambda p, r: None)
        stop = threading.Event()
        stop.set()
        watcher.run_forever(stop)
        assert not watcher.is_running
