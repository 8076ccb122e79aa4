"""
Response inbox watcher — analyses chat responses as they are saved.

Uses watchdog to monitor a directory; every created or modified response
file (``.md`` / ``.txt`` by default) is analysed and the result handed to
a callback.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .api import AnalysisResult, ResponseAnalyzer

logger = logging.getLogger(__name__)

ResponseCallback = Callable[[str, AnalysisResult], None]


class ResponseFileHandler(FileSystemEventHandler):
    """
    Watchdog event handler that analyses saved responses.

    Parameters
    ----------
    analyzer:
        The :class:`~chatpatch.api.ResponseAnalyzer` to run.
    callback:
        Called with ``(path, result)`` for every analysed response.
    extensions:
        File extensions to pick up.
    debounce_seconds:
        Minimum delay between processing the same file (editors often
        emit several events per save).
    """

    def __init__(
        self,
        analyzer: ResponseAnalyzer,
        callback: ResponseCallback,
        extensions: Iterable[str] = (".md", ".txt"),
        debounce_seconds: float = 0.5,
    ) -> None:
        super().__init__()
        self._analyzer = analyzer
        self._callback = callback
        self._extensions = {e.lower() for e in extensions}
        self._debounce = debounce_seconds
        self._last_event: dict[str, float] = {}
        self._last_content: dict[str, str] = {}
        self._lock = threading.Lock()

    def on_created(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.handle_path(event.src_path)

    def on_modified(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.handle_path(event.src_path)

    def on_moved(self, event) -> None:  # type: ignore[override]
        if not event.is_directory:
            self.handle_path(event.dest_path)

    def _should_ignore(self, path: str) -> bool:
        return os.path.splitext(path)[1].lower() not in self._extensions

    def _is_debounced(self, path: str) -> bool:
        now = time.time()
        with self._lock:
            last = self._last_event.get(path, 0.0)
            if now - last < self._debounce:
                return True
            self._last_event[path] = now
        return False

    def handle_path(self, path: str) -> Optional[AnalysisResult]:
        """Analyse *path* unless it is ignored, debounced or unchanged."""
        if self._should_ignore(path) or self._is_debounced(path):
            return None

        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                text = f.read()
        except OSError as exc:
            logger.warning("[Watcher] Cannot read %s: %s", path, exc)
            return None

        with self._lock:
            if self._last_content.get(path) == text:
                logger.debug("[Watcher] %s unchanged, skipping", path)
                return None
            self._last_content[path] = text

        result = self._analyzer.analyze_response(text)
        logger.info(
            "[Watcher] %s: %d change(s) from %d block(s)",
            path, len(result.file_changes), result.analysis.total_blocks,
        )
        try:
            self._callback(path, result)
        except Exception as exc:
            logger.warning("[Watcher] Callback failed for %s: %s", path, exc)
        return result


class ResponseInboxWatcher:
    """
    Watch an inbox directory for saved chat responses.

    Call :meth:`start` to begin watching in watchdog's background thread,
    and :meth:`stop` to shut it down.
    """

    def __init__(
        self,
        inbox_dir: str,
        analyzer: ResponseAnalyzer,
        callback: ResponseCallback,
        extensions: Iterable[str] = (".md", ".txt"),
        debounce_seconds: float = 0.5,
    ) -> None:
        self.inbox_dir = os.path.abspath(inbox_dir)
        self.handler = ResponseFileHandler(
            analyzer, callback,
            extensions=extensions,
            debounce_seconds=debounce_seconds,
        )
        self._observer: Optional[Observer] = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def start(self) -> None:
        """Start watching *inbox_dir* (non-blocking)."""
        os.makedirs(self.inbox_dir, exist_ok=True)
        observer = Observer()
        observer.schedule(self.handler, self.inbox_dir, recursive=False)
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("[Watcher] Watching %s", self.inbox_dir)

    def stop(self) -> None:
        """Gracefully stop the observer."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
        logger.info("[Watcher] Stopped")

    def run_forever(self, stop_event: threading.Event | None = None) -> None:
        """Block until *stop_event* is set or the process is interrupted."""
        stop_event = stop_event or threading.Event()
        self.start()
        try:
            while not stop_event.is_set():
                stop_event.wait(timeout=1)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()
