"""
Change Watcher - Observes project source directories for external edits.

Each bridge connection owns one watcher for its lifetime. Changes are only
logged; nothing is sent back over the socket.
"""

import logging
import os
import re
import threading
from typing import Callable, Dict, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger("devbridge")

# Directories watched recursively, relative to the workspace
WATCH_ROOTS = ("src", "public")

IGNORED_PATTERN = re.compile(r"(node_modules|dist)")

# Seconds a file must stay quiet before its change is reported
STABILITY_THRESHOLD_S = 0.5


def log_external_change(path: str) -> None:
    logger.info(f"File changed externally: {path}")


class _DebouncedChangeHandler(FileSystemEventHandler):
    """Report a modified or replaced file once writes to it have settled."""

    def __init__(self, root, on_change, stability_threshold):
        # type: (str, Callable[[str], None], float) -> None
        super().__init__()
        self.root = root
        self.on_change = on_change
        self.stability_threshold = stability_threshold
        self._timers = {}  # type: Dict[str, threading.Timer]
        self._lock = threading.Lock()
        self._closed = False

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._schedule(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Atomic saves rename a temp file over the target
        if event.is_directory:
            return
        self._schedule(event.dest_path)

    def _schedule(self, abs_path) -> None:
        path = os.path.relpath(os.fsdecode(abs_path), self.root)
        if IGNORED_PATTERN.search(path):
            return

        with self._lock:
            if self._closed:
                return
            pending = self._timers.get(path)
            if pending is not None:
                pending.cancel()
            timer = threading.Timer(self.stability_threshold, self._fire, args=(path,))
            timer.daemon = True
            self._timers[path] = timer
            timer.start()

    def _fire(self, path: str) -> None:
        with self._lock:
            if self._closed:
                return
            self._timers.pop(path, None)
        self.on_change(path)

    def cancel_pending(self) -> None:
        with self._lock:
            self._closed = True
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()


class ChangeWatcher:
    """
    Watch ``src/`` and ``public/`` under a workspace for modified files.

    Args:
        root: Workspace directory the watch roots are resolved against
        on_change: Called with the workspace-relative path of each settled
            change (default: log it)
        stability_threshold: Quiet period in seconds before a change is reported
    """

    def __init__(
        self,
        root: str,
        on_change: Optional[Callable[[str], None]] = None,
        stability_threshold: float = STABILITY_THRESHOLD_S,
    ):
        self.root = os.path.abspath(root)
        self._handler = _DebouncedChangeHandler(
            self.root, on_change or log_external_change, stability_threshold
        )
        self._observer = None  # type: Optional[Observer]

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return

        observer = Observer()
        scheduled = 0
        for name in WATCH_ROOTS:
            watch_dir = os.path.join(self.root, name)
            if not os.path.isdir(watch_dir):
                logger.debug(f"Watch root missing, skipped: {watch_dir}")
                continue
            observer.schedule(self._handler, watch_dir, recursive=True)
            scheduled += 1

        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.debug(f"Watching {scheduled} director{'y' if scheduled == 1 else 'ies'} under {self.root}")

    def close(self) -> None:
        """Stop watching. Safe to call more than once."""
        observer = self._observer
        self._observer = None
        self._handler.cancel_pending()
        if observer is None:
            return
        observer.stop()
        observer.join(timeout=5)
