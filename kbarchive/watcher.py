"""
File system watcher for the archive content directory.

This module provides:
- Watchdog-based file monitoring
- Debounced change batches (editor save cycles collapse into one)
- Filtering to note files
"""

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ArchiveEventHandler(FileSystemEventHandler):
    """
    Collects note changes and reports them in debounced batches.

    Key behaviors:
    - Only .md files count; hidden files and directories are skipped
    - A batch is flushed once no change arrived for DEBOUNCE_SECONDS
    - Renames report both the old and the new path
    """

    RELEVANT_EXTENSIONS = {".md"}
    DEBOUNCE_SECONDS = 1.0

    def __init__(
        self,
        content_path: Path,
        on_change: Callable[[list[Path]], None],
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__()
        self.content_path = content_path
        self.on_change = on_change
        self.clock = clock

        # Changed path -> time of last event, shared with the observer thread
        self.pending: dict[str, float] = {}
        self._lock = threading.Lock()

    def _is_relevant(self, path: str) -> bool:
        """Check if the file is a note worth reacting to."""
        p = Path(path)
        try:
            rel = p.relative_to(self.content_path)
        except ValueError:
            rel = p

        # Skip hidden files and directories
        if any(part.startswith(".") for part in rel.parts):
            return False

        return p.suffix.lower() in self.RELEVANT_EXTENSIONS

    def _touch(self, path: str) -> None:
        if self._is_relevant(path):
            with self._lock:
                self.pending[path] = self.clock()

    def flush_pending(self) -> list[Path]:
        """Emit the pending batch if the debounce window has passed.

        Returns the flushed paths (empty if nothing was emitted).
        """
        with self._lock:
            if not self.pending:
                return []
            if self.clock() - max(self.pending.values()) < self.DEBOUNCE_SECONDS:
                return []
            batch, self.pending = self.pending, {}

        changed = sorted(Path(p) for p in batch)
        logger.debug("Flushing %d changed notes", len(changed))
        self.on_change(changed)
        return changed

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)
            self._touch(event.dest_path)


def watch_archive(
    content_path: Path,
    on_change: Callable[[list[Path]], None],
    recursive: bool = True,
) -> tuple[Observer, ArchiveEventHandler]:
    """
    Start watching the content directory.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ArchiveEventHandler(content_path=content_path, on_change=on_change)

    observer = Observer()
    observer.schedule(handler, str(content_path), recursive=recursive)
    observer.start()

    return observer, handler


def run_watch_loop(content_path: Path, on_change: Callable[[list[Path]], None]) -> None:
    """
    Run the watch loop until interrupted.

    This is a blocking function that flushes debounced changes periodically.
    """
    observer, handler = watch_archive(content_path, on_change)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
