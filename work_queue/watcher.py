"""
Watchdog-based monitoring of a prompt directory.

Observer threads never touch the queue: matching files are collected in a
thread-safe inbox that the command loop drains between commands.
"""

from __future__ import annotations

import logging
import queue
import time
from pathlib import Path
from typing import Dict, List, Optional

from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler, FileCreatedEvent, FileModifiedEvent

from work_queue.prompt_files import DEFAULT_PATTERN


logger = logging.getLogger(__name__)


class DebounceTracker:
    """
    Drops repeated events for the same path inside a short window.

    Editors often fire several create/modify events for one save.
    """

    def __init__(self, debounce_ms: int = 500):
        self.window = debounce_ms / 1000.0
        self._last_seen: Dict[str, float] = {}

    def should_process(self, file_path: str) -> bool:
        """True for the first event of a path in the current window."""
        now = time.monotonic()
        previous = self._last_seen.get(file_path)
        if previous is not None and now - previous < self.window:
            return False

        self._last_seen[file_path] = now
        return True

    def cleanup_old_events(self, max_age_seconds: float = 60.0) -> None:
        """Forget paths not seen for max_age_seconds."""
        cutoff = time.monotonic() - max_age_seconds
        for path in [p for p, seen in self._last_seen.items() if seen <= cutoff]:
            del self._last_seen[path]


class PromptDirectoryWatcher(FileSystemEventHandler):
    """
    Watches a directory for new or changed prompt documents.

    Each file is reported once; edits to an already reported file are ignored.
    """

    def __init__(
        self,
        directory: Path,
        debounce_ms: int = 500,
        patterns: Optional[List[str]] = None
    ):
        """
        Initialize the watcher.

        Args:
            directory: Directory to watch
            debounce_ms: Debounce delay in milliseconds
            patterns: File patterns to match (default: task-*.md)
        """
        super().__init__()

        self.directory = Path(directory)
        self.patterns = patterns or [DEFAULT_PATTERN]
        self.debounce = DebounceTracker(debounce_ms)

        self._inbox: "queue.Queue[Path]" = queue.Queue()
        self._reported: set = set()
        self._observer: Optional[Observer] = None

    def on_created(self, event: FileCreatedEvent) -> None:
        if event.is_directory:
            return
        self._handle_file_event(event.src_path, "created")

    def on_modified(self, event: FileModifiedEvent) -> None:
        if event.is_directory:
            return
        self._handle_file_event(event.src_path, "modified")

    def _handle_file_event(self, file_path: str, event_type: str) -> None:
        """Queue a matching file for the command loop."""
        filepath = Path(file_path)
        if not any(filepath.match(pattern) for pattern in self.patterns):
            return

        if not self.debounce.should_process(file_path):
            logger.debug(f"Debounced {event_type} event for: {filepath.name}")
            return

        key = str(filepath.resolve())
        if key in self._reported:
            logger.debug(f"Already queued, ignoring {event_type} event for: {filepath.name}")
            return

        self._reported.add(key)
        logger.debug(f"Prompt document {event_type}: {filepath.name}")
        self._inbox.put(filepath)

        self.debounce.cleanup_old_events()

    def forget(self, path: Path) -> None:
        """Allow a later event for path to report it again."""
        self._reported.discard(str(Path(path).resolve()))

    def drain(self) -> List[Path]:
        """Take every file reported since the last drain, in arrival order."""
        paths = []
        while True:
            try:
                paths.append(self._inbox.get_nowait())
            except queue.Empty:
                return paths

    def start(self) -> None:
        """Start watching the directory."""
        if self._observer is not None:
            logger.warning(f"Observer already running for {self.directory}")
            return

        if not self.directory.is_dir():
            raise ValueError(f"Prompt directory does not exist: {self.directory}")

        self._observer = Observer()
        self._observer.schedule(
            event_handler=self,
            path=str(self.directory),
            recursive=False
        )
        self._observer.start()
        logger.info(f"Watching prompt directory: {self.directory}")

    def stop(self) -> None:
        """Stop watching the directory."""
        if self._observer is None:
            return

        try:
            self._observer.stop()
            self._observer.join(timeout=5.0)
        finally:
            self._observer = None
        logger.debug(f"Stopped watching {self.directory}")

    def is_running(self) -> bool:
        return self._observer is not None and self._observer.is_alive()
