"""
Polling watcher that turns local tree changes into modified/deleted events.
"""
import threading
from typing import Callable, Dict, List, Optional
from loguru import logger

from ..clients.local_tree import LocalTree
from ..models.data_models import FileEvent, FileFilter


EventHandler = Callable[[FileEvent], None]


class PollingWatcher:
    """Compares mtime snapshots of the local tree at a fixed interval."""

    def __init__(self, local_tree: LocalTree, file_filter: Optional[FileFilter] = None,
                 interval: float = 2.0):
        self.local_tree = local_tree
        self.file_filter = file_filter
        self.interval = interval

        self._handlers: List[EventHandler] = []
        self._snapshot: Dict[str, int] = {}
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def resync(self) -> None:
        """Take the current tree as the baseline without emitting events."""
        self._snapshot = self.local_tree.snapshot(self.file_filter)
        logger.debug(f"Watcher baseline holds {len(self._snapshot)} files")

    def poll_once(self) -> List[FileEvent]:
        """Diff the tree against the previous snapshot and dispatch events."""
        current = self.local_tree.snapshot(self.file_filter)
        events = []

        for relative_path, modified_ms in current.items():
            if self._snapshot.get(relative_path) != modified_ms:
                events.append(FileEvent('modified', relative_path))
        for relative_path in self._snapshot:
            if relative_path not in current:
                events.append(FileEvent('deleted', relative_path))

        self._snapshot = current
        for event in events:
            self._dispatch(event)
        return events

    def _dispatch(self, event: FileEvent) -> None:
        for handler in self._handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error handling {event.event_type} event for {event.relative_path}: {e}")

    def start(self) -> None:
        """Start polling on a daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name='bucket-sync-watcher', daemon=True)
        self._thread.start()
        logger.info(f"Watching {self.local_tree.root} every {self.interval}s")

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.poll_once()
            except Exception as e:
                logger.error(f"Error while polling local tree: {e}")
