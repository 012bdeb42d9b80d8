"""
Host lifecycle for the sync engine: commands, startup restore and local
event subscriptions.
"""
from typing import Any, Callable, Dict, Optional
from loguru import logger

from ..clients.s3_manager import S3Manager
from ..models.config import SyncConfig
from ..models.data_models import FileEvent
from .debouncer import Debouncer
from .file_watcher import PollingWatcher
from .sync_engine import ClientFactory, Notifier, SyncEngine, log_notifier


class SyncApp:
    """
    Wires a SyncEngine to a file event source.

    start() runs one restore pass and then follows local changes: modify
    notifications are debounced into a single store pass, delete
    notifications remove the remote object right away. Nothing runs when the
    storage settings are incomplete.
    """

    def __init__(self, config: SyncConfig,
                 engine: Optional[SyncEngine] = None,
                 watcher: Optional[PollingWatcher] = None,
                 notifier: Notifier = log_notifier,
                 client_factory: ClientFactory = S3Manager):
        self.config = config
        self.engine = engine
        self.watcher = watcher
        self.notify = notifier
        self.client_factory = client_factory
        self.debouncer = Debouncer(config.debounce_seconds, self.store)
        self.commands: Dict[str, Callable[[], Dict[str, Any]]] = {
            'restore': self.restore,
            'store': self.store
        }
        self.started = False

    def ensure_engine(self) -> SyncEngine:
        if self.engine is None:
            self.engine = SyncEngine(
                self.config,
                client_factory=self.client_factory,
                notifier=self.notify
            )
        return self.engine

    def run_command(self, name: str) -> Dict[str, Any]:
        """
        Invoke a registered command by name.

        Raises:
            KeyError: If no command is registered under that name
            ConfigIncompleteError: If the storage settings are incomplete
        """
        if name not in self.commands:
            raise KeyError(f"Unknown command: {name}")
        logger.info(f"Running {name} command")
        return self.commands[name]()

    def restore(self) -> Dict[str, Any]:
        stats = self.ensure_engine().restore()
        # Restored content is not a user edit
        if self.watcher is not None:
            self.watcher.resync()
        return stats

    def store(self) -> Dict[str, Any]:
        return self.ensure_engine().store()

    def start(self) -> bool:
        """
        Start syncing.

        Returns:
            bool: False when sync is disabled by incomplete settings
        """
        if self.started:
            return True
        if not self.config.is_complete():
            missing = ', '.join(self.config.storage.missing_fields())
            logger.warning(f"Sync disabled - missing settings: {missing}")
            return False

        engine = self.ensure_engine()
        if self.watcher is None:
            self.watcher = PollingWatcher(engine.local_tree, engine.file_filter, self.config.poll_interval)

        self.restore()

        self.watcher.subscribe(self.handle_event)
        self.watcher.start()
        self.started = True
        logger.info("Sync started")
        return True

    def stop(self) -> None:
        """Cancel any pending store, stop watching and persist the cache."""
        self.debouncer.cancel()
        if self.watcher is not None:
            self.watcher.stop()
        if self.engine is not None:
            self.engine.save_cache()
        self.started = False
        logger.info("Sync stopped")

    def handle_event(self, event: FileEvent) -> None:
        if event.event_type == 'modified':
            self.on_file_modified(event.relative_path)
        elif event.event_type == 'deleted':
            self.on_file_deleted(event.relative_path)
        else:
            logger.warning(f"Ignoring unknown event type: {event.event_type}")

    def on_file_modified(self, relative_path: str) -> bool:
        """
        Schedule a debounced store pass.

        Returns:
            bool: False when the notification was suppressed during a restore
        """
        engine = self.ensure_engine()
        if self.config.suppress_during_restore and engine.is_restoring:
            logger.debug(f"Ignoring modification of {relative_path} during restore")
            return False
        self.debouncer.trigger()
        return True

    def on_file_deleted(self, relative_path: str) -> bool:
        return self.ensure_engine().delete_remote(relative_path)
