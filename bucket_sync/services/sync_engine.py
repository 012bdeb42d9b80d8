"""
Sync engine orchestrating restore (pull) and store (push) passes between a
local tree and an object-storage bucket.
"""
import threading
from datetime import datetime
from typing import Any, Callable, Dict, Optional
from loguru import logger

from ..clients.local_tree import LocalIOError, LocalTree
from ..clients.s3_manager import RemoteStoreError, S3Manager
from ..models.config import StorageConfig, SyncConfig
from ..models.data_models import FileFilter, SyncState
from .change_cache import ChangeCache


Notifier = Callable[..., None]
ClientFactory = Callable[[StorageConfig], S3Manager]


def log_notifier(message: str, is_error: bool = False) -> None:
    """Default user-visible notification sink."""
    if is_error:
        logger.error(message)
    else:
        logger.info(message)


class SyncEngine:
    """
    Runs restore and store passes and handles remote deletes.

    Passes are serialized by a single in-flight guard: a restore() or store()
    requested while another pass is running is rejected without any I/O.
    A fresh remote client is built for every operation.
    """

    def __init__(self, config: SyncConfig,
                 cache: Optional[ChangeCache] = None,
                 local_tree: Optional[LocalTree] = None,
                 client_factory: ClientFactory = S3Manager,
                 notifier: Notifier = log_notifier):
        """
        Initialize the engine.

        Args:
            config: SyncConfig with complete storage settings
            cache: Change cache; a new one (honouring config.cache_path) by default
            local_tree: Filesystem adapter; rooted at config.local_root by default
            client_factory: Builds a remote client from StorageConfig
            notifier: Callable receiving user-visible messages

        Raises:
            ConfigIncompleteError: If a mandatory storage setting is empty
        """
        config.require_complete()
        self.config = config
        self.cache = cache if cache is not None else ChangeCache(config.cache_path)
        self.local_tree = local_tree or LocalTree(config.local_root)
        self.file_filter = FileFilter(include=config.include, exclude=config.exclude)
        self.client_factory = client_factory
        self.notify = notifier

        self._guard = threading.Lock()
        self._state = SyncState.IDLE

        logger.info(f"SyncEngine initialized - bucket: {config.storage.bucket}, "
                    f"prefix: {config.storage.prefix or '(none)'}, root: {self.local_tree.root}")

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def is_restoring(self) -> bool:
        return self._state == SyncState.RESTORING

    def _begin(self, state: SyncState, stats: Dict[str, Any]) -> bool:
        if not self._guard.acquire(blocking=False):
            logger.warning(f"Rejecting {state.value} pass - {self._state.value} pass in progress")
            stats['skipped_busy'] = True
            stats['success'] = False
            self._finish_stats(stats)
            return False
        self._state = state
        return True

    def _end(self) -> None:
        self._state = SyncState.IDLE
        self._guard.release()

    @staticmethod
    def _finish_stats(stats: Dict[str, Any]) -> None:
        stats['end_time'] = datetime.now()
        stats['duration'] = (stats['end_time'] - stats['start_time']).total_seconds()

    def _listing_prefix(self) -> Optional[str]:
        prefix = self.config.storage.prefix
        return f"{prefix}/" if prefix else None

    def restore(self) -> Dict[str, Any]:
        """
        Pull every object under the prefix into the local tree.

        Local files are overwritten unconditionally. Each restored file's new
        mtime is recorded in the change cache, so a following store() pass
        does not push restored content back. Files already written stay in
        place when the pass fails midway.

        Returns:
            Dictionary containing restore statistics
        """
        sync_stats = {
            'start_time': datetime.now(),
            'objects_listed': 0,
            'files_restored': 0,
            'total_size': 0,
            'success': False,
            'errors': []
        }
        if not self._begin(SyncState.RESTORING, sync_stats):
            return sync_stats

        self.notify("Starting restore from bucket...")
        try:
            client = self.client_factory(self.config.storage)
            objects = list(client.list_objects(self._listing_prefix(), self.config.page_size))
            sync_stats['objects_listed'] = len(objects)
            logger.info(f"Listed {len(objects)} objects in bucket {self.config.storage.bucket}")

            for remote_object in objects:
                if remote_object.is_directory:
                    continue
                local_path = self.config.storage.local_path(remote_object.key)
                if not local_path:
                    logger.debug(f"Skipping key outside prefix: {remote_object.key}")
                    continue

                content = client.get_object(remote_object.key)
                self.local_tree.write(local_path, content)
                self.cache.record(local_path, self.local_tree.stat(local_path))

                sync_stats['files_restored'] += 1
                sync_stats['total_size'] += len(content)
                logger.debug(f"Restored {local_path} from bucket")

            sync_stats['success'] = True
            self.notify("All files restored successfully!")

        except (RemoteStoreError, LocalIOError) as e:
            error_msg = f"Restore failed: {e}"
            sync_stats['errors'].append(error_msg)
            logger.error(error_msg)
            self.notify(error_msg, is_error=True)

        finally:
            self.save_cache(sync_stats)
            self._end()
            self._finish_stats(sync_stats)

        logger.info(f"Restore finished - Restored: {sync_stats['files_restored']}, "
                    f"Total size: {sync_stats['total_size']} bytes, "
                    f"Duration: {sync_stats['duration']:.2f} seconds")
        return sync_stats

    def store(self) -> Dict[str, Any]:
        """
        Push every filtered local file whose mtime differs from the cache.

        A file that cannot be stat'ed is logged and skipped. The first failed
        read or upload aborts the remainder of the pass.

        Returns:
            Dictionary containing store statistics
        """
        sync_stats = {
            'start_time': datetime.now(),
            'files_uploaded': 0,
            'files_unchanged': 0,
            'files_skipped': 0,
            'total_size': 0,
            'success': False,
            'errors': []
        }
        if not self._begin(SyncState.STORING, sync_stats):
            return sync_stats

        logger.info("Starting store to bucket")
        try:
            client = self.client_factory(self.config.storage)

            for relative_path in self.local_tree.iter_files(self.file_filter):
                try:
                    modified_ms = self.local_tree.stat(relative_path)
                except LocalIOError as e:
                    logger.error(f"Failed to get stats for file {relative_path}: {e}")
                    sync_stats['files_skipped'] += 1
                    continue

                if self.cache.is_unchanged(relative_path, modified_ms):
                    sync_stats['files_unchanged'] += 1
                    continue

                record = self.local_tree.read_record(relative_path)
                client.put_object(self.config.storage.remote_key(relative_path), record.content)
                self.cache.record(relative_path, record.modified_ms)

                sync_stats['files_uploaded'] += 1
                sync_stats['total_size'] += record.size
                logger.debug(f"Stored {relative_path} to bucket")

            sync_stats['success'] = True
            self.notify(f"Stored {sync_stats['files_uploaded']} changed files successfully!")

        except (RemoteStoreError, LocalIOError) as e:
            error_msg = f"Store failed: {e}"
            sync_stats['errors'].append(error_msg)
            logger.error(error_msg)
            self.notify(error_msg, is_error=True)

        finally:
            self.save_cache(sync_stats)
            self._end()
            self._finish_stats(sync_stats)

        logger.info(f"Store finished - Uploaded: {sync_stats['files_uploaded']}, "
                    f"Unchanged: {sync_stats['files_unchanged']}, "
                    f"Skipped: {sync_stats['files_skipped']}")
        return sync_stats

    def delete_remote(self, relative_path: str) -> bool:
        """
        Delete the object mapped to a removed local file.

        Runs outside the pass guard; its failure affects nothing else.

        Returns:
            bool: True if the remote object was deleted
        """
        key = self.config.storage.remote_key(relative_path)
        self.notify(f"Deleting {relative_path} from bucket...")
        try:
            client = self.client_factory(self.config.storage)
            client.delete_object(key)
        except RemoteStoreError as e:
            self.notify(f"Delete failed: {e}", is_error=True)
            return False

        self.cache.remove(relative_path)
        self.save_cache()
        logger.info(f"Deleted {relative_path} from bucket successfully")
        return True

    def save_cache(self, sync_stats: Optional[Dict[str, Any]] = None) -> None:
        try:
            self.cache.save()
        except OSError as e:
            logger.warning(f"Failed to persist change cache: {e}")
            if sync_stats is not None:
                sync_stats['errors'].append(f"Cache save failed: {e}")

    def get_sync_status(self) -> Dict[str, Any]:
        """
        Get current engine status.

        Returns:
            Dictionary containing engine status information
        """
        return {
            'state': self._state.value,
            'bucket': self.config.storage.bucket,
            'prefix': self.config.storage.prefix,
            'endpoint': self.config.storage.endpoint,
            'local_root': str(self.local_tree.root),
            'cached_files': len(self.cache),
            'cache_path': str(self.cache.cache_path) if self.cache.cache_path else None
        }
