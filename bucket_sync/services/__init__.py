# Services package
from .change_cache import ChangeCache
from .debouncer import Debouncer
from .file_watcher import PollingWatcher
from .sync_engine import SyncEngine
from .sync_app import SyncApp

__all__ = ['ChangeCache', 'Debouncer', 'PollingWatcher', 'SyncEngine', 'SyncApp']
