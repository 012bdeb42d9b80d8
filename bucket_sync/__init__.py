"""
Bucket Sync - keeps a local file tree and an object-storage bucket in sync.
"""

from .services.sync_engine import SyncEngine
from .services.sync_app import SyncApp
from .models.config import SyncConfig, StorageConfig, ConfigIncompleteError
from .models.data_models import RemoteObject, LocalFileRecord, FileEvent, SyncState

__version__ = "1.0.0"
__all__ = [
    "SyncEngine",
    "SyncApp",
    "SyncConfig",
    "StorageConfig",
    "ConfigIncompleteError",
    "RemoteObject",
    "LocalFileRecord",
    "FileEvent",
    "SyncState"
]
