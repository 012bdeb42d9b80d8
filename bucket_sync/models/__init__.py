"""
Models package for the bucket sync service.
"""
from .data_models import RemoteObject, ListPage, LocalFileRecord, FileEvent, FileFilter, SyncState
from .config import StorageConfig, SyncConfig, ConfigIncompleteError

__all__ = [
    'RemoteObject',
    'ListPage',
    'LocalFileRecord',
    'FileEvent',
    'FileFilter',
    'SyncState',
    'StorageConfig',
    'SyncConfig',
    'ConfigIncompleteError'
]
