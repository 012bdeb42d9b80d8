# Client packages
from .s3_manager import S3Manager, RemoteStoreError
from .local_tree import LocalTree, LocalIOError

__all__ = ['S3Manager', 'RemoteStoreError', 'LocalTree', 'LocalIOError']
