"""
Core data models for the bucket sync service.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from fnmatch import fnmatch
from typing import List, Optional


class SyncState(str, Enum):
    """Engine-level pass state."""
    IDLE = 'idle'
    RESTORING = 'restoring'
    STORING = 'storing'


@dataclass
class RemoteObject:
    """Represents a listed object in the bucket."""
    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None

    @property
    def is_directory(self) -> bool:
        """Directory placeholders are zero-content keys ending in a separator."""
        return self.key.endswith('/')


@dataclass
class ListPage:
    """One page of a paginated listing call."""
    objects: List[RemoteObject]
    is_truncated: bool = False
    next_marker: Optional[str] = None


@dataclass
class LocalFileRecord:
    """A local file as read at push time."""
    relative_path: str
    modified_ms: int
    content: bytes = b''

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class FileEvent:
    """Represents a local change notification."""
    event_type: str  # 'modified', 'deleted'
    relative_path: str


@dataclass
class FileFilter:
    """Include/exclude glob filter applied to relative paths."""
    include: List[str] = field(default_factory=lambda: ['*'])
    exclude: List[str] = field(default_factory=list)

    def matches(self, relative_path: str) -> bool:
        """Return True if the path is included and not excluded."""
        if not any(fnmatch(relative_path, pattern) for pattern in self.include):
            return False
        return not any(fnmatch(relative_path, pattern) for pattern in self.exclude)
