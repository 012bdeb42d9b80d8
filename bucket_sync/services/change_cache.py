"""
Change cache: last-synced modification time per local file.
"""
import json
import threading
from pathlib import Path
from typing import Dict, Optional
from loguru import logger


class ChangeCache:
    """
    Maps relative paths to the mtime (epoch ms) they had when last synced.

    Memory-only by default, so every restart re-evaluates every file. When a
    cache path is given, entries are loaded on construction and written back
    by save().
    """

    def __init__(self, cache_path: Optional[str] = None):
        self.cache_path = Path(cache_path) if cache_path else None
        self._entries: Dict[str, int] = {}
        self._lock = threading.Lock()

        if self.cache_path:
            self.load()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, relative_path: str) -> bool:
        return relative_path in self._entries

    def get(self, relative_path: str) -> Optional[int]:
        return self._entries.get(relative_path)

    def is_unchanged(self, relative_path: str, modified_ms: int) -> bool:
        """True if the cached mtime is identical to the given one."""
        return self._entries.get(relative_path) == modified_ms

    def record(self, relative_path: str, modified_ms: int) -> None:
        with self._lock:
            self._entries[relative_path] = modified_ms

    def remove(self, relative_path: str) -> None:
        with self._lock:
            self._entries.pop(relative_path, None)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._entries)

    def load(self) -> None:
        """Load persisted entries; an unreadable file starts an empty cache."""
        if not self.cache_path or not self.cache_path.exists():
            return
        try:
            data = json.loads(self.cache_path.read_text(encoding='utf-8'))
            with self._lock:
                self._entries = {str(k): int(v) for k, v in data.items()}
            logger.debug(f"Loaded {len(self._entries)} cache entries from {self.cache_path}")
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable change cache {self.cache_path}: {e}")

    def save(self) -> None:
        """Persist entries when a cache path is configured."""
        if not self.cache_path:
            return
        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        self.cache_path.write_text(json.dumps(self.snapshot(), indent=2, sort_keys=True), encoding='utf-8')
        logger.debug(f"Saved {len(self._entries)} cache entries to {self.cache_path}")
