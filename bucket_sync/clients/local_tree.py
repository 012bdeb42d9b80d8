"""
Filesystem adapter for the local side of the sync.

All paths crossing this boundary are relative to the tree root and use '/'
as separator, which is also the separator of object keys.
"""
import os
from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, Optional

from ..models.data_models import FileFilter, LocalFileRecord


class LocalIOError(Exception):
    """Raised when a stat/read/write/mkdir on the local tree fails."""
    pass


class LocalTree:
    """Reads and writes files below a root directory."""

    def __init__(self, root: str):
        self.root = Path(root).expanduser().resolve()

    def resolve(self, relative_path: str) -> Path:
        """
        Turn a relative path into an absolute one under the root.

        Raises:
            LocalIOError: If the path escapes the root (e.g. a '../' key)
        """
        parts = PurePosixPath(relative_path).parts
        if not parts or PurePosixPath(relative_path).is_absolute() or '..' in parts:
            raise LocalIOError(f"Refusing path outside sync root: {relative_path!r}")
        return self.root.joinpath(*parts)

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()

    def stat(self, relative_path: str) -> int:
        """Return the modification time in epoch milliseconds."""
        try:
            return self.resolve(relative_path).stat().st_mtime_ns // 1_000_000
        except OSError as e:
            raise LocalIOError(f"Cannot stat {relative_path}: {e}") from e

    def read(self, relative_path: str) -> bytes:
        try:
            return self.resolve(relative_path).read_bytes()
        except OSError as e:
            raise LocalIOError(f"Cannot read {relative_path}: {e}") from e

    def read_record(self, relative_path: str) -> LocalFileRecord:
        """Read mtime and content of one file."""
        return LocalFileRecord(
            relative_path=relative_path,
            modified_ms=self.stat(relative_path),
            content=self.read(relative_path)
        )

    def mkdir(self, relative_dir: str) -> None:
        try:
            self.resolve(relative_dir).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"Cannot create directory {relative_dir}: {e}") from e

    def write(self, relative_path: str, content: bytes) -> None:
        """Write content, creating parent directories as needed."""
        path = self.resolve(relative_path)
        try:
            # The root itself may not exist yet on a first restore
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise LocalIOError(f"Cannot write {relative_path}: {e}") from e

    def iter_files(self, file_filter: Optional[FileFilter] = None) -> Iterator[str]:
        """Yield relative paths of accepted files, directory by directory in name order."""
        if not self.root.is_dir():
            return
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames.sort()
            for name in sorted(filenames):
                relative_path = self.relative(Path(dirpath) / name)
                if file_filter is None or file_filter.matches(relative_path):
                    yield relative_path

    def snapshot(self, file_filter: Optional[FileFilter] = None) -> Dict[str, int]:
        """Map every accepted file to its current mtime, skipping files that vanish mid-scan."""
        result = {}
        for relative_path in self.iter_files(file_filter):
            try:
                result[relative_path] = self.stat(relative_path)
            except LocalIOError:
                continue
        return result
