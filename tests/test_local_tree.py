"""
Tests for the LocalTree filesystem adapter.
"""
import pytest

from bucket_sync.clients.local_tree import LocalIOError, LocalTree
from bucket_sync.models.data_models import FileFilter

from conftest import set_mtime


@pytest.fixture
def tree(local_root):
    return LocalTree(str(local_root))


class TestLocalTree:

    def test_write_creates_parent_directories(self, tree, local_root):
        tree.write('a/b/c.md', b'deep')

        assert (local_root / 'a' / 'b' / 'c.md').read_bytes() == b'deep'

    def test_stat_returns_epoch_millis(self, tree, local_root):
        tree.write('a.md', b'x')
        set_mtime(local_root / 'a.md', 1_650_000_000_123)

        assert tree.stat('a.md') == 1_650_000_000_123

    def test_read_record(self, tree, local_root):
        tree.write('a.md', b'hello')
        set_mtime(local_root / 'a.md', 5_000)

        record = tree.read_record('a.md')

        assert record.relative_path == 'a.md'
        assert record.modified_ms == 5_000
        assert record.content == b'hello'
        assert record.size == 5

    def test_missing_file_raises_local_io_error(self, tree):
        with pytest.raises(LocalIOError):
            tree.stat('missing.md')
        with pytest.raises(LocalIOError):
            tree.read('missing.md')

    @pytest.mark.parametrize('path', ['../outside.md', '/etc/passwd', 'a/../../b.md', ''])
    def test_paths_outside_root_rejected(self, tree, path):
        with pytest.raises(LocalIOError):
            tree.resolve(path)

    def test_iter_files_uses_posix_paths_and_filter(self, tree):
        tree.write('z.md', b'')
        tree.write('notes/a.md', b'')
        tree.write('notes/b.txt', b'')

        assert list(tree.iter_files()) == ['z.md', 'notes/a.md', 'notes/b.txt']
        assert list(tree.iter_files(FileFilter(include=['*.md']))) == ['z.md', 'notes/a.md']

    def test_iter_files_on_missing_root(self, tmp_path):
        tree = LocalTree(str(tmp_path / 'nope'))

        assert list(tree.iter_files()) == []

    def test_write_creates_missing_root(self, tmp_path):
        tree = LocalTree(str(tmp_path / 'fresh'))

        tree.write('top.md', b'top')

        assert (tmp_path / 'fresh' / 'top.md').read_bytes() == b'top'

    def test_snapshot(self, tree, local_root):
        tree.write('a.md', b'x')
        set_mtime(local_root / 'a.md', 42)

        assert tree.snapshot() == {'a.md': 42}


class TestFileFilter:

    def test_default_filter_accepts_everything(self):
        assert FileFilter().matches('any/file.bin') is True

    def test_exclude_wins_over_include(self):
        file_filter = FileFilter(include=['*.md'], exclude=['.trash/*'])

        assert file_filter.matches('notes/a.md') is True
        assert file_filter.matches('.trash/a.md') is False
        assert file_filter.matches('a.png') is False
