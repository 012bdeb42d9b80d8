"""
Pytest configuration and fixtures for the bucket sync tests.
"""
import os
import pytest

from bucket_sync.clients.local_tree import LocalTree
from bucket_sync.clients.s3_manager import RemoteStoreError, S3Manager
from bucket_sync.models.config import StorageConfig, SyncConfig
from bucket_sync.models.data_models import ListPage, RemoteObject
from bucket_sync.services.change_cache import ChangeCache
from bucket_sync.services.sync_engine import SyncEngine


class FakeBucket(S3Manager):
    """In-memory bucket honouring the S3Manager contract."""

    def __init__(self, config=None, objects=None):
        # No boto3 client is created
        self.config = config or StorageConfig()
        self.objects = dict(objects or {})
        self.list_calls = []
        self.get_calls = []
        self.put_calls = []
        self.delete_calls = []
        self.failing_keys = set()

    def list_page(self, prefix=None, page_size=100, marker=None):
        self.list_calls.append(marker)
        keys = sorted(key for key in self.objects if not prefix or key.startswith(prefix))
        start = int(marker) if marker else 0
        chunk = keys[start:start + page_size]
        end = start + len(chunk)
        truncated = end < len(keys)
        return ListPage(
            objects=[RemoteObject(key=key, size=len(self.objects[key])) for key in chunk],
            is_truncated=truncated,
            next_marker=str(end) if truncated else None
        )

    def get_object(self, key):
        self.get_calls.append(key)
        if key in self.failing_keys:
            raise RemoteStoreError(f"Get failed for {key}: simulated")
        return self.objects[key]

    def put_object(self, key, content):
        self.put_calls.append(key)
        if key in self.failing_keys:
            raise RemoteStoreError(f"Put failed for {key}: simulated")
        self.objects[key] = content

    def delete_object(self, key):
        self.delete_calls.append(key)
        if key in self.failing_keys:
            raise RemoteStoreError(f"Delete failed for {key}: simulated")
        self.objects.pop(key, None)

    def test_connection(self):
        return True


def set_mtime(path, modified_ms):
    """Pin a file's mtime so cache comparisons are deterministic."""
    ns = modified_ms * 1_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep BUCKET_SYNC_* variables of the developer's shell out of the tests."""
    for name in list(os.environ):
        if name.startswith('BUCKET_SYNC_'):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def storage_config():
    """Complete storage settings with a prefix."""
    return StorageConfig(
        access_key_id='test_key',
        access_key_secret='test_secret',
        region='us-east-1',
        bucket='test-bucket',
        prefix='vault'
    )


@pytest.fixture
def local_root(tmp_path):
    root = tmp_path / 'tree'
    root.mkdir()
    return root


@pytest.fixture
def sync_config(storage_config, local_root):
    return SyncConfig(
        storage=storage_config,
        local_root=str(local_root),
        debounce_seconds=0.05,
        poll_interval=0.05
    )


@pytest.fixture
def fake_bucket(storage_config):
    return FakeBucket(storage_config)


@pytest.fixture
def notices():
    """Collects (message, is_error) pairs sent to the user."""
    collected = []

    def notifier(message, is_error=False):
        collected.append((message, is_error))

    notifier.collected = collected
    return notifier


@pytest.fixture
def engine(sync_config, fake_bucket, notices):
    """SyncEngine wired to the fake bucket."""
    return SyncEngine(
        sync_config,
        cache=ChangeCache(),
        local_tree=LocalTree(sync_config.local_root),
        client_factory=lambda config: fake_bucket,
        notifier=notices
    )


@pytest.fixture
def write_file(local_root):
    """Write a file under the local root with a pinned mtime."""
    def _write(relative_path, content=b'content', modified_ms=1_700_000_000_000):
        path = local_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        set_mtime(path, modified_ms)
        return path
    return _write
