"""
Configuration classes for the bucket sync service.
"""
import os
import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional


DEFAULT_INCLUDE = ['*.md']
ENV_PREFIX = 'BUCKET_SYNC'


class ConfigIncompleteError(Exception):
    """Raised when a sync pass is requested without the mandatory storage settings."""
    pass


def _split_patterns(value: str) -> List[str]:
    return [part.strip() for part in value.split(',') if part.strip()]


def _as_patterns(value: Any) -> List[str]:
    """Accept either a list of globs or one comma-separated string."""
    if isinstance(value, str):
        return _split_patterns(value)
    return list(value)


@dataclass
class StorageConfig:
    """Connection settings for the object-storage bucket."""
    access_key_id: str = ''
    access_key_secret: str = ''
    region: str = ''
    bucket: str = ''
    endpoint: Optional[str] = None
    prefix: Optional[str] = None

    def __post_init__(self):
        # A trailing separator would break the key <-> path mapping
        if self.prefix:
            self.prefix = self.prefix.strip('/') or None
        if not self.endpoint:
            self.endpoint = None

    def is_complete(self) -> bool:
        """Return True when every mandatory connection field is non-empty."""
        return all([self.access_key_id, self.access_key_secret, self.region, self.bucket])

    def missing_fields(self) -> List[str]:
        """Names of the mandatory fields that are still empty."""
        return [
            name for name in ('access_key_id', 'access_key_secret', 'region', 'bucket')
            if not getattr(self, name)
        ]

    def remote_key(self, relative_path: str) -> str:
        """Map a local relative path to its object key."""
        if self.prefix:
            return f"{self.prefix}/{relative_path}"
        return relative_path

    def local_path(self, key: str) -> Optional[str]:
        """
        Map an object key back to a local relative path.

        Returns None for keys that live outside the configured prefix.
        """
        if not self.prefix:
            return key
        head = f"{self.prefix}/"
        if not key.startswith(head):
            return None
        return key[len(head):]

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> 'StorageConfig':
        """Create StorageConfig from environment variables with given prefix."""
        return cls(
            access_key_id=os.getenv(f'{prefix}_ACCESS_KEY_ID', ''),
            access_key_secret=os.getenv(f'{prefix}_ACCESS_KEY_SECRET', ''),
            region=os.getenv(f'{prefix}_REGION', ''),
            bucket=os.getenv(f'{prefix}_BUCKET', ''),
            endpoint=os.getenv(f'{prefix}_ENDPOINT'),
            prefix=os.getenv(f'{prefix}_PREFIX')
        )


@dataclass
class SyncConfig:
    """Main configuration for the sync service."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    local_root: str = '.'
    include: List[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: List[str] = field(default_factory=list)
    debounce_seconds: float = 1.0
    page_size: int = 100
    poll_interval: float = 2.0
    suppress_during_restore: bool = True
    cache_path: Optional[str] = None

    def is_complete(self) -> bool:
        return self.storage.is_complete()

    def require_complete(self) -> None:
        """Raise ConfigIncompleteError unless the storage settings are usable."""
        if not self.is_complete():
            missing = ', '.join(self.storage.missing_fields())
            raise ConfigIncompleteError(f"Missing storage settings: {missing}")

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into the persisted settings record."""
        data = asdict(self)
        storage = data.pop('storage')
        storage.update(data)
        return storage

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SyncConfig':
        """Build from a flat settings record, filling gaps with defaults."""
        defaults = cls()
        storage = StorageConfig(
            access_key_id=data.get('access_key_id', ''),
            access_key_secret=data.get('access_key_secret', ''),
            region=data.get('region', ''),
            bucket=data.get('bucket', ''),
            endpoint=data.get('endpoint'),
            prefix=data.get('prefix')
        )
        return cls(
            storage=storage,
            local_root=data.get('local_root', defaults.local_root),
            include=_as_patterns(data.get('include', defaults.include)),
            exclude=_as_patterns(data.get('exclude', defaults.exclude)),
            debounce_seconds=float(data.get('debounce_seconds', defaults.debounce_seconds)),
            page_size=int(data.get('page_size', defaults.page_size)),
            poll_interval=float(data.get('poll_interval', defaults.poll_interval)),
            suppress_during_restore=bool(data.get('suppress_during_restore', defaults.suppress_during_restore)),
            cache_path=data.get('cache_path')
        )

    @classmethod
    def from_env(cls) -> 'SyncConfig':
        """Create SyncConfig from environment variables."""
        return cls().with_env_overrides()

    def with_env_overrides(self) -> 'SyncConfig':
        """Return a copy where every non-empty BUCKET_SYNC_* variable wins."""
        data = self.to_dict()
        env_storage = StorageConfig.from_env()
        for name, value in asdict(env_storage).items():
            if value:
                data[name] = value

        local_root = os.getenv(f'{ENV_PREFIX}_LOCAL_ROOT')
        if local_root:
            data['local_root'] = local_root
        include = os.getenv(f'{ENV_PREFIX}_INCLUDE')
        if include:
            data['include'] = _split_patterns(include)
        exclude = os.getenv(f'{ENV_PREFIX}_EXCLUDE')
        if exclude:
            data['exclude'] = _split_patterns(exclude)
        debounce = os.getenv(f'{ENV_PREFIX}_DEBOUNCE_SECONDS')
        if debounce:
            data['debounce_seconds'] = float(debounce)
        page_size = os.getenv(f'{ENV_PREFIX}_PAGE_SIZE')
        if page_size:
            data['page_size'] = int(page_size)
        poll_interval = os.getenv(f'{ENV_PREFIX}_POLL_INTERVAL')
        if poll_interval:
            data['poll_interval'] = float(poll_interval)
        suppress = os.getenv(f'{ENV_PREFIX}_SUPPRESS_DURING_RESTORE')
        if suppress:
            data['suppress_during_restore'] = suppress.lower() == 'true'
        cache_path = os.getenv(f'{ENV_PREFIX}_CACHE_PATH')
        if cache_path:
            data['cache_path'] = cache_path

        return SyncConfig.from_dict(data)

    @classmethod
    def load(cls, path: str) -> 'SyncConfig':
        """
        Load settings from a JSON file, then apply environment overrides.

        A missing file yields the defaults, so an unconfigured install simply
        reports itself as incomplete.
        """
        config_file = Path(path)
        data: Dict[str, Any] = {}
        if config_file.exists():
            data = json.loads(config_file.read_text(encoding='utf-8')) or {}
        return cls.from_dict(data).with_env_overrides()

    def save(self, path: str) -> None:
        """Persist the flat settings record as JSON."""
        config_file = Path(path)
        config_file.parent.mkdir(parents=True, exist_ok=True)
        config_file.write_text(json.dumps(self.to_dict(), indent=2), encoding='utf-8')
