#!/usr/bin/env python3
"""
Demo of the bucket sync round trip against a local MinIO.

This script demonstrates:
- Storing a freshly written tree
- A second store that uploads nothing
- Restoring into an empty directory
"""
import os
import sys
import tempfile
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bucket_sync.models.config import SyncConfig
from bucket_sync.services.sync_engine import SyncEngine
from loguru import logger


def setup_demo_environment(local_root: str):
    """Configure environment for demo."""
    os.environ.setdefault('BUCKET_SYNC_ENDPOINT', 'http://localhost:9000')
    os.environ.setdefault('BUCKET_SYNC_ACCESS_KEY_ID', 'minioadmin')
    os.environ.setdefault('BUCKET_SYNC_ACCESS_KEY_SECRET', 'minioadmin')
    os.environ.setdefault('BUCKET_SYNC_REGION', 'us-east-1')
    os.environ.setdefault('BUCKET_SYNC_BUCKET', 'notes')
    os.environ.setdefault('BUCKET_SYNC_PREFIX', 'demo')
    os.environ['BUCKET_SYNC_LOCAL_ROOT'] = local_root


def main():
    """Run bucket sync demo."""
    logger.remove()
    logger.add(sys.stderr, format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> - <level>{message}</level>", level="INFO")

    logger.info("🚀 Bucket Sync Demo")

    with tempfile.TemporaryDirectory() as source, tempfile.TemporaryDirectory() as target:
        try:
            for name, text in [('index.md', '# Index'), ('journal/today.md', '# Today')]:
                path = Path(source) / name
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text)

            setup_demo_environment(source)
            engine = SyncEngine(SyncConfig.from_env())

            results = engine.store()
            logger.info(f"First store uploaded {results['files_uploaded']} files")

            results = engine.store()
            logger.info(f"Second store uploaded {results['files_uploaded']} files")

            setup_demo_environment(target)
            results = SyncEngine(SyncConfig.from_env()).restore()
            logger.info(f"Restore wrote {results['files_restored']} files into {target}:")
            for path in sorted(Path(target).rglob('*.md')):
                logger.info(f"  • {path.relative_to(target)}: {path.read_text()!r}")

        except Exception as e:
            logger.error(f"❌ Demo failed: {str(e)}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
