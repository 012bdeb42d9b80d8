"""
Main entry point for the bucket sync service.
"""
import os
import sys
import json
import time
from pathlib import Path
from loguru import logger

from .models.config import ConfigIncompleteError, SyncConfig
from .services.sync_app import SyncApp


DEFAULT_CONFIG_PATH = os.getenv('BUCKET_SYNC_CONFIG', 'bucket_sync.json')


def setup_logging(log_dir: str = "logs"):
    """Configure logging for the sync service."""
    # Remove default logger
    logger.remove()

    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="INFO"
    )

    Path(log_dir).mkdir(exist_ok=True)

    logger.add(
        f"{log_dir}/bucket_sync.log",
        rotation="10 MB",
        retention="7 days",
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
        level="DEBUG"
    )


def parse_args(argv):
    """Split argv into (command, config_path)."""
    args = list(argv)
    config_path = DEFAULT_CONFIG_PATH
    if '--config' in args:
        index = args.index('--config')
        if index + 1 >= len(args):
            raise ValueError("--config requires a path")
        config_path = args[index + 1]
        del args[index:index + 2]
    command = args[0].lower() if args else 'watch'
    return command, config_path


def run_pass(command: str, config: SyncConfig) -> bool:
    """Run a single restore or store pass."""
    app = SyncApp(config)
    results = app.run_command(command)
    logger.info(f"Sync Results: {json.dumps(results, indent=2, default=str)}")
    return results['success']


def run_watch_mode(config: SyncConfig):
    """Restore once, then push local changes until interrupted."""
    app = SyncApp(config)
    if not app.start():
        logger.warning("Storage settings incomplete - nothing to do")
        return

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully")
    finally:
        if app.debouncer.pending:
            logger.info("Flushing pending store before exit")
            app.debouncer.flush()
        app.stop()


def show_status(config: SyncConfig, config_path: str):
    """Log configuration completeness and cache state."""
    status = {
        'config_path': config_path,
        'complete': config.is_complete(),
        'missing': config.storage.missing_fields(),
        'bucket': config.storage.bucket,
        'prefix': config.storage.prefix,
        'endpoint': config.storage.endpoint,
        'local_root': config.local_root,
        'include': config.include,
        'exclude': config.exclude
    }
    if config.is_complete():
        status.update(SyncApp(config).ensure_engine().get_sync_status())
    logger.info(f"Service Status: {json.dumps(status, indent=2)}")
    return status


def print_help():
    """Print help information for the CLI."""
    help_text = """
Bucket Sync - Command Line Interface

USAGE:
    python -m bucket_sync.main [COMMAND] [--config PATH]

COMMANDS:
    restore     Pull every object under the prefix into the local tree
    store       Push local files changed since the last store
    watch       Restore once, then push local changes as they happen (default)
    status      Show configuration and cache state
    config      Write the effective settings to the config file
    help        Show this help message

ENVIRONMENT VARIABLES:
    BUCKET_SYNC_CONFIG               Settings file (default: bucket_sync.json)
    BUCKET_SYNC_ACCESS_KEY_ID        Access key ID
    BUCKET_SYNC_ACCESS_KEY_SECRET    Access key secret
    BUCKET_SYNC_REGION               Bucket region
    BUCKET_SYNC_BUCKET               Bucket name
    BUCKET_SYNC_ENDPOINT             Custom endpoint URL (optional)
    BUCKET_SYNC_PREFIX               Key prefix (optional)
    BUCKET_SYNC_LOCAL_ROOT           Local tree to sync (default: .)
    BUCKET_SYNC_INCLUDE              Comma-separated include globs (default: *.md)
    BUCKET_SYNC_EXCLUDE              Comma-separated exclude globs
    BUCKET_SYNC_DEBOUNCE_SECONDS     Quiet period before a store (default: 1.0)
    BUCKET_SYNC_POLL_INTERVAL        Watch polling interval (default: 2.0)
    BUCKET_SYNC_CACHE_PATH           Persist the change cache to this file
"""
    print(help_text)


def main():
    """Main entry point with command line argument handling."""
    setup_logging()

    try:
        command, config_path = parse_args(sys.argv[1:])
    except ValueError as e:
        logger.error(str(e))
        print_help()
        sys.exit(1)

    try:
        if command in ["help", "--help", "-h"]:
            print_help()
            return

        config = SyncConfig.load(config_path)

        if command in ("restore", "store"):
            if not run_pass(command, config):
                sys.exit(1)
        elif command == "watch":
            run_watch_mode(config)
        elif command == "status":
            show_status(config, config_path)
        elif command == "config":
            config.save(config_path)
            logger.info(f"Settings written to {config_path}")
        else:
            logger.error(f"Unknown command: {command}")
            logger.error("Use 'help' to see available commands")
            print_help()
            sys.exit(1)

    except ConfigIncompleteError as e:
        logger.error(f"Cannot sync: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down gracefully")
        sys.exit(0)
    except (OSError, ValueError) as e:
        logger.error(f"Command failed: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
