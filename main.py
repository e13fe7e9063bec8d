#main.py

"""
Watch Folders - run every configured watch folder until interrupted
"""
import argparse
import logging
import sys
import time
from pathlib import Path

from watchfolders.processing.dispatch import build_sink
from watchfolders.utils.config import build_profiles, load_config
from watchfolders.utils.logger import setup_logging
from watchfolders.watchdog.registry import WatchRegistry

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="watchfolders",
        description="Watch folders and hand every new file to a processing pipeline",
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML or JSON configuration file")
    parser.add_argument("--log-level", help="Override the configured log level")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main entry point"""
    args = parse_args(argv)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        log_level=args.log_level or config.log_level,
        log_file=config.log_file,
        log_format=config.log_format,
    )

    try:
        sink = build_sink(config.dispatch)
        profiles = build_profiles(config)
    except (TypeError, ValueError, KeyError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    registry = WatchRegistry(sink, settings=config.watchdog)
    registry.register_callback(
        'on_error', lambda entry, error: logger.warning(f"{entry.config.folder_path}: {error}")
    )

    try:
        errors = registry.reconcile_profiles(profiles)
        for watch_config, error in errors.items():
            logger.error(f"Not watching {watch_config.folder_path}: {error}")

        logger.info(f"{registry.live_handle_count()} folder(s) watched. Press Ctrl+C to stop.")
        while True:
            time.sleep(1)

    except KeyboardInterrupt:
        logger.info("Shutting down...")

    finally:
        registry.shutdown_all()

    return 0


if __name__ == "__main__":
    sys.exit(main())
