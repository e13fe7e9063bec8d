"""
Logging configuration for watch folders

Records logged through a ``WatchLogAdapter`` carry the watched folder and the
owning profile, so one log stream can be split per watch.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

TEXT_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - [%(watch_folder)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Placeholder for records that do not belong to a watch
NO_WATCH = '-'


class WatchContextFilter(logging.Filter):
    """Make sure every record has watch_folder and profile attributes"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, 'watch_folder'):
            record.watch_folder = NO_WATCH
        if not hasattr(record, 'profile'):
            record.profile = NO_WATCH
        return True


class WatchLogAdapter(logging.LoggerAdapter):
    """Attach one watch's folder and profile name to everything it logs"""

    def __init__(self, logger: logging.Logger, folder_path, profile_name: str):
        super().__init__(logger, {'watch_folder': str(folder_path), 'profile': profile_name})

    def process(self, msg, kwargs):
        kwargs['extra'] = {**self.extra, **kwargs.get('extra', {})}
        return msg, kwargs


class JsonFormatter(logging.Formatter):
    """One JSON object per line, watch fields included when present"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'thread': record.threadName,
            'message': record.getMessage(),
        }

        watch_folder = getattr(record, 'watch_folder', NO_WATCH)
        if watch_folder != NO_WATCH:
            entry['watch_folder'] = watch_folder
            entry['profile'] = getattr(record, 'profile', NO_WATCH)

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _make_formatter(log_format: str) -> logging.Formatter:
    if log_format.lower() == "json":
        return JsonFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(log_level: str = "INFO",
                  log_file: Optional[str] = None,
                  log_format: str = "text",
                  max_file_size: int = 10 * 1024 * 1024,
                  backup_count: int = 5) -> logging.Logger:
    """
    Configure the root logger for the watch service

    Args:
        log_level: Logging level name
        log_file: Rotating log file, console only when None
        log_format: "text" or "json"
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files to keep
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            filename=log_path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding='utf-8'
        ))

    context = WatchContextFilter()
    for handler in handlers:
        handler.setFormatter(_make_formatter(log_format))
        handler.addFilter(context)
        root_logger.addHandler(handler)

    # The observer threads are chatty at DEBUG
    logging.getLogger('watchdog').setLevel(logging.WARNING)

    root_logger.info(f"Logging configured. Level: {log_level}, Format: {log_format}"
                     + (f", File: {log_file}" if log_file else ""))
    return root_logger
