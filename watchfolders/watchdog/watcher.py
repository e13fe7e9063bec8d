# watchfolders/watchdog/watcher.py

"""
Debounced directory watcher
"""
import functools
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from ..errors import ConfigurationError, WatchHandleError
from .debounce import PathDebouncer
from .handlers import RawEventHandler
from .patterns import PatternFilter

logger = logging.getLogger(__name__)


class DebouncedEventSource:
    """
    Watches one directory and emits each file once it has settled

    The source owns one watchdog observer while started. Settled paths go to
    ``on_path``; a dead watch is reported once through ``on_error`` and the
    source stops itself.
    """

    def __init__(self, directory: Path,
                 on_path: Callable[[Path], None],
                 on_error: Optional[Callable[[WatchHandleError], None]] = None,
                 quiet_interval: float = 1.0,
                 recursive: bool = False,
                 pattern_filter: Optional[PatternFilter] = None,
                 use_polling: bool = False,
                 poll_interval: float = 1.0,
                 join_timeout: float = 5.0):
        """
        Initialize event source

        Args:
            directory: Directory to watch
            on_path: Receives settled file paths
            on_error: Receives a terminal WatchHandleError
            quiet_interval: Seconds a file must stay unchanged before it is emitted
            recursive: Watch subdirectories too
            pattern_filter: File name filter
            use_polling: Use polling instead of OS events
            poll_interval: Polling interval in seconds
            join_timeout: Seconds to wait for the observer thread on stop
        """
        self.directory = Path(os.path.abspath(directory))
        self.on_path = on_path
        self.on_error = on_error
        self.recursive = recursive
        self.use_polling = use_polling
        self.poll_interval = poll_interval
        self.join_timeout = join_timeout

        self.pattern_filter = pattern_filter or PatternFilter()
        self.debouncer = PathDebouncer(self._emit, quiet_interval=quiet_interval)

        # Observer and its handler, replaced on every start
        self.observer = None
        self.handler: Optional[RawEventHandler] = None
        self._lock = threading.RLock()

        self.stats = {
            'start_time': None,
            'paths_emitted': 0,
            'last_error': None,
        }

    @property
    def is_watching(self) -> bool:
        """True while an OS watch handle is held"""
        return self.observer is not None

    def start(self):
        """
        Start watching directory

        Raises:
            ConfigurationError: the directory is missing or cannot be watched
        """
        with self._lock:
            if self.observer is not None:
                return

            if not self.directory.is_dir():
                raise ConfigurationError(f"Directory does not exist: {self.directory}")

            if self.use_polling:
                observer = PollingObserver(timeout=self.poll_interval)
            else:
                observer = Observer()

            # Errors from an observer that was since replaced are ignored
            handler = RawEventHandler(
                root=self.directory,
                debouncer=self.debouncer,
                pattern_filter=self.pattern_filter,
                on_error=functools.partial(self._fail, observer)
            )

            self.debouncer.open()
            try:
                observer.schedule(handler, str(self.directory), recursive=self.recursive)
                observer.start()
            except OSError as e:
                self._shutdown_observer(observer)
                self.debouncer.close()
                raise ConfigurationError(f"Failed to watch {self.directory}: {e}") from e

            self.observer = observer
            self.handler = handler
            self.stats['start_time'] = datetime.now()

        logger.info(f"Started watching directory: {self.directory} (recursive: {self.recursive})")

    def stop(self):
        """Stop watching directory, dropping paths that have not settled"""
        with self._lock:
            observer = self.observer
            self.observer = None
            self.debouncer.close()

        if observer is None:
            return

        self._shutdown_observer(observer)
        logger.info(f"Stopped watching directory: {self.directory}")

    def _shutdown_observer(self, observer):
        try:
            observer.stop()
            # stop() may run from the observer's own dispatch thread
            if observer.is_alive() and observer is not threading.current_thread():
                observer.join(timeout=self.join_timeout)
        except Exception as e:
            logger.error(f"Error stopping observer for {self.directory}: {e}")

    def _emit(self, path: Path):
        with self._lock:
            if self.observer is None:
                return
            self.stats['paths_emitted'] += 1
        self.on_path(path)

    def _fail(self, observer, error: WatchHandleError):
        """Terminal error reported by the handler of observer"""
        with self._lock:
            if self.observer is not observer:
                return
            self.stats['last_error'] = str(error)
            self.observer = None
            self.debouncer.close()

        self._shutdown_observer(observer)
        logger.info(f"Stopped watching directory: {self.directory}")
        if self.on_error:
            self.on_error(error)

    def get_status(self) -> Dict[str, Any]:
        """Get watcher status"""
        return {
            'directory': str(self.directory),
            'is_watching': self.is_watching,
            'recursive': self.recursive,
            'use_polling': self.use_polling,
            'poll_interval': self.poll_interval if self.use_polling else None,
            'pending_paths': self.debouncer.pending_count,
            'stats': {**self.stats, **(self.handler.get_stats() if self.handler else {})},
        }
