# watchfolders/watchdog/entry.py

"""
A single watched folder: event source, settings and enable/disable state
"""
import logging
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..errors import TransientIOError, WatchHandleError
from ..models import TaskProfile, WatchConfig
from ..processing.dispatch import DispatchSink
from ..processing.relocation import relocate_file
from ..utils.config import WatchdogConfig
from ..utils.logger import WatchLogAdapter
from .patterns import PatternFilter
from .watcher import DebouncedEventSource

logger = logging.getLogger(__name__)

# Seconds a relocation target is remembered while its own events settle
OWN_MOVE_TTL = 60.0


def create_event_source(config: WatchConfig, settings: WatchdogConfig,
                        on_path: Callable[[Path], None],
                        on_error: Callable[[WatchHandleError], None]) -> DebouncedEventSource:
    """Build the watchdog-backed source for a watch config"""
    return DebouncedEventSource(
        directory=config.folder_path,
        on_path=on_path,
        on_error=on_error,
        quiet_interval=settings.debounce_time,
        recursive=config.include_subdirectories,
        pattern_filter=PatternFilter(config.filter, settings.ignore_patterns),
        use_polling=settings.use_polling,
        poll_interval=settings.poll_interval,
        join_timeout=settings.join_timeout,
    )


class WatchEntry:
    """
    Runtime state for one WatchConfig

    Settled paths are queued on a private single-thread worker, so a slow sink
    only delays this entry's own files, in arrival order. Work that already
    started when the entry is disabled runs to completion (relocation and
    dispatch); work still queued or still settling is dropped.
    """

    def __init__(self, config: WatchConfig, profile: TaskProfile,
                 sink: DispatchSink,
                 settings: Optional[WatchdogConfig] = None,
                 on_error: Optional[Callable[['WatchEntry', Exception], None]] = None,
                 on_dispatch: Optional[Callable[['WatchEntry', Path], None]] = None,
                 source_factory: Optional[Callable[..., Any]] = None):
        """
        Initialize watch entry

        Args:
            config: Watch settings, also the identity of this entry
            profile: Owning task profile (not copied)
            sink: Receives finished files
            settings: Debounce and observer settings
            on_error: Called with (entry, error) for errors local to this entry
            on_dispatch: Called with (entry, path) after a successful dispatch
            source_factory: Replaces create_event_source
        """
        self.config = config
        self.profile = profile
        self.settings = settings or WatchdogConfig()
        self.on_error = on_error
        self.on_dispatch = on_dispatch
        self._sink = sink
        self.log = WatchLogAdapter(logger, config.folder_path, profile.name)

        factory = source_factory or create_event_source
        self.source = factory(
            config=config,
            settings=self.settings,
            on_path=self._on_path,
            on_error=self._on_watch_error,
        )

        # Serializes enable/disable/dispose
        self._lifecycle_lock = threading.RLock()
        # Guards the flags and stats touched from event threads
        self._lock = threading.Lock()
        self._enabled = False
        self._disposed = False
        self._session = 0
        self._executor: Optional[ThreadPoolExecutor] = None
        # Relocation targets inside the watched tree, path -> monotonic time
        self._own_moves: Dict[Path, float] = {}

        self.last_error: Optional[Exception] = None
        self.stats = {
            'paths_queued': 0,
            'paths_dropped': 0,
            'own_moves_ignored': 0,
            'files_relocated': 0,
            'files_dispatched': 0,
            'errors': 0,
        }

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def is_watching(self) -> bool:
        return self.source.is_watching

    def should_be_enabled(self) -> bool:
        """Current enabled state as configured by the profile and the watch"""
        return self.profile.is_watch_enabled() and bool(self.config.enabled)

    def enable(self) -> bool:
        """
        Start watching

        Returns:
            True if the entry is enabled afterwards, False if it is disposed

        Raises:
            ConfigurationError: the folder cannot be watched
        """
        with self._lifecycle_lock:
            if self._disposed:
                self.log.warning("Ignoring enable of disposed watch")
                return False
            if self._enabled:
                return True

            executor = ThreadPoolExecutor(max_workers=1,
                                          thread_name_prefix=f"watch-{self.config.folder_path.name}")
            with self._lock:
                self._session += 1
                self._executor = executor
                self._enabled = True

            try:
                self.source.start()
            except Exception:
                with self._lock:
                    self._enabled = False
                    self._session += 1
                    self._executor = None
                executor.shutdown(wait=False)
                raise

            with self._lock:
                self.last_error = None
            self.log.info("Watch enabled")
            return True

    def disable(self):
        """Stop watching and release the OS handle; enable() may be called again"""
        with self._lifecycle_lock:
            with self._lock:
                if not self._enabled:
                    return
                self._enabled = False
                self._session += 1
                executor = self._executor
                self._executor = None
                self._own_moves.clear()

            self.source.stop()
            if executor is not None:
                executor.shutdown(wait=False, cancel_futures=True)

            self.log.info("Watch disabled")

    def dispose(self):
        """Disable for good and detach from the sink; never raises"""
        with self._lifecycle_lock:
            if self._disposed:
                return
            try:
                self.disable()
            except Exception:
                self.log.exception("Error disposing watch")
            with self._lock:
                self._disposed = True
                self._sink = None

    def _on_path(self, path: Path):
        """Settled path from the source (timer thread)"""
        key = Path(os.path.abspath(path))
        with self._lock:
            moved_at = self._own_moves.pop(key, None)
            if moved_at is not None and time.monotonic() - moved_at <= OWN_MOVE_TTL:
                self.stats['own_moves_ignored'] += 1
                self.log.debug(f"Ignoring {path}: placed there by this watch")
                return
            if not self._enabled or self._executor is None:
                self.stats['paths_dropped'] += 1
                return
            session = self._session
            try:
                self._executor.submit(self._process, path, session)
            except RuntimeError:
                # Worker already shut down by a concurrent disable
                self.stats['paths_dropped'] += 1
                return
            self.stats['paths_queued'] += 1

    def _in_watched_tree(self, path: Path) -> bool:
        folder = os.path.abspath(self.config.folder_path)
        parent = os.path.dirname(os.path.abspath(path))
        if self.config.include_subdirectories:
            return parent == folder or parent.startswith(folder + os.sep)
        return parent == folder

    def _remember_own_move(self, target: Path):
        now = time.monotonic()
        with self._lock:
            expired = [p for p, seen in self._own_moves.items() if now - seen > OWN_MOVE_TTL]
            for p in expired:
                del self._own_moves[p]
            self._own_moves[Path(os.path.abspath(target))] = now

    def _count(self, key: str):
        with self._lock:
            self.stats[key] += 1

    def _process(self, path: Path, session: int):
        """Relocate and dispatch one settled file (worker thread)"""
        with self._lock:
            if session != self._session or self._sink is None:
                self.stats['paths_dropped'] += 1
                self.log.debug(f"Dropping {path}: watch was disabled")
                return
            sink = self._sink

        # Always read the settings as they are now
        snapshot = self.profile.snapshot()
        if not (snapshot.watch_folder_enabled and self.config.enabled):
            self._count('paths_dropped')
            self.log.debug(f"Dropping {path}: watch folder disabled in profile")
            return

        target = path
        if self.config.move_files_to_destination:
            try:
                target = relocate_file(path, self.config, snapshot)
            except TransientIOError as e:
                self.log.warning(f"Trigger abandoned for {path}: {e}")
                self._report_error(e)
                return
            if target != path:
                # The move shows up as a new file when it lands in the watched tree
                if self._in_watched_tree(target):
                    self._remember_own_move(target)
                self._count('files_relocated')

        try:
            sink.dispatch(target, snapshot)
        except Exception as e:
            self.log.error(f"Dispatch failed for {target}: {e}", exc_info=True)
            self._report_error(e)
            return

        self._count('files_dispatched')
        if self.on_dispatch:
            try:
                self.on_dispatch(self, target)
            except Exception as e:
                self.log.error(f"Error in dispatch callback: {e}")

    def _on_watch_error(self, error: WatchHandleError):
        """The source died and already stopped itself"""
        with self._lock:
            was_enabled = self._enabled
            self._enabled = False
            self._session += 1
            executor = self._executor
            self._executor = None
            self._own_moves.clear()

        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

        if was_enabled:
            self.log.error(f"Watch disabled after error: {error}")
        self._report_error(error)

    def _report_error(self, error: Exception):
        with self._lock:
            self.last_error = error
            self.stats['errors'] += 1
        if self.on_error:
            try:
                self.on_error(self, error)
            except Exception as e:
                self.log.error(f"Error in error callback: {e}")

    def get_status(self) -> Dict[str, Any]:
        """Get entry status"""
        with self._lock:
            stats = self.stats.copy()
        return {
            'folder_path': str(self.config.folder_path),
            'profile': self.profile.name,
            'enabled': self._enabled,
            'disposed': self._disposed,
            'watching': self.source.is_watching,
            'last_error': str(self.last_error) if self.last_error else None,
            'stats': stats,
        }

    def __repr__(self):
        return f"WatchEntry({self.config.folder_path}, enabled={self._enabled}, disposed={self._disposed})"
