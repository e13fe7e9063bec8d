# watchfolders/watchdog/debounce.py

"""
Per-path debouncing for file system events

Editors and copy tools emit many intermediate writes for a single file. A
path is only emitted once it has been quiet for ``quiet_interval`` seconds.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class PendingPath:
    """Path waiting for its settle timer"""
    path: Path
    first_seen: datetime
    last_seen: datetime
    count: int = 1
    generation: int = 0
    timer: Optional[threading.Timer] = None

    def update(self):
        """Update event timestamp and count"""
        self.last_seen = datetime.now()
        self.count += 1
        self.generation += 1


class PathDebouncer:
    """
    Debouncer keyed by path, one ``threading.Timer`` per pending path
    """

    def __init__(self, on_settled: Callable[[Path], None],
                 quiet_interval: float = 1.0):
        """
        Initialize debouncer

        Args:
            on_settled: Called with the path once it stopped changing
            quiet_interval: Seconds without events before a path settles
        """
        self.on_settled = on_settled
        self.quiet_interval = quiet_interval
        self.pending: Dict[Path, PendingPath] = {}
        self.lock = threading.Lock()
        self._closed = False

        # Statistics
        self.stats = {
            'total_events': 0,
            'debounced_events': 0,
            'emitted_paths': 0,
            'dropped_paths': 0,
        }

    def touch(self, path: Path) -> bool:
        """
        Record an event for path and restart its quiet timer

        Args:
            path: File that changed

        Returns:
            False if the debouncer is closed and the event was ignored
        """
        with self.lock:
            if self._closed:
                return False

            self.stats['total_events'] += 1
            record = self.pending.get(path)

            if record is not None:
                if record.timer:
                    record.timer.cancel()
                record.update()
                self.stats['debounced_events'] += 1
                logger.debug(f"Debounced {path} (count: {record.count})")
            else:
                now = datetime.now()
                record = PendingPath(path=path, first_seen=now, last_seen=now)
                self.pending[path] = record

            record.timer = threading.Timer(
                self.quiet_interval,
                self._settle,
                args=(path, record.generation)
            )
            record.timer.daemon = True
            record.timer.start()
            return True

    def discard(self, path: Path) -> bool:
        """Drop a pending path without emitting it"""
        with self.lock:
            record = self.pending.pop(path, None)
            if record is None:
                return False
            if record.timer:
                record.timer.cancel()
            self.stats['dropped_paths'] += 1
            return True

    def _settle(self, path: Path, generation: int):
        """Timer callback, emits path unless it was touched again"""
        with self.lock:
            record = self.pending.get(path)
            # A newer touch or a cancel already replaced this timer
            if self._closed or record is None or record.generation != generation:
                return
            del self.pending[path]

        if not path.is_file():
            logger.debug(f"Settled path vanished before emit: {path}")
            with self.lock:
                self.stats['dropped_paths'] += 1
            return

        with self.lock:
            self.stats['emitted_paths'] += 1
        logger.debug(f"Path settled after {record.count} event(s): {path}")

        try:
            self.on_settled(path)
        except Exception as e:
            logger.error(f"Error handling settled path {path}: {e}", exc_info=True)

    def open(self):
        """Accept events again after ``close``"""
        with self.lock:
            self._closed = False

    def close(self) -> int:
        """
        Cancel every pending timer and stop accepting events

        Returns:
            Number of pending paths dropped
        """
        with self.lock:
            self._closed = True
            dropped = len(self.pending)
            for record in self.pending.values():
                if record.timer:
                    record.timer.cancel()
            self.pending.clear()
            self.stats['dropped_paths'] += dropped

        if dropped:
            logger.debug(f"Dropped {dropped} pending path(s)")
        return dropped

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        with self.lock:
            return len(self.pending)

    def get_stats(self) -> Dict[str, Any]:
        """Get debouncer statistics"""
        with self.lock:
            return {
                **self.stats,
                'pending_paths': len(self.pending),
                'quiet_interval': self.quiet_interval,
            }
