# watchfolders/watchdog/handlers.py

"""
Event handler feeding raw watchdog events into a path debouncer
"""
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from watchdog.events import (
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileDeletedEvent,
    FileMovedEvent,
    FileClosedEvent,
    DirCreatedEvent,
    DirModifiedEvent,
    DirDeletedEvent,
    DirMovedEvent
)

from ..errors import WatchHandleError
from .debounce import PathDebouncer
from .events import EventType, WatchdogEvent
from .patterns import PatternFilter

logger = logging.getLogger(__name__)


def _to_path(value) -> Path:
    if isinstance(value, bytes):
        value = os.fsdecode(value)
    return Path(value)


class RawEventHandler(FileSystemEventHandler):
    """
    Translate watchdog events for one watched root into debouncer calls
    """

    def __init__(self, root: Path, debouncer: PathDebouncer,
                 pattern_filter: Optional[PatternFilter] = None,
                 on_error: Optional[Callable[[WatchHandleError], None]] = None):
        """
        Initialize event handler

        Args:
            root: Watched directory
            debouncer: Debouncer receiving file paths
            pattern_filter: Filter for file names
            on_error: Called once with a terminal watch error
        """
        super().__init__()
        self.root = Path(root)
        self.debouncer = debouncer
        self.pattern_filter = pattern_filter or PatternFilter()
        self.on_error = on_error

        # Statistics
        self.stats = {
            'events_received': 0,
            'events_processed': 0,
            'events_ignored': 0,
            'last_event': None,
        }

    def on_any_event(self, event):
        """Handle any file system event"""
        self.stats['events_received'] += 1
        self.stats['last_event'] = datetime.now()

        watchdog_event = self._convert_event(event)
        if watchdog_event is None:
            return

        if self._is_root_lost(watchdog_event):
            self._report_root_lost(watchdog_event)
            return

        if watchdog_event.is_directory:
            return

        self._handle_file_event(watchdog_event)

    def _convert_event(self, event) -> Optional[WatchdogEvent]:
        """Convert watchdog event to our internal format"""
        if isinstance(event, (FileCreatedEvent, DirCreatedEvent)):
            event_type = EventType.CREATED
        elif isinstance(event, (FileModifiedEvent, DirModifiedEvent)):
            event_type = EventType.MODIFIED
        elif isinstance(event, (FileDeletedEvent, DirDeletedEvent)):
            event_type = EventType.DELETED
        elif isinstance(event, (FileMovedEvent, DirMovedEvent)):
            event_type = EventType.MOVED
        elif isinstance(event, FileClosedEvent):
            event_type = EventType.CLOSED
        else:
            # Opened and other informational events
            return None

        dest_path = getattr(event, 'dest_path', None)

        return WatchdogEvent(
            event_type=event_type,
            src_path=_to_path(event.src_path),
            dest_path=_to_path(dest_path) if dest_path else None,
            is_directory=event.is_directory
        )

    def _is_root_lost(self, event: WatchdogEvent) -> bool:
        # inotify may report the root itself as a file event
        return (event.event_type in (EventType.DELETED, EventType.MOVED)
                and event.src_path == self.root)

    def _report_root_lost(self, event: WatchdogEvent):
        logger.error(f"Watched directory is gone: {self.root}")
        if self.on_error:
            self.on_error(WatchHandleError(f"Watched directory {event.event_type.value}: {self.root}",
                                           directory=self.root))

    def _handle_file_event(self, event: WatchdogEvent):
        if event.event_type == EventType.DELETED:
            self.debouncer.discard(event.src_path)
            return

        if event.event_type == EventType.MOVED:
            # The old name will never settle
            self.debouncer.discard(event.src_path)
            if event.dest_path is None or not self._is_under_root(event.dest_path):
                return

        path = event.target_path
        if not self.pattern_filter.accepts(path):
            self.stats['events_ignored'] += 1
            logger.debug(f"Ignoring event for {path}")
            return

        self.debouncer.touch(path)
        self.stats['events_processed'] += 1

    def _is_under_root(self, path: Path) -> bool:
        try:
            path.relative_to(self.root)
            return True
        except ValueError:
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get handler statistics"""
        return self.stats.copy()
