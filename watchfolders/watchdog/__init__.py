#watchfolders/watchdog/__init__.py

"""
Watch Folders Watchdog Module
Debounced directory watching and the watch registry
"""
from .events import WatchdogEvent, EventType
from .debounce import PathDebouncer, PendingPath
from .patterns import PatternFilter
from .handlers import RawEventHandler
from .watcher import DebouncedEventSource
from .entry import WatchEntry, create_event_source
from .registry import WatchRegistry

__all__ = [
    'WatchdogEvent',
    'EventType',
    'PathDebouncer',
    'PendingPath',
    'PatternFilter',
    'RawEventHandler',
    'DebouncedEventSource',
    'WatchEntry',
    'create_event_source',
    'WatchRegistry',
]
