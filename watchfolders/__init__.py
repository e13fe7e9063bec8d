"""
Watch Folders
Trigger a processing pipeline for every file that settles in a watched folder
"""
from .errors import ConfigurationError, TransientIOError, WatchFolderError, WatchHandleError
from .models import ProfileSnapshot, TaskProfile, WatchConfig
from .processing import CallbackDispatchSink, DispatchSink
from .watchdog import DebouncedEventSource, WatchEntry, WatchRegistry

__version__ = "1.0.0"

__all__ = [
    '__version__',
    'WatchFolderError',
    'ConfigurationError',
    'TransientIOError',
    'WatchHandleError',
    'ProfileSnapshot',
    'TaskProfile',
    'WatchConfig',
    'DispatchSink',
    'CallbackDispatchSink',
    'DebouncedEventSource',
    'WatchEntry',
    'WatchRegistry',
]
