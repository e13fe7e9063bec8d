# watchfolders/errors.py

"""
Watch folder error hierarchy

None of these are fatal to the application. They describe the failure of a
single watch entry or a single trigger; every other entry keeps running.
"""


class WatchFolderError(Exception):
    """Base exception for watch folder failures"""
    pass


class ConfigurationError(WatchFolderError):
    """Watched directory is missing, not a directory or cannot be watched"""
    pass


class TransientIOError(WatchFolderError):
    """Relocating a settled file failed (locked, vanished, permissions)"""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path


class WatchHandleError(WatchFolderError):
    """The OS-level watch died, e.g. the watched directory was deleted"""

    def __init__(self, message: str, directory=None):
        super().__init__(message)
        self.directory = directory
