# watchfolders/models.py

"""
Watch folder settings and task profiles

Both classes compare and hash by identity: two configs pointing at the same
directory are still two independent watches.
"""
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional


@dataclass(frozen=True)
class ProfileSnapshot:
    """Read-only copy of a profile taken when a file settles"""
    name: str
    watch_folder_enabled: bool
    destination_folder: Path
    subfolder_pattern: str = ""
    extras: Dict[str, Any] = field(default_factory=dict)
    taken_at: datetime = field(default_factory=datetime.now)


@dataclass(eq=False)
class WatchConfig:
    """Settings for one watched folder"""
    folder_path: Path
    filter: str = "*.*"
    include_subdirectories: bool = False
    move_files_to_destination: bool = False
    destination_resolver: Optional[Callable[[ProfileSnapshot], Path]] = None
    enabled: bool = True

    def __post_init__(self):
        if isinstance(self.folder_path, str):
            self.folder_path = Path(self.folder_path)

    def __str__(self):
        return f"WatchConfig({self.folder_path}, filter={self.filter!r})"


@dataclass(eq=False)
class TaskProfile:
    """
    Externally owned bundle of task settings

    The watch core only reads the enabled flag, takes snapshots and keeps the
    ``watch_folders`` list in sync. Those accessors go through ``_lock``; the
    owner may mutate anything else freely.
    """
    name: str = "default"
    watch_folder_enabled: bool = False
    destination_folder: Path = Path.home() / "Pictures" / "WatchFolders"
    subfolder_pattern: str = ""
    watch_folders: List[WatchConfig] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def __post_init__(self):
        if isinstance(self.destination_folder, str):
            self.destination_folder = Path(self.destination_folder)

    def is_watch_enabled(self) -> bool:
        with self._lock:
            return bool(self.watch_folder_enabled)

    def set_watch_enabled(self, enabled: bool):
        with self._lock:
            self.watch_folder_enabled = enabled

    def has_watch_folder(self, config: WatchConfig) -> bool:
        with self._lock:
            return any(item is config for item in self.watch_folders)

    def add_watch_folder(self, config: WatchConfig) -> bool:
        """
        Append config unless this exact object is already listed

        Returns:
            True if the config was appended
        """
        with self._lock:
            if any(item is config for item in self.watch_folders):
                return False
            self.watch_folders.append(config)
            return True

    def remove_watch_folder(self, config: WatchConfig) -> bool:
        """Remove config by identity, returns True if it was listed"""
        with self._lock:
            for index, item in enumerate(self.watch_folders):
                if item is config:
                    del self.watch_folders[index]
                    return True
            return False

    def list_watch_folders(self) -> List[WatchConfig]:
        with self._lock:
            return list(self.watch_folders)

    def snapshot(self) -> ProfileSnapshot:
        with self._lock:
            return ProfileSnapshot(
                name=self.name,
                watch_folder_enabled=bool(self.watch_folder_enabled),
                destination_folder=Path(self.destination_folder),
                subfolder_pattern=self.subfolder_pattern,
                extras=dict(self.extras),
            )
