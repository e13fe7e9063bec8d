# watchfolders/watchdog/registry.py

"""
Registry of watched folders
"""
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..errors import WatchFolderError
from ..models import TaskProfile, WatchConfig
from ..processing.dispatch import DispatchSink
from ..utils.config import WatchdogConfig
from .entry import WatchEntry

logger = logging.getLogger(__name__)

OwnerLookup = Union[Callable[[WatchConfig], TaskProfile], Mapping[WatchConfig, TaskProfile]]


class WatchRegistry:
    """
    Owns one WatchEntry per tracked WatchConfig

    Configs are tracked by identity, never by folder path: two configs on the
    same directory get two independent entries. ``reconcile`` replaces the
    tracked set; ``add_watch``, ``remove_watch`` and ``set_enabled`` adjust
    single configs. Errors local to one entry never stop the others.
    """

    def __init__(self, sink: DispatchSink,
                 settings: Optional[WatchdogConfig] = None,
                 source_factory: Optional[Callable[..., Any]] = None):
        """
        Initialize registry

        Args:
            sink: Processing pipeline handoff shared by all entries
            settings: Debounce and observer settings
            source_factory: Passed to every WatchEntry (tests use fakes)
        """
        self.sink = sink
        self.settings = settings or WatchdogConfig()
        self.source_factory = source_factory

        # Keys hash by identity (WatchConfig has eq=False)
        self._entries: Dict[WatchConfig, WatchEntry] = {}
        self._lock = threading.RLock()

        # Callbacks
        self.callbacks = {
            'on_error': [],
            'on_dispatch': [],
        }

    # ----------------------------------------------------------
    # LOOKUP
    # ----------------------------------------------------------

    def get_entry(self, config: WatchConfig) -> Optional[WatchEntry]:
        with self._lock:
            return self._entries.get(config)

    @property
    def entries(self) -> List[WatchEntry]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, config) -> bool:
        with self._lock:
            return config in self._entries

    def live_handle_count(self) -> int:
        """Number of entries currently holding an OS watch handle"""
        return sum(1 for entry in self.entries if entry.is_watching)

    # ----------------------------------------------------------
    # MUTATION
    # ----------------------------------------------------------

    def add_watch(self, config: WatchConfig, profile: TaskProfile) -> WatchEntry:
        """
        Track config, creating and enabling its entry if it is new

        Adding an already tracked config returns the existing entry. The
        config is added to ``profile.watch_folders`` once.

        Raises:
            ConfigurationError: the entry should be enabled but its folder
                cannot be watched (the entry stays tracked, disabled)
        """
        with self._lock:
            existing = self._entries.get(config)
            if existing is not None:
                return existing

            profile.add_watch_folder(config)

            entry = WatchEntry(
                config=config,
                profile=profile,
                sink=self.sink,
                settings=self.settings,
                on_error=self._on_entry_error,
                on_dispatch=self._on_entry_dispatch,
                source_factory=self.source_factory,
            )
            self._entries[config] = entry
            logger.info(f"Watch folder added: {config.folder_path} (profile: {profile.name})")

            if entry.should_be_enabled():
                entry.enable()

            return entry

    def remove_watch(self, config: WatchConfig) -> bool:
        """
        Stop tracking config and drop it from its profile

        Returns:
            False if the config was not tracked
        """
        with self._lock:
            entry = self._entries.pop(config, None)
            if entry is None:
                return False

        entry.profile.remove_watch_folder(config)
        entry.dispose()
        logger.info(f"Watch folder removed: {config.folder_path}")
        return True

    def set_enabled(self, config: WatchConfig) -> bool:
        """
        Enable or disable the entry for config from its current settings

        Returns:
            False if the config is not tracked

        Raises:
            ConfigurationError: enabling failed
        """
        entry = self.get_entry(config)
        if entry is None:
            return False

        if entry.should_be_enabled():
            entry.enable()
        else:
            entry.disable()
        return True

    def reconcile(self, configs: Iterable[WatchConfig],
                  owner_of: OwnerLookup) -> Dict[WatchConfig, Exception]:
        """
        Make the tracked set match configs

        Entries for configs no longer wanted, or now owned by a different
        profile, are disposed. Unchanged entries keep running. New configs
        are added.

        Args:
            configs: Desired configs
            owner_of: Profile lookup, callable or mapping

        Returns:
            Errors keyed by config for entries that could not be enabled
        """
        lookup = owner_of.__getitem__ if isinstance(owner_of, Mapping) else owner_of

        desired: Dict[WatchConfig, TaskProfile] = {}
        for config in configs:
            if config not in desired:
                desired[config] = lookup(config)

        return self._apply(desired)

    def reconcile_profiles(self, profiles: Iterable[TaskProfile]) -> Dict[WatchConfig, Exception]:
        """Reconcile against every watch folder listed by the profiles"""
        desired: Dict[WatchConfig, TaskProfile] = {}
        for profile in profiles:
            for config in profile.list_watch_folders():
                desired.setdefault(config, profile)

        return self._apply(desired)

    def _apply(self, desired: Dict[WatchConfig, TaskProfile]) -> Dict[WatchConfig, Exception]:
        errors: Dict[WatchConfig, Exception] = {}

        with self._lock:
            stale: List[Tuple[WatchConfig, WatchEntry]] = [
                (config, entry) for config, entry in self._entries.items()
                if desired.get(config) is not entry.profile
            ]
            for config, entry in stale:
                del self._entries[config]
                entry.dispose()

            for config, profile in desired.items():
                try:
                    self.add_watch(config, profile)
                except WatchFolderError as e:
                    logger.error(f"Failed to enable watch folder {config.folder_path}: {e}")
                    errors[config] = e

            logger.info(f"Reconciled watch folders: {len(self._entries)} tracked, "
                        f"{len(stale)} removed, {len(errors)} failed")

        return errors

    def shutdown_all(self):
        """Dispose every entry; safe to call any number of times"""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()

        for entry in entries:
            try:
                entry.dispose()
            except Exception as e:
                logger.error(f"Error disposing watch {entry.config.folder_path}: {e}")

        if entries:
            logger.info(f"Unregistered {len(entries)} watch folder(s)")

    def close(self):
        self.shutdown_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown_all()

    # ----------------------------------------------------------
    # CALLBACKS
    # ----------------------------------------------------------

    def register_callback(self, event_type: str, callback: Callable):
        """
        Register a callback

        Args:
            event_type: 'on_error' (entry, error) or 'on_dispatch' (entry, path)
            callback: Callback function
        """
        if event_type in self.callbacks:
            self.callbacks[event_type].append(callback)
        else:
            logger.warning(f"Unknown callback type: {event_type}")

    def _call_callbacks(self, event_type: str, *args):
        for callback in list(self.callbacks.get(event_type, [])):
            try:
                callback(*args)
            except Exception as e:
                logger.error(f"Error in callback {event_type}: {e}")

    def _on_entry_error(self, entry: WatchEntry, error: Exception):
        self._call_callbacks('on_error', entry, error)

    def _on_entry_dispatch(self, entry: WatchEntry, path: Path):
        self._call_callbacks('on_dispatch', entry, path)

    def get_status(self) -> Dict[str, Any]:
        """Get registry status"""
        entries = self.entries
        return {
            'tracked': len(entries),
            'enabled': sum(1 for entry in entries if entry.is_enabled),
            'live_handles': sum(1 for entry in entries if entry.is_watching),
            'entries': [entry.get_status() for entry in entries],
        }
