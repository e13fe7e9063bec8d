"""Pytest configuration and fixtures."""

import sys
import threading
import time
from pathlib import Path

import pytest

# Add project root to Python path for imports
root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path))

from watchfolders.errors import ConfigurationError
from watchfolders.models import TaskProfile, WatchConfig
from watchfolders.utils.config import WatchdogConfig
from watchfolders.watchdog.debounce import PathDebouncer


def wait_for(predicate, timeout=5.0, interval=0.02):
    """Poll predicate until it is true or timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


class FakeEventSource:
    """In-process stand-in for DebouncedEventSource, no OS watch involved."""

    def __init__(self, config, settings, on_path, on_error):
        self.directory = Path(config.folder_path)
        self.on_path = on_path
        self.on_error = on_error
        self.is_watching = False
        self.start_calls = 0
        self.stop_calls = 0
        self.debouncer = PathDebouncer(self._settled, quiet_interval=settings.debounce_time)

    def start(self):
        if self.is_watching:
            return
        if not self.directory.is_dir():
            raise ConfigurationError(f"Directory does not exist: {self.directory}")
        self.debouncer.open()
        self.is_watching = True
        self.start_calls += 1

    def stop(self):
        self.debouncer.close()
        if self.is_watching:
            self.is_watching = False
            self.stop_calls += 1

    def touch(self, path):
        """Raw change event."""
        if self.is_watching:
            self.debouncer.touch(Path(path))

    def emit(self, path):
        """Already settled path."""
        if self.is_watching:
            self.on_path(Path(path))

    def fail(self, error):
        self.stop()
        self.on_error(error)

    def _settled(self, path):
        if self.is_watching:
            self.on_path(path)


class RecordingSink:
    """DispatchSink that records calls, optionally blocking on a gate."""

    def __init__(self, gate=None):
        self.calls = []
        self.gate = gate
        self.started = threading.Event()
        self._lock = threading.Lock()

    def dispatch(self, path, profile):
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=10)
        with self._lock:
            self.calls.append((Path(path), profile))

    @property
    def paths(self):
        with self._lock:
            return [path for path, _ in self.calls]


@pytest.fixture
def settings():
    return WatchdogConfig(debounce_time=0.1, join_timeout=2.0)


@pytest.fixture
def sources():
    """Every FakeEventSource created through fake_factory."""
    return []


@pytest.fixture
def fake_factory(sources):
    def factory(config, settings, on_path, on_error):
        source = FakeEventSource(config, settings, on_path, on_error)
        sources.append(source)
        return source
    return factory


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def profile(tmp_path):
    return TaskProfile(
        name="test",
        watch_folder_enabled=True,
        destination_folder=tmp_path / "out",
    )


@pytest.fixture
def watch_dir(tmp_path):
    path = tmp_path / "w1"
    path.mkdir()
    return path


@pytest.fixture
def config(watch_dir):
    return WatchConfig(folder_path=watch_dir)
