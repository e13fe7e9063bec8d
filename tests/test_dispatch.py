import logging
import sys
from pathlib import Path

import pytest

from watchfolders.models import TaskProfile
from watchfolders.processing.dispatch import (
    CallbackDispatchSink,
    CommandDispatchSink,
    LoggingDispatchSink,
    build_sink,
)
from watchfolders.utils.config import DispatchConfig


def test_callback_sink_forwards_arguments():
    calls = []
    snapshot = TaskProfile(name="p").snapshot()

    CallbackDispatchSink(lambda path, profile: calls.append((path, profile))).dispatch(Path("/w/a.png"), snapshot)

    assert calls == [(Path("/w/a.png"), snapshot)]


def test_logging_sink_logs(caplog):
    with caplog.at_level(logging.INFO, logger="watchfolders.processing.dispatch"):
        LoggingDispatchSink().dispatch(Path("/w/a.png"), TaskProfile(name="p").snapshot())

    assert "a.png" in caplog.text


def test_command_sink_appends_path(tmp_path):
    marker = tmp_path / "marker.txt"
    script = f"import sys; open({str(marker)!r}, 'w').write(sys.argv[1])"
    sink = CommandDispatchSink([sys.executable, "-c", script], timeout=30)

    sink.dispatch(tmp_path / "a.png", TaskProfile().snapshot())

    assert marker.read_text() == str(tmp_path / "a.png")


def test_command_sink_logs_failures(caplog, tmp_path):
    sink = CommandDispatchSink([sys.executable, "-c", "import sys; sys.exit(3)"], timeout=30)

    with caplog.at_level(logging.ERROR):
        sink.dispatch(tmp_path / "a.png", TaskProfile().snapshot())

    assert "exit 3" in caplog.text


def test_command_sink_missing_program_does_not_raise(caplog, tmp_path):
    sink = CommandDispatchSink(["definitely-not-a-real-program-xyz"])

    with caplog.at_level(logging.ERROR):
        sink.dispatch(tmp_path / "a.png", TaskProfile().snapshot())

    assert "not found" in caplog.text


def test_build_sink_modes():
    assert isinstance(build_sink(DispatchConfig()), LoggingDispatchSink)
    assert isinstance(build_sink(DispatchConfig(mode="command", command=["true"])), CommandDispatchSink)

    with pytest.raises(ValueError):
        build_sink(DispatchConfig(mode="upload"))
    with pytest.raises(ValueError):
        build_sink(DispatchConfig(mode="command"))
