import json
import logging

import pytest

from watchfolders.utils.config import Config, build_profiles, load_config
from watchfolders.utils.logger import JsonFormatter, WatchLogAdapter, setup_logging


CONFIG_YAML = """
log_level: DEBUG
watchdog:
  debounce_time: 0.5
  use_polling: true
dispatch:
  mode: command
  command: ["echo", "upload"]
profiles:
  - name: screenshots
    watch_folder_enabled: true
    destination_folder: {out}
    subfolder_pattern: "%Y-%m"
    watch_folders:
      - folder_path: {watched}
        filter: "*.png"
        move_files_to_destination: true
      - folder_path: {watched}
"""


def test_load_yaml_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML.format(out=tmp_path / "out", watched=tmp_path / "w"))

    config = load_config(path)

    assert config.log_level == "DEBUG"
    assert config.watchdog.debounce_time == 0.5
    assert config.watchdog.use_polling is True
    assert config.watchdog.poll_interval == 1.0
    assert config.dispatch.mode == "command"
    assert config.dispatch.command == ["echo", "upload"]


def test_build_profiles_creates_distinct_watch_configs(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML.format(out=tmp_path / "out", watched=tmp_path / "w"))

    profiles = build_profiles(load_config(path))

    assert len(profiles) == 1
    profile = profiles[0]
    assert profile.name == "screenshots"
    assert profile.is_watch_enabled()
    assert profile.destination_folder == tmp_path / "out"
    first, second = profile.watch_folders
    assert first.folder_path == second.folder_path == tmp_path / "w"
    assert first is not second
    assert first.filter == "*.png"
    assert first.move_files_to_destination is True
    assert second.move_files_to_destination is False


def test_load_json_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"log_format": "json", "watchdog": {"debounce_time": 2}}))

    config = load_config(path)

    assert config.log_format == "json"
    assert config.watchdog.debounce_time == 2


def test_load_without_path_returns_defaults():
    config = load_config(None)

    assert isinstance(config, Config)
    assert config.profiles == []
    assert config.dispatch.mode == "log"


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("watchdog: [unclosed")

    with pytest.raises(ValueError):
        load_config(path)


def test_setup_logging_writes_json_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    log_file = tmp_path / "logs" / "watch.log"
    setup_logging(log_level="DEBUG", log_file=str(log_file), log_format="json")
    try:
        plain = logging.getLogger("watchfolders.test")
        plain.info("hello")
        WatchLogAdapter(plain, tmp_path / "w1", "screenshots").warning("watch gone")
        for handler in root.handlers:
            handler.flush()

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        hello, gone = records[-2:]
        assert hello["message"] == "hello"
        assert hello["level"] == "INFO"
        assert "watch_folder" not in hello
        assert gone["watch_folder"] == str(tmp_path / "w1")
        assert gone["profile"] == "screenshots"
        assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
    finally:
        for handler in root.handlers[:]:
            handler.close()
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
