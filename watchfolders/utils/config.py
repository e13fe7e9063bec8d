# watchfolders/utils/config.py

"""
Configuration management for watch folders
"""
import json
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional, Union
from dataclasses import dataclass, field
import logging

from .. import models

logger = logging.getLogger(__name__)


DEFAULT_IGNORE_PATTERNS = [
    # Hidden files
    ".*",

    # Temporary and partial files
    "*.tmp", "*.temp", "*.part", "*.partial", "*.crdownload", "*.download",
    "~*", "*.swp", "*.swo",

    # System files
    "Thumbs.db", "desktop.ini", ".DS_Store",
]


@dataclass
class WatchdogConfig:
    """File watchdog configuration"""
    debounce_time: float = 1.0  # seconds a file must stay unchanged
    use_polling: bool = False
    poll_interval: float = 1.0
    join_timeout: float = 5.0
    ignore_patterns: list = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))


@dataclass
class DispatchConfig:
    """Processing pipeline handoff"""
    mode: str = "log"  # log or command
    command: list = field(default_factory=list)
    timeout: Optional[float] = None


@dataclass
class Config:
    """Main configuration class"""
    watchdog: WatchdogConfig = field(default_factory=WatchdogConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)

    # Raw task profiles, see build_profiles
    profiles: List[Dict[str, Any]] = field(default_factory=list)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "text"  # text or json

    def update_from_dict(self, data: Dict[str, Any]):
        """Update config from dictionary"""
        for key, value in (data or {}).items():
            if key == 'watchdog' and isinstance(value, dict):
                self.watchdog = _merge_dataclass(self.watchdog, value)
            elif key == 'dispatch' and isinstance(value, dict):
                self.dispatch = _merge_dataclass(self.dispatch, value)
            elif hasattr(self, key):
                setattr(self, key, value)
            else:
                logger.warning(f"Unknown configuration key: {key}")


def _merge_dataclass(instance, values: Dict[str, Any]):
    for key, value in values.items():
        if hasattr(instance, key):
            setattr(instance, key, value)
        else:
            logger.warning(f"Unknown configuration key: {key}")
    return instance


def load_config(path: Union[str, Path] = None) -> Config:
    """
    Load configuration from a YAML or JSON file

    Args:
        path: Config file; None returns the defaults

    Raises:
        FileNotFoundError: path was given but does not exist
        ValueError: the file could not be parsed
    """
    config = Config()
    if path is None:
        logger.info("No configuration file given, using defaults")
        return config

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ValueError(f"Failed to parse config file {config_path}: {e}") from e

    config.update_from_dict(data or {})
    return config


def build_profiles(config: Config) -> List[models.TaskProfile]:
    """
    Create task profiles and their watch folders from raw profile entries

    Example entry::

        name: screenshots
        watch_folder_enabled: true
        destination_folder: ~/Pictures/Uploads
        subfolder_pattern: "%Y-%m"
        watch_folders:
          - folder_path: ~/Downloads
            filter: "*.png"
            move_files_to_destination: true
    """
    profiles = []
    for raw in config.profiles:
        raw = dict(raw)
        folders = raw.pop('watch_folders', []) or []

        if 'destination_folder' in raw:
            raw['destination_folder'] = Path(raw['destination_folder']).expanduser()

        profile = models.TaskProfile(**raw)
        for folder in folders:
            folder = dict(folder)
            folder['folder_path'] = Path(folder['folder_path']).expanduser()
            profile.add_watch_folder(models.WatchConfig(**folder))

        profiles.append(profile)

    logger.info(f"Loaded {len(profiles)} task profile(s)")
    return profiles
