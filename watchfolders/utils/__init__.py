# watchfolders/utils/__init__.py

"""
Watch folder utilities
"""
from .config import Config, WatchdogConfig, DispatchConfig, load_config, build_profiles
from .logger import setup_logging, JsonFormatter, WatchLogAdapter
from .file_utils import ensure_directory, generate_unique_filename, move_file_unique

__all__ = [
    'Config', 'WatchdogConfig', 'DispatchConfig', 'load_config', 'build_profiles',
    'setup_logging', 'JsonFormatter', 'WatchLogAdapter',
    'ensure_directory', 'generate_unique_filename', 'move_file_unique',
]
