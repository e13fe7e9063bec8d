# watchfolders/processing/relocation.py

"""
Moving settled files into a profile's destination folder
"""
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..errors import TransientIOError
from ..models import ProfileSnapshot, WatchConfig
from ..utils.file_utils import move_file_unique

logger = logging.getLogger(__name__)


def resolve_destination_folder(config: WatchConfig, profile: ProfileSnapshot,
                               now: Optional[datetime] = None) -> Path:
    """
    Work out where a file from this watch should be moved

    The config's own resolver wins; otherwise the profile destination folder
    is used, expanded with the profile's strftime subfolder pattern.
    """
    if config.destination_resolver is not None:
        return Path(config.destination_resolver(profile))

    folder = Path(profile.destination_folder).expanduser()
    if profile.subfolder_pattern:
        folder = folder / (now or datetime.now()).strftime(profile.subfolder_pattern)
    return folder


def relocate_file(path: Path, config: WatchConfig, profile: ProfileSnapshot) -> Path:
    """
    Move path to its destination folder under a non-colliding name

    A file that already sits in the destination folder is left alone.

    Args:
        path: Settled file
        config: Watch the file came from
        profile: Snapshot taken for this trigger

    Returns:
        New location of the file

    Raises:
        TransientIOError: resolving the folder or moving the file failed
    """
    try:
        destination = resolve_destination_folder(config, profile)
    except Exception as e:
        raise TransientIOError(f"Could not resolve destination for {path}: {e}", path=path) from e

    if os.path.abspath(path.parent) == os.path.abspath(destination):
        logger.debug(f"{path} is already in its destination folder")
        return path

    try:
        return move_file_unique(path, destination)
    except OSError as e:
        raise TransientIOError(f"Could not move {path} to {destination}: {e}", path=path) from e
