"""
File utilities for watch folders
"""
import os
import shutil
import threading
from pathlib import Path
from typing import Union
import logging

logger = logging.getLogger(__name__)

# Serializes name probing and the move so two watches cannot claim one name
_move_lock = threading.Lock()


def ensure_directory(directory: Union[str, Path]) -> Path:
    """
    Create directory (and parents) if it does not exist

    Args:
        directory: Directory path

    Returns:
        The directory as a Path
    """
    dir_path = Path(directory)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def generate_unique_filename(base_path: Union[str, Path]) -> Path:
    """
    Generate unique filename by adding counter if file exists

    Args:
        base_path: Base file path

    Returns:
        Unique file path
    """
    path = Path(base_path)

    if not path.exists():
        return path

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}_{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def move_file_unique(source: Union[str, Path],
                     target_dir: Union[str, Path]) -> Path:
    """
    Move a file into target_dir without overwriting anything there

    Args:
        source: Source file path
        target_dir: Destination directory, created if missing

    Returns:
        Final path of the moved file

    Raises:
        OSError: the source is missing or the move failed
    """
    source_path = Path(source)

    if not source_path.is_file():
        raise FileNotFoundError(f"Source file not found: {source_path}")

    target_dir = ensure_directory(target_dir)

    with _move_lock:
        target_path = generate_unique_filename(target_dir / source_path.name)
        try:
            # Use shutil.move which handles cross-device moves
            shutil.move(str(source_path), str(target_path))
        except OSError:
            # A failed cross-device copy can leave a partial target behind
            if source_path.exists() and target_path.exists():
                try:
                    os.remove(target_path)
                except OSError as cleanup_error:
                    logger.warning(f"Could not remove partial file {target_path}: {cleanup_error}")
            raise

    logger.info(f"Moved file: {source_path} -> {target_path}")
    return target_path
