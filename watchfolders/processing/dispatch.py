# watchfolders/processing/dispatch.py

"""
Handoff of finished files to the processing pipeline
"""
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol

from ..models import ProfileSnapshot

logger = logging.getLogger(__name__)


class DispatchSink(Protocol):
    """Receives every settled (and possibly relocated) file exactly once"""

    def dispatch(self, path: Path, profile: ProfileSnapshot) -> None:
        ...


class CallbackDispatchSink:
    """Forward files to a plain callable"""

    def __init__(self, callback: Callable[[Path, ProfileSnapshot], Any]):
        self.callback = callback

    def dispatch(self, path: Path, profile: ProfileSnapshot) -> None:
        self.callback(path, profile)


class LoggingDispatchSink:
    """Log the handoff only"""

    def dispatch(self, path: Path, profile: ProfileSnapshot) -> None:
        logger.info(f"Dispatching {path} (profile: {profile.name})")


class CommandDispatchSink:
    """
    Run an external command for every file

    The file path is appended as the last argument. A non-zero exit code is
    logged; the pipeline owns any retry.
    """

    def __init__(self, command: List[str], timeout: Optional[float] = None):
        """
        Args:
            command: Program and leading arguments
            timeout: Seconds before the command is killed, None waits forever
        """
        if not command:
            raise ValueError("Dispatch command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    def dispatch(self, path: Path, profile: ProfileSnapshot) -> None:
        cmd = self.command + [str(path)]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except FileNotFoundError:
            logger.error(f"Dispatch command not found: {self.command[0]}")
            return
        except subprocess.TimeoutExpired:
            logger.error(f"Dispatch command timed out after {self.timeout}s for {path}")
            return

        if result.returncode != 0:
            logger.error(f"Dispatch command failed for {path} "
                         f"(exit {result.returncode}): {result.stderr.strip()}")
        else:
            logger.debug(f"Dispatch command finished for {path}")


def build_sink(dispatch_config) -> DispatchSink:
    """
    Create the sink described by a DispatchConfig

    Args:
        dispatch_config: Object with ``mode``, ``command`` and ``timeout``
    """
    mode = (dispatch_config.mode or "log").lower()
    if mode == "command":
        return CommandDispatchSink(dispatch_config.command, timeout=dispatch_config.timeout)
    if mode == "log":
        return LoggingDispatchSink()
    raise ValueError(f"Unknown dispatch mode: {dispatch_config.mode}")
