# watchfolders/watchdog/patterns.py

"""
File name filtering for watched folders
"""
import fnmatch
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..utils.config import DEFAULT_IGNORE_PATTERNS

logger = logging.getLogger(__name__)


class PatternFilter:
    """
    Accept files whose name matches the include filter and no ignore pattern
    """

    def __init__(self, include: str = "*.*",
                 ignore_patterns: Optional[List[str]] = None):
        """
        Initialize pattern filter

        Args:
            include: Glob matched against the file name; "*.*" and "*" accept all
            ignore_patterns: Globs for files that never trigger
        """
        self.include = (include or "*").strip()
        self.ignore_patterns = (list(ignore_patterns) if ignore_patterns is not None
                                else list(DEFAULT_IGNORE_PATTERNS))

        # Cache for performance
        self.cache: Dict[str, bool] = {}
        self.cache_max_size = 10000

    def _matches_include(self, name: str) -> bool:
        if self.include in ('*', '*.*'):
            return True
        # "*.png;*.jpg" style lists
        return any(
            fnmatch.fnmatch(name.lower(), pattern.strip().lower())
            for pattern in self.include.replace(',', ';').split(';')
            if pattern.strip()
        )

    def _matches_ignore(self, name: str) -> bool:
        lowered = name.lower()
        return any(fnmatch.fnmatch(lowered, pattern.lower()) for pattern in self.ignore_patterns)

    def accepts(self, path: Path) -> bool:
        """
        Check if a file should trigger

        Args:
            path: File path

        Returns:
            True if the file name passes the filter
        """
        name = path.name
        if name in self.cache:
            return self.cache[name]

        result = self._matches_include(name) and not self._matches_ignore(name)

        if len(self.cache) >= self.cache_max_size:
            self.cache.clear()
        self.cache[name] = result

        return result

    def should_ignore(self, path: Path) -> bool:
        return not self.accepts(path)
