from pathlib import Path

import pytest

from watchfolders.utils.config import WatchdogConfig
from watchfolders.watchdog.patterns import PatternFilter


@pytest.mark.parametrize("name", ["a.png", "notes.txt", "archive.tar.gz", "README"])
def test_default_filter_accepts_regular_files(name):
    assert PatternFilter().accepts(Path("/w") / name)


@pytest.mark.parametrize("name", [".hidden", "a.png.part", "video.crdownload", "~lock.docx", "x.tmp"])
def test_default_filter_ignores_partial_and_hidden_files(name):
    assert PatternFilter().should_ignore(Path("/w") / name)


def test_include_filter_is_case_insensitive_and_accepts_lists():
    pattern_filter = PatternFilter("*.png; *.JPG")

    assert pattern_filter.accepts(Path("/w/a.PNG"))
    assert pattern_filter.accepts(Path("/w/b.jpg"))
    assert not pattern_filter.accepts(Path("/w/c.gif"))


def test_empty_ignore_list_disables_ignoring():
    assert PatternFilter(ignore_patterns=[]).accepts(Path("/w/a.tmp"))


def test_default_ignore_list_is_shared_with_settings():
    settings = WatchdogConfig()

    assert settings.ignore_patterns == PatternFilter().ignore_patterns
    assert "*.swo" in settings.ignore_patterns
    assert not PatternFilter(ignore_patterns=settings.ignore_patterns).accepts(Path("notes.txt.swo"))
