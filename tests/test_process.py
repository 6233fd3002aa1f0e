"""Tests for process information."""

import sys

import pytest

from reporting.process import ProcessInfo


@pytest.mark.skipif(sys.platform == "win32", reason="resource module is POSIX only")
def test_max_rss():
    """Test that the peak RSS is a plausible byte count."""
    max_rss = ProcessInfo().max_rss
    assert isinstance(max_rss, int)
    # any Python interpreter needs more than a megabyte
    assert max_rss > 1024 * 1024
