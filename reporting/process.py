"""Process information used for resource usage reporting."""

from __future__ import annotations

import sys


class ProcessInfo:
    """Read-only view of this process's resource usage."""

    @property
    def max_rss(self) -> int:
        """Peak resident set size in bytes.

        Raises:
            ImportError: The platform has no ``resource`` module (Windows)
            OSError: The kernel refused the usage query
        """
        import resource

        peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # macOS reports bytes, Linux and the BSDs report kilobytes
        if sys.platform == "darwin":
            return peak
        return peak * 1024
