"""Process memory figures for the health report."""

import os
import resource
import sys

_MB = 1024 * 1024


def process_memory_mb() -> float:
    """Resident set size of this process in MB (peak RSS when /proc is unavailable)."""
    try:
        with open("/proc/self/statm") as f:
            resident_pages = int(f.read().split()[1])
        return resident_pages * os.sysconf("SC_PAGE_SIZE") / _MB
    except (OSError, ValueError, IndexError):
        peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # bytes on macOS, kilobytes elsewhere
        return peak / _MB if sys.platform == "darwin" else peak / 1024


def total_memory_mb() -> float:
    try:
        return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES") / _MB
    except (ValueError, OSError, AttributeError):
        return 0.0


def memory_snapshot() -> dict[str, float]:
    used = process_memory_mb()
    total = total_memory_mb()
    return {
        "used": round(used, 2),
        "total": round(total, 2),
        "percentage": round(used / total * 100, 2) if total else 0.0,
    }
