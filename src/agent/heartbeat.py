"""Coarse host metrics reported with each heartbeat."""

import os
import platform
import sys
import time
from typing import Any

try:
    import resource
except ImportError:  # Windows
    resource = None

_STARTED_AT = time.monotonic()


def _peak_rss_kb() -> int | None:
    if resource is None:
        return None
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    # macOS reports bytes, Linux kilobytes
    return peak // 1024 if sys.platform == "darwin" else peak


def _load_average() -> list[float] | None:
    try:
        return [round(value, 2) for value in os.getloadavg()]
    except (AttributeError, OSError):
        return None


def collect_system_info() -> dict[str, Any]:
    return {
        "platform": sys.platform,
        "platformRelease": platform.release(),
        "pythonVersion": platform.python_version(),
        "hostname": platform.node(),
        "pid": os.getpid(),
        "uptime": round(time.monotonic() - _STARTED_AT, 1),
        "peakRssKb": _peak_rss_kb(),
        "loadAverage": _load_average(),
        "agentType": "etl",
    }
