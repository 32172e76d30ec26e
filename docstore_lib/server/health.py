"""Server health utilities.

Provides a `get_health` function returning server status, start time,
uptime in seconds and a summary of the configured store.
"""
from datetime import datetime, timezone
from typing import Optional
import time
import os

# record process start time at import
_START_TIME = time.time()


def get_health(server_name: Optional[str] = None, backend: Optional[str] = None, cached_folders: Optional[int] = None) -> dict:
    """Return a dict representing server health.

    Fields:
    - status: 'ok'
    - start_time: ISO 8601 UTC timestamp when the process started
    - uptime_seconds: integer seconds since start
    - version: contents of the VERSION file, or 'unknown'
    - server_name, backend, cached_folders: as passed by the caller
    """
    now = time.time()
    uptime = int(now - _START_TIME)
    start_dt = datetime.fromtimestamp(_START_TIME, tz=timezone.utc)

    version = "unknown"
    version_file = os.path.join(os.path.dirname(__file__), "../../VERSION")
    if os.path.exists(version_file):
        with open(version_file, "r") as f:
            version = f.read().strip()

    return {
        "status": "ok",
        "start_time": start_dt.isoformat(),
        "uptime_seconds": uptime,
        "version": version,
        "server_name": server_name,
        "backend": backend,
        "cached_folders": cached_folders,
    }
