"""TailFleet utility functions."""

from __future__ import annotations

import datetime as dt
import os
from pathlib import Path
from urllib.parse import quote

from .constants import CONFIG_DIR_NAME, SERVERS_ENV_VAR, SERVERS_FILE_NAME


def utc_now_iso() -> str:
    """Return current UTC time in ISO format without microseconds."""
    return dt.datetime.now(dt.UTC).replace(microsecond=0).isoformat()


def format_elapsed_time(seconds: float) -> str:
    """Format elapsed time in human-readable format.

    Args:
        seconds: Elapsed time in seconds

    Returns:
        Formatted string like "1m25s", "45s", or "1h05m30s"
    """
    total_seconds = int(seconds)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, secs = divmod(remainder, 60)

    if hours:
        return f"{hours}h{minutes:02d}m{secs:02d}s"
    if minutes:
        return f"{minutes}m{secs:02d}s"
    return f"{secs}s"


def default_servers_path() -> Path:
    """Return the host list path from the environment or the per-user default."""
    env_path = os.environ.get(SERVERS_ENV_VAR)
    if env_path:
        return Path(env_path)
    home = Path(os.path.expanduser("~"))
    return home / CONFIG_DIR_NAME / SERVERS_FILE_NAME


def join_url(base: str, path: str) -> str:
    """Join a host base URL and an absolute endpoint path."""
    return base.rstrip("/") + path


def encode_component(value: str) -> str:
    """Percent-encode a query value the way browsers' encodeURIComponent does."""
    return quote(value, safe="-_.!~*'()")


def resolve_servers_path(servers: str | None) -> Path:
    """Return the host list path from a CLI value, falling back to the default."""
    return Path(servers) if servers else default_servers_path()
