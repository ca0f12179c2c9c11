"""
TailFleet - tail remote log files from a fleet of log servers.

Design goals:
- One live stream at a time, always against the active host.
- Host health is polled in the background and never blocks the stream.
- Results that arrive after the active host changed are dropped.
"""

from __future__ import annotations

from .cli import main
from .constants import DEFAULT_HOST, ERROR_SENTINEL_PREFIX
from .exceptions import TailFleetError, UserError

__all__ = [
    "DEFAULT_HOST",
    "ERROR_SENTINEL_PREFIX",
    "TailFleetError",
    "UserError",
    "main",
]
