"""TailFleet command implementations."""

from __future__ import annotations

from .hosts import cmd_hosts
from .list_files import cmd_list_files
from .stream import cmd_stream
from .tail import cmd_tail

__all__ = [
    "cmd_hosts",
    "cmd_list_files",
    "cmd_stream",
    "cmd_tail",
]
