"""TailFleet tail command implementation.

- types.py: View settings record and help text
- formatting.py: Text rendering and layout (no curses dependencies)
- curses_colors.py: Color pairs and attributes
- display.py: Curses-based interactive UI
- entry.py: Command entry point and main loop
"""

from __future__ import annotations

from .display import TailDisplay
from .entry import cmd_tail
from .formatting import (
    clip,
    footer_text,
    format_log_lines,
    host_segments,
    state_label,
    suggestion_rows,
    visible_range,
)
from .types import ViewSettings

__all__ = [
    "TailDisplay",
    "ViewSettings",
    "clip",
    "cmd_tail",
    "footer_text",
    "format_log_lines",
    "host_segments",
    "state_label",
    "suggestion_rows",
    "visible_range",
]
