"""Curses color initialization and attribute management for the tail view."""

from __future__ import annotations

from curses import error as curses_error
from dataclasses import dataclass

from ...health import HostStatus


@dataclass
class CursesAttrs:
    """Named curses attributes for consistent styling.

    Attributes:
        title_attr: Attribute for "tailfleet" branding
        online_attr: Attribute for online hosts
        offline_attr: Attribute for offline hosts
        error_attr: Attribute for the error line
        number_attr: Attribute for line numbers
        popup_attr: Attribute for the help popup and suggestion list
    """

    title_attr: int
    online_attr: int
    offline_attr: int
    error_attr: int
    number_attr: int
    popup_attr: int


class CursesColors:
    """Curses color setup with a monochrome fallback."""

    def __init__(self, stdscr) -> None:
        self.stdscr = stdscr
        self.curses_mod = None
        self.color_enabled = False
        self.attrs = CursesAttrs(
            title_attr=0,
            online_attr=0,
            offline_attr=0,
            error_attr=0,
            number_attr=0,
            popup_attr=0,
        )
        self._init_curses()

    def _init_curses(self) -> None:
        """Initialize curses with color support when the terminal has it."""
        try:
            import curses

            self.curses_mod = curses
            curses.curs_set(1)
            self.attrs.popup_attr = curses.A_REVERSE
            self.attrs.error_attr = curses.A_BOLD
            if curses.has_colors():
                curses.start_color()
                curses.use_default_colors()
                curses.init_pair(1, curses.COLOR_CYAN, -1)
                curses.init_pair(2, curses.COLOR_GREEN, -1)
                curses.init_pair(3, curses.COLOR_RED, -1)
                curses.init_pair(4, curses.COLOR_YELLOW, -1)
                curses.init_pair(5, curses.COLOR_BLACK, curses.COLOR_WHITE)
                self.color_enabled = True
                self.attrs = CursesAttrs(
                    title_attr=curses.color_pair(1) | curses.A_BOLD,
                    online_attr=curses.color_pair(2),
                    offline_attr=curses.color_pair(3),
                    error_attr=curses.color_pair(3) | curses.A_BOLD,
                    number_attr=curses.color_pair(4),
                    popup_attr=curses.color_pair(5),
                )
        except (ImportError, curses_error):
            self.curses_mod = None
            self.color_enabled = False

    def status_attr(self, status: HostStatus) -> int:
        if status is HostStatus.ONLINE:
            return self.attrs.online_attr
        return self.attrs.offline_attr
