"""Key guide popup for the tail view."""

from __future__ import annotations

from curses import error as curses_error
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version

from .types import HELP_TEXT

# Border plus one blank column/row of padding on each side
H_MARGIN = 3
V_MARGIN = 2


def help_lines() -> list[str]:
    """Title line followed by the key guide."""
    try:
        ver = get_version("tailfleet")
    except PackageNotFoundError:
        ver = "?"
    return [f"tailfleet v{ver}", ""] + HELP_TEXT.rstrip().splitlines()


def popup_geometry(
    screen_height: int, screen_width: int, lines: list[str]
) -> tuple[int, int, int, int]:
    """Size and center a popup for lines on the screen.

    Returns:
        Tuple of (rows, cols, top, left), clipped to the screen
    """
    rows = min(len(lines) + V_MARGIN * 2, screen_height)
    cols = min(max(len(line) for line in lines) + H_MARGIN * 2, screen_width)
    top = max((screen_height - rows) // 2, 0)
    left = max((screen_width - cols) // 2, 0)
    return rows, cols, top, left


def draw_help_popup(stdscr, curses_mod, *, popup_attr: int) -> None:
    """Draw the key guide centered over the tail view."""
    if not curses_mod:
        return

    lines = help_lines()
    rows, cols, top, left = popup_geometry(*stdscr.getmaxyx(), lines)
    if rows <= V_MARGIN * 2 or cols <= H_MARGIN * 2:
        return
    try:
        win = curses_mod.newwin(rows, cols, top, left)
    except curses_error:
        return

    win.bkgd(" ", popup_attr)
    win.border()
    text_width = cols - H_MARGIN * 2
    for row, line in enumerate(lines[: rows - V_MARGIN * 2], start=V_MARGIN):
        attr = popup_attr
        # Title and section headings
        if row == V_MARGIN or line.endswith(":"):
            attr |= curses_mod.A_BOLD
        try:
            win.addstr(row, H_MARGIN, line[:text_width], attr)
        except curses_error:
            pass
    win.noutrefresh()
