"""Curses-based UI display for the tail command."""

from __future__ import annotations

from curses import error as curses_error
from typing import TYPE_CHECKING

from .curses_colors import CursesColors
from .formatting import (
    clip,
    footer_text,
    format_log_lines,
    host_segments,
    state_label,
    suggestion_rows,
    visible_range,
)
from .help_popup import draw_help_popup
from .types import MAX_SUGGESTION_ROWS, ViewSettings

if TYPE_CHECKING:
    from ...controller import TailController

# Rows above the log pane: host bar, filename input, error line
HEADER_ROWS = 3
FOOTER_ROWS = 1
ESCAPE_KEY = 27
TAB_KEY = 9
BACKSPACE_KEYS = (8, 127)


class TailDisplay:
    """Curses tail view with encapsulated view state.

    The display never touches the network: it forwards key presses to the
    controller and redraws from controller state.
    """

    def __init__(
        self,
        stdscr,
        *,
        controller: TailController,
        settings: ViewSettings | None = None,
    ) -> None:
        self.stdscr = stdscr
        self.controller = controller
        self.settings = settings or ViewSettings()
        self.top: int | None = None
        self._last_total = 0
        self.page_step = 1
        self.show_help = False
        self.colors = CursesColors(stdscr)
        self.curses_mod = self.colors.curses_mod

    def safe_addstr(self, row: int, col: int, text: str, attr: int = 0) -> None:
        try:
            if attr:
                self.stdscr.addstr(row, col, text, attr)
            else:
                self.stdscr.addstr(row, col, text)
        except curses_error:
            return

    def handle_key(self, key: int, *, draw: bool = True) -> bool:
        """Handle a keypress. Returns True if we should exit.

        Args:
            key: The key code from getch()
            draw: Whether to redraw immediately (default True)
        """
        if key == -1:
            return False

        if self.show_help:
            self.show_help = False
            if draw:
                self.draw_screen()
            return False

        curses = self.curses_mod
        if not curses:
            return False
        controller = self.controller
        suggestions = controller.suggestions

        if key == curses.KEY_F10:
            return True
        if key == curses.KEY_F1:
            self.show_help = True
        elif key == curses.KEY_F2:
            self._start()
        elif key == curses.KEY_F3:
            controller.stop()
        elif key == curses.KEY_F4:
            controller.clear()
            self.top = None
        elif key == curses.KEY_F5:
            controller.next_host(1)
            self.top = None
        elif key == curses.KEY_F6:
            controller.next_host(-1)
            self.top = None
        elif key == curses.KEY_F7:
            self.settings = self.settings.toggle_line_numbers()
        elif key == curses.KEY_F8:
            self.settings = self.settings.toggle_auto_scroll()
            if self.settings.auto_scroll:
                self.top = None
        elif key in (curses.KEY_DOWN, TAB_KEY):
            if not suggestions.is_open:
                controller.focus_input()
            suggestions.move_next()
        elif key == curses.KEY_UP:
            if suggestions.is_open:
                suggestions.move_previous()
            else:
                self._scroll(-1)
        elif key in (curses.KEY_ENTER, ord("\n"), ord("\r")):
            if suggestions.current is not None:
                controller.select_suggestion()
            else:
                self._start()
        elif key == ESCAPE_KEY:
            controller.blur_input()
        elif key == curses.KEY_PPAGE:
            self._scroll(-self.page_step)
        elif key == curses.KEY_NPAGE:
            self._scroll(self.page_step)
        elif key in (curses.KEY_BACKSPACE, *BACKSPACE_KEYS):
            self._edit(controller.filename[:-1])
        elif 32 <= key < 127:
            self._edit(controller.filename + chr(key))
        else:
            return False

        if draw:
            self.draw_screen()
        return False

    def _edit(self, text: str) -> None:
        if not self.controller.suggestions.focused:
            self.controller.focus_input()
        self.controller.set_filename(text)

    def _start(self) -> None:
        self.controller.blur_input()
        self.top = None
        self.controller.start()

    def _scroll(self, delta: int) -> None:
        total = len(self.controller.session.lines)
        start, _ = visible_range(total, self.page_step, self.top)
        new_top = start + delta
        if new_top + self.page_step >= total:
            self.top = None
        else:
            self.top = max(new_top, 0)

    def on_update(self) -> None:
        """Adjust the viewport after the controller applied background work."""
        session = self.controller.session
        total = len(session.lines)
        if session.consume_scroll_reset():
            self.top = 0
        elif self.settings.auto_scroll:
            self.top = None
        elif self.top is None:
            # Pin the view where it was before the new lines arrived
            self.top = max(self._last_total - self.page_step, 0)
        self._last_total = total

    def draw_screen(self) -> None:
        self.stdscr.erase()
        height, width = self.stdscr.getmaxyx()
        usable_width = max(width - 1, 0)
        pane_height = max(height - HEADER_ROWS - FOOTER_ROWS, 0)
        self.page_step = max(pane_height, 1)

        self._draw_host_bar(usable_width)
        self._draw_log_pane(pane_height, usable_width)
        self._draw_error_line(usable_width)
        self._draw_footer(height - 1, usable_width)
        self._draw_suggestions(pane_height, usable_width)
        cursor_col = self._draw_input(usable_width)

        if self.curses_mod:
            try:
                self.stdscr.move(1, min(cursor_col, usable_width))
            except curses_error:
                pass
        self.stdscr.noutrefresh()
        if self.show_help:
            draw_help_popup(
                self.stdscr, self.curses_mod, popup_attr=self.colors.attrs.popup_attr
            )
        if self.curses_mod:
            self.curses_mod.doupdate()

    def _draw_host_bar(self, width: int) -> None:
        controller = self.controller
        title = "tailfleet "
        self.safe_addstr(0, 0, title, self.colors.attrs.title_attr)
        col = len(title)
        segments = host_segments(
            controller.registry.all_hosts(),
            active=controller.host,
            statuses=controller.monitor.snapshot(),
        )
        for label, status, is_active in segments:
            if col >= width:
                break
            text = clip(f" {label} ", width - col)
            attr = self.colors.status_attr(status)
            if is_active and self.curses_mod:
                attr |= self.curses_mod.A_REVERSE
            self.safe_addstr(0, col, text, attr)
            col += len(text) + 1

    def _draw_input(self, width: int) -> int:
        controller = self.controller
        label = "File: "
        state = state_label(controller.session.state, controller.session.filename)
        value_width = max(width - len(label) - len(state) - 1, 0)
        value = controller.filename[-value_width:] if value_width else ""
        self.safe_addstr(1, 0, label)
        self.safe_addstr(1, len(label), value)
        if len(label) + len(value) + len(state) < width:
            self.safe_addstr(1, width - len(state), state)
        return len(label) + len(value)

    def _draw_error_line(self, width: int) -> None:
        error = self.controller.errors.message
        if error:
            self.safe_addstr(2, 0, clip(error, width), self.colors.attrs.error_attr)

    def _draw_log_pane(self, pane_height: int, width: int) -> None:
        session = self.controller.session
        lines = list(session.lines)
        start, end = visible_range(len(lines), pane_height, self.top)
        first_number = session.received - len(lines) + 1
        rendered = format_log_lines(
            lines[start:end],
            first_number=first_number + start,
            show_line_numbers=self.settings.show_line_numbers,
            width=width,
            number_width=len(str(max(session.received, 1))),
        )
        for offset, text in enumerate(rendered):
            self.safe_addstr(HEADER_ROWS + offset, 0, text)

    def _draw_suggestions(self, pane_height: int, width: int) -> None:
        suggestions = self.controller.suggestions
        rows, highlighted = suggestion_rows(
            suggestions.suggestions,
            suggestions.cursor,
            max_rows=min(MAX_SUGGESTION_ROWS, pane_height),
        )
        if not rows:
            return
        box_width = min(max(len(r) for r in rows) + 2, max(width - 6, 1))
        popup_attr = self.colors.attrs.popup_attr
        for offset, name in enumerate(rows):
            attr = popup_attr
            if offset == highlighted and self.curses_mod:
                attr = self.curses_mod.A_BOLD | self.curses_mod.A_UNDERLINE | popup_attr
            text = (" " + clip(name, box_width - 2)).ljust(box_width)
            self.safe_addstr(2 + offset, 6, text, attr)

    def _draw_footer(self, row: int, width: int) -> None:
        text = footer_text(
            show_line_numbers=self.settings.show_line_numbers,
            auto_scroll=self.settings.auto_scroll,
            line_count=len(self.controller.session.lines),
        )
        self.safe_addstr(row, 0, clip(text, width), self.colors.attrs.number_attr)
