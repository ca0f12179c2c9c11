"""Shared types and constants for the tail view."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class ViewSettings:
    """Cosmetic view options. Transitions return a new record."""

    show_line_numbers: bool = True
    auto_scroll: bool = True

    def toggle_line_numbers(self) -> ViewSettings:
        return replace(self, show_line_numbers=not self.show_line_numbers)

    def toggle_auto_scroll(self) -> ViewSettings:
        return replace(self, auto_scroll=not self.auto_scroll)


MAX_SUGGESTION_ROWS = 8

HELP_TEXT = """\
Keys (press any key to close)

Filename input:
  type        Edit the filename; matching files are suggested
  ↓/Tab ↑     Move through suggestions
  Enter       Pick the highlighted suggestion, or start streaming
  Esc         Close the suggestion list

Stream:
  F2          Start streaming the file from the active host
  F3          Stop streaming (received lines stay visible)
  F4          Clear lines, error and filename
  PgUp/PgDn   Scroll the log

Hosts and view:
  F5 / F6     Next / previous host
  F7          Toggle line numbers
  F8          Toggle auto-scroll
  F10         Quit

Host status: ● online  ○ offline (polled in the background)
"""
