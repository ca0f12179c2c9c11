"""Text rendering and layout for the tail view (no curses dependencies)."""

from __future__ import annotations

from collections.abc import Sequence

from ...health import HostStatus
from ...hosts import Host
from ...session import SessionState

STATUS_GLYPHS = {HostStatus.ONLINE: "●", HostStatus.OFFLINE: "○"}


def clip(text: str, width: int) -> str:
    """Clip text to width, marking the cut with an ellipsis."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def host_segments(
    hosts: Sequence[Host],
    *,
    active: Host,
    statuses: dict[str, HostStatus],
) -> list[tuple[str, HostStatus, bool]]:
    """Return (label, status, is_active) for each host in display order."""
    segments = []
    for host in hosts:
        status = statuses.get(host.name, HostStatus.OFFLINE)
        segments.append((f"{STATUS_GLYPHS[status]} {host.name}", status, host == active))
    return segments


def state_label(state: SessionState, filename: str) -> str:
    if state is SessionState.STREAMING:
        return f"[streaming {filename}]"
    if state is SessionState.CONNECTING:
        return "[connecting]"
    if state is SessionState.ERRORED:
        return "[error]"
    return "[idle]"


def visible_range(total: int, height: int, top: int | None) -> tuple[int, int]:
    """Return the [start, end) slice of lines shown in a pane of height rows.

    ``top`` None follows the end of the buffer; otherwise it is clamped so
    the pane never scrolls past the last line.
    """
    if height <= 0:
        return 0, 0
    max_top = max(total - height, 0)
    start = max_top if top is None else min(max(top, 0), max_top)
    return start, min(start + height, total)


def format_log_lines(
    lines: Sequence[str],
    *,
    first_number: int,
    show_line_numbers: bool,
    width: int,
    number_width: int = 0,
) -> list[str]:
    """Render log lines, optionally prefixed with their 1-based line number."""
    rendered = []
    for offset, line in enumerate(lines):
        if show_line_numbers:
            number = f"{first_number + offset}.".rjust(number_width + 1)
            text = f"{number} {line}"
        else:
            text = line
        rendered.append(clip(text.replace("\t", "    "), width))
    return rendered


def suggestion_rows(
    suggestions: Sequence[str], cursor: int, *, max_rows: int
) -> tuple[list[str], int]:
    """Window the suggestion list around the cursor.

    Returns:
        Tuple of (visible suggestions, index of the highlighted row or -1)
    """
    if max_rows <= 0 or not suggestions:
        return [], -1
    start = 0
    if cursor >= max_rows:
        start = cursor - max_rows + 1
    window = list(suggestions[start : start + max_rows])
    highlighted = cursor - start if cursor >= 0 else -1
    return window, highlighted


def footer_text(*, show_line_numbers: bool, auto_scroll: bool, line_count: int) -> str:
    lines_flag = "on" if show_line_numbers else "off"
    scroll_flag = "on" if auto_scroll else "off"
    return (
        "F1 help  F2 start  F3 stop  F4 clear  F5/F6 host  F10 quit"
        f"  | lines:{line_count} numbers:{lines_flag} auto-scroll:{scroll_flag}"
    )
