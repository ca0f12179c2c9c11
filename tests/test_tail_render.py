"""Tests for the tail view's text rendering and settings."""

from __future__ import annotations

from tailfleet.commands.tail.formatting import (
    clip,
    footer_text,
    format_log_lines,
    host_segments,
    state_label,
    suggestion_rows,
    visible_range,
)
from tailfleet.commands.tail.types import ViewSettings
from tailfleet.health import HostStatus
from tailfleet.session import SessionState


def test_clip_marks_cut() -> None:
    assert clip("abcdef", 10) == "abcdef"
    assert clip("abcdef", 4) == "abc…"
    assert clip("abcdef", 1) == "a"
    assert clip("abcdef", 0) == ""


def test_host_segments_mark_status_and_active(hosts) -> None:
    segments = host_segments(hosts, active=hosts[1], statuses={"A": HostStatus.ONLINE})
    assert segments == [
        ("● A", HostStatus.ONLINE, False),
        ("○ B", HostStatus.OFFLINE, True),
    ]


def test_state_label() -> None:
    assert state_label(SessionState.STREAMING, "app.log") == "[streaming app.log]"
    assert state_label(SessionState.CONNECTING, "app.log") == "[connecting]"
    assert state_label(SessionState.ERRORED, "") == "[error]"
    assert state_label(SessionState.IDLE, "") == "[idle]"


def test_visible_range_follows_tail() -> None:
    assert visible_range(100, 10, None) == (90, 100)
    assert visible_range(5, 10, None) == (0, 5)


def test_visible_range_clamps_top() -> None:
    assert visible_range(100, 10, 20) == (20, 30)
    assert visible_range(100, 10, 95) == (90, 100)
    assert visible_range(100, 10, -3) == (0, 10)
    assert visible_range(100, 0, 0) == (0, 0)


def test_format_log_lines_numbers() -> None:
    rendered = format_log_lines(
        ["alpha", "beta"], first_number=9, show_line_numbers=True, width=40, number_width=2
    )
    assert rendered == [" 9. alpha", "10. beta"]


def test_format_log_lines_plain_and_clipped() -> None:
    rendered = format_log_lines(
        ["a\tb", "x" * 20], first_number=1, show_line_numbers=False, width=8
    )
    assert rendered == ["a    b", "xxxxxxx…"]


def test_suggestion_rows_window_follows_cursor() -> None:
    names = [f"f{i}.log" for i in range(10)]
    assert suggestion_rows(names, -1, max_rows=3) == (names[:3], -1)
    assert suggestion_rows(names, 1, max_rows=3) == (names[:3], 1)
    assert suggestion_rows(names, 7, max_rows=3) == (names[5:8], 2)
    assert suggestion_rows([], 0, max_rows=3) == ([], -1)


def test_footer_text_flags() -> None:
    text = footer_text(show_line_numbers=False, auto_scroll=True, line_count=12)
    assert "lines:12" in text
    assert "numbers:off" in text
    assert "auto-scroll:on" in text


def test_view_settings_toggles_return_new_record() -> None:
    settings = ViewSettings()
    assert settings.show_line_numbers and settings.auto_scroll
    toggled = settings.toggle_line_numbers()
    assert toggled.show_line_numbers is False
    assert settings.show_line_numbers is True
    assert toggled.toggle_auto_scroll() == ViewSettings(
        show_line_numbers=False, auto_scroll=False
    )


def test_help_popup_is_centered() -> None:
    from tailfleet.commands.tail.help_popup import help_lines, popup_geometry

    lines = help_lines()
    assert lines[0].startswith("tailfleet v")
    rows, cols, top, left = popup_geometry(60, 120, lines)
    assert rows == len(lines) + 4
    assert top == (60 - rows) // 2
    assert left == (120 - cols) // 2


def test_help_popup_clipped_to_small_screen() -> None:
    from tailfleet.commands.tail.help_popup import popup_geometry

    assert popup_geometry(5, 10, ["x" * 40] * 20) == (5, 10, 0, 0)
