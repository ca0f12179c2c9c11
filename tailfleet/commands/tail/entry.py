"""Tail command entry point."""

from __future__ import annotations

import curses
import sys
import time
from curses import wrapper as curses_wrapper
from typing import TYPE_CHECKING

from ...controller import TailController
from ...exceptions import UserError
from ...hosts import build_registry
from ...session import StreamSession
from ...utils import resolve_servers_path
from .display import TailDisplay

if TYPE_CHECKING:
    from ...cli_types import TailArgs

# Full redraw interval so background health results show up without input
REDRAW_INTERVAL_S = 1.0


def cmd_tail(args: TailArgs) -> None:
    """Interactive tail view: host status, filename autocomplete, live log."""
    if not sys.stdout.isatty():
        raise UserError("tail needs an interactive terminal; use 'tailfleet stream' instead")

    registry, link_file = build_registry(
        resolve_servers_path(args.servers), host_override=args.host, link=args.link
    )
    controller = TailController(
        registry, session=StreamSession(max_lines=args.max_lines or None)
    )

    def curses_main(stdscr) -> None:
        stdscr.keypad(True)
        stdscr.timeout(200)
        curses.set_escdelay(25)
        display = TailDisplay(stdscr, controller=controller)
        display.draw_screen()
        last_draw = time.monotonic()
        while True:
            key = stdscr.getch()
            if display.handle_key(key, draw=False):
                return

            changed = controller.pump()
            if changed:
                display.on_update()
            now = time.monotonic()
            if key != -1 or changed or now - last_draw >= REDRAW_INTERVAL_S:
                display.draw_screen()
                last_draw = now

    with controller:
        controller.open(filename=args.file or link_file, interval_s=args.interval)
        try:
            curses_wrapper(curses_main)
        except KeyboardInterrupt:
            return
