"""TailFleet stream command implementation."""

from __future__ import annotations

import logging
import sys
import time
from typing import TYPE_CHECKING

import click

from ..constants import LOOP_TICK_S
from ..exceptions import CommandFailureError, ValidationError
from ..hosts import build_registry
from ..session import SessionState, StreamSession
from ..utils import format_elapsed_time, resolve_servers_path

if TYPE_CHECKING:
    from ..cli_types import StreamArgs

logger = logging.getLogger("tailfleet")


def new_lines(session: StreamSession, printed: int) -> list[tuple[int, str]]:
    """Return (line number, text) for lines received since ``printed`` lines.

    Lines already evicted from a bounded buffer are skipped.
    """
    lines = list(session.lines)
    first_number = session.received - len(lines) + 1
    start = max(printed - (first_number - 1), 0)
    return [(first_number + i, line) for i, line in enumerate(lines[start:], start=start)]


def cmd_stream(args: StreamArgs) -> None:
    """Stream a log file to stdout until interrupted or the stream fails."""
    registry, link_file = build_registry(
        resolve_servers_path(args.servers), host_override=args.host, link=args.link
    )
    filename = args.file or link_file or ""
    session = StreamSession(max_lines=args.max_lines or None)
    start_time = time.monotonic()

    if not session.start(registry.active, filename):
        click.echo(f"ERROR: {session.error}", err=True)
        raise CommandFailureError(2 if session.errors.kind is ValidationError else 1)

    logger.debug("Streaming %s from %s", filename, registry.active.url)
    printed = 0
    last_error = ""
    try:
        while True:
            session.pump()
            for number, line in new_lines(session, printed):
                if args.line_numbers:
                    sys.stdout.write(f"{number}. {line}\n")
                else:
                    sys.stdout.write(f"{line}\n")
            sys.stdout.flush()
            printed = session.received

            if session.error and session.error != last_error:
                click.echo(f"ERROR: {session.error}", err=True)
            last_error = session.error

            if session.state is SessionState.ERRORED and not session.active:
                elapsed = format_elapsed_time(time.monotonic() - start_time)
                logger.debug("Stream ended after %s (%d lines)", elapsed, session.received)
                raise CommandFailureError(1)
            time.sleep(LOOP_TICK_S)
    finally:
        session.stop()
