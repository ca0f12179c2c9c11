"""TailFleet CLI using Click."""

from __future__ import annotations

import logging
import sys
from importlib.metadata import version

import click

from .cli_types import HostsArgs, ListFilesArgs, StreamArgs, TailArgs
from .commands import cmd_hosts, cmd_list_files, cmd_stream, cmd_tail
from .constants import ALIVE_TIMEOUT_S, HEALTH_POLL_INTERVAL_S
from .exceptions import CommandFailureError, TailFleetError, UserError

# Module logger
logger = logging.getLogger("tailfleet")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if debug else logging.WARNING
    logger.setLevel(level)
    if any(
        isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
        for h in logger.handlers
    ):
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)


# Options shared by commands that talk to the active host
def host_options(func):
    """Decorator to add active host selection options."""
    func = click.option(
        "--link",
        metavar="URL",
        help="Viewer URL whose ?host=...&file=...#anchor selects host and file.",
    )(func)
    func = click.option(
        "--host",
        "host",
        metavar="NAME_OR_URL",
        help="Active host: a configured host name, or a URL/hostname for an ad-hoc host.",
    )(func)
    return func


def max_lines_option(func):
    return click.option(
        "--max-lines",
        type=click.IntRange(min=0),
        default=0,
        show_default=True,
        help="Keep only the newest N log lines (0 keeps every line).",
    )(func)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=version("tailfleet"), prog_name="tailfleet")
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    help="Enable debug logging to stderr.",
)
@click.option(
    "--servers",
    type=click.Path(dir_okay=False),
    envvar="TAILFLEET_SERVERS",
    help="Host list file, JSON or servers.js (default: ~/.tailfleet/servers.json).",
)
@click.pass_context
def cli(ctx: click.Context, debug: bool, servers: str | None):
    """TailFleet: tail remote log files from a fleet of log servers."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["servers"] = servers
    setup_logging(debug=debug)


@cli.command("tail")
@host_options
@click.option("--file", "file", help="Log file to fill into the filename input.")
@click.option(
    "--interval",
    type=click.FloatRange(min=0.5),
    default=HEALTH_POLL_INTERVAL_S,
    show_default=True,
    help="Seconds between host health checks.",
)
@max_lines_option
@click.pass_context
def tail(
    ctx: click.Context,
    host: str | None,
    link: str | None,
    file: str | None,
    interval: float,
    max_lines: int,
):
    """Interactive view: host health, filename autocomplete and a live log."""
    args = TailArgs(
        servers=ctx.obj["servers"],
        host=host,
        file=file,
        link=link,
        interval=interval,
        max_lines=max_lines,
    )
    cmd_tail(args)


@cli.command("stream")
@host_options
@click.option("--file", "file", help="Log file to stream.")
@click.option(
    "--line-numbers",
    "-n",
    is_flag=True,
    help="Prefix each line with its line number.",
)
@max_lines_option
@click.pass_context
def stream(
    ctx: click.Context,
    host: str | None,
    link: str | None,
    file: str | None,
    line_numbers: bool,
    max_lines: int,
):
    """Stream a log file to stdout (errors go to stderr)."""
    args = StreamArgs(
        servers=ctx.obj["servers"],
        host=host,
        file=file,
        link=link,
        line_numbers=line_numbers,
        max_lines=max_lines,
    )
    cmd_stream(args)


@cli.command("hosts")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit machine-readable JSON to stdout.",
)
@click.option(
    "--watch",
    is_flag=True,
    help="Keep polling and print the status every interval.",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0.5),
    default=HEALTH_POLL_INTERVAL_S,
    show_default=True,
    help="Seconds between health checks in --watch mode.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0.1),
    default=ALIVE_TIMEOUT_S,
    show_default=True,
    help="Liveness request timeout in seconds.",
)
@click.pass_context
def hosts(ctx: click.Context, json_output: bool, watch: bool, interval: float, timeout: float):
    """Check liveness and version of every configured host."""
    args = HostsArgs(
        servers=ctx.obj["servers"],
        json=json_output,
        watch=watch,
        interval=interval,
        timeout=timeout,
    )
    cmd_hosts(args)


@cli.command("list-files")
@host_options
@click.option(
    "--filter",
    "filter_text",
    default="",
    help="Only show files containing this text (case-insensitive).",
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Emit machine-readable JSON to stdout.",
)
@click.pass_context
def list_files(
    ctx: click.Context,
    host: str | None,
    link: str | None,
    filter_text: str,
    json_output: bool,
):
    """List the log files the active host can stream."""
    args = ListFilesArgs(
        servers=ctx.obj["servers"],
        host=host,
        link=link,
        filter=filter_text,
        json=json_output,
    )
    cmd_list_files(args)


def main():
    """Main entry point for the CLI."""
    try:
        # --help and --version return their exit code instead of exiting
        rc = cli(standalone_mode=False)
    except CommandFailureError as e:
        # Command already printed its error message, just exit
        sys.exit(e.rc)
    except UserError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(e.rc)
    except TailFleetError as e:
        click.echo(f"ERROR: {e}", err=True)
        sys.exit(2)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except (click.exceptions.Abort, KeyboardInterrupt):
        click.echo("ERROR: Interrupted", err=True)
        sys.exit(130)
    if isinstance(rc, int):
        sys.exit(rc)
