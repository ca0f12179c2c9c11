"""TailFleet list-files command implementation."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import click

from ..exceptions import FetchError, UserError
from ..files import fetch_file_list
from ..hosts import build_registry
from ..suggest import filter_files
from ..utils import resolve_servers_path

if TYPE_CHECKING:
    from ..cli_types import ListFilesArgs


def cmd_list_files(args: ListFilesArgs) -> None:
    """Print the log files the active host can stream."""
    registry, _ = build_registry(
        resolve_servers_path(args.servers), host_override=args.host, link=args.link
    )
    host = registry.active
    try:
        files = fetch_file_list(host)
    except FetchError as e:
        raise UserError(f"{host.name} ({host.url}): {e}", rc=1) from e

    matches = filter_files(files, args.filter)
    if args.json:
        print(json.dumps(matches, indent=2))
        return
    if not matches:
        click.echo("No files available", err=True)
        return
    for name in matches:
        print(name)
