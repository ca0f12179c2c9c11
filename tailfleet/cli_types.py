"""Type definitions for CLI command arguments."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TailArgs:
    """Arguments for tail command."""

    servers: str | None
    host: str | None
    file: str | None
    link: str | None
    interval: float
    max_lines: int


@dataclass
class StreamArgs:
    """Arguments for stream command."""

    servers: str | None
    host: str | None
    file: str | None
    link: str | None
    line_numbers: bool
    max_lines: int


@dataclass
class HostsArgs:
    """Arguments for hosts command."""

    servers: str | None
    json: bool
    watch: bool
    interval: float
    timeout: float


@dataclass
class ListFilesArgs:
    """Arguments for list-files command."""

    servers: str | None
    host: str | None
    link: str | None
    filter: str
    json: bool
