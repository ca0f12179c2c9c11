"""TailFleet hosts command implementation."""

from __future__ import annotations

import json
import sys
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import TYPE_CHECKING, Any

import click

from ..health import HealthMonitor, HostStatus, fetch_version
from ..hosts import Host, build_registry
from ..utils import resolve_servers_path, utc_now_iso

if TYPE_CHECKING:
    from ..cli_types import HostsArgs


def collect_host_rows(
    hosts: list[Host],
    *,
    active: Host,
    statuses: dict[str, HostStatus],
    versions: dict[str, dict[str, str] | None] | None = None,
) -> list[dict[str, Any]]:
    """Build one row per host for table or JSON output."""
    versions = versions or {}
    checked_at = utc_now_iso()
    rows = []
    for host in hosts:
        info = versions.get(host.name) or {}
        rows.append(
            {
                "name": host.name,
                "url": host.url,
                "active": host == active,
                "status": statuses.get(host.name, HostStatus.OFFLINE).value,
                "version": info.get("version"),
                "build_date": info.get("build_date"),
                "checked_at": checked_at,
            }
        )
    return rows


def format_hosts_table(rows: list[dict[str, Any]]) -> str:
    """Format host rows as a human-readable table."""
    if not rows:
        return "No hosts configured."
    name_width = max(len("HOST"), *(len(r["name"]) for r in rows))
    url_width = max(len("URL"), *(len(r["url"]) for r in rows))

    lines = [f"  {'HOST'.ljust(name_width)}  {'URL'.ljust(url_width)}  STATUS   VERSION"]
    for row in rows:
        marker = "*" if row["active"] else " "
        online = row["status"] == HostStatus.ONLINE.value
        status = click.style(
            "✓ online " if online else "✗ offline", fg="green" if online else "red"
        )
        version = row["version"] or "-"
        lines.append(
            f"{marker} {row['name'].ljust(name_width)}  {row['url'].ljust(url_width)}"
            f"  {status}  {version}"
        )
    return "\n".join(lines)


def probe_once(
    monitor: HealthMonitor, hosts: list[Host], *, timeout: float
) -> dict[str, dict[str, str] | None]:
    """Run one health cycle and fetch every host's version, all in parallel."""
    futures = monitor.poll()
    with ThreadPoolExecutor(max_workers=max(len(hosts), 1)) as executor:
        version_futures = {
            host.name: executor.submit(fetch_version, host, timeout) for host in hosts
        }
        wait(list(futures.values()) + list(version_futures.values()))
    return {name: future.result() for name, future in version_futures.items()}


def cmd_hosts(args: HostsArgs) -> None:
    """Show liveness and version of every configured host."""
    registry, _ = build_registry(resolve_servers_path(args.servers))
    hosts = registry.all_hosts()

    with HealthMonitor(hosts, timeout=args.timeout) as monitor:
        if args.watch:
            monitor.start(hosts, args.interval)
            while True:
                time.sleep(args.interval)
                rows = collect_host_rows(
                    hosts, active=registry.active, statuses=monitor.snapshot()
                )
                if args.json:
                    print(json.dumps(rows, sort_keys=True), flush=True)
                else:
                    print(f"\n{rows[0]['checked_at']}")
                    print(format_hosts_table(rows), flush=True)

        versions = probe_once(monitor, hosts, timeout=args.timeout)
        rows = collect_host_rows(
            hosts, active=registry.active, statuses=monitor.snapshot(), versions=versions
        )

    if args.json:
        print(json.dumps(rows, indent=2, sort_keys=True))
    else:
        print(format_hosts_table(rows))
        if registry.implicit:
            print(f"\nNo host list at {resolve_servers_path(args.servers)}; using default host.")

    if any(row["status"] != HostStatus.ONLINE.value for row in rows):
        sys.exit(1)
