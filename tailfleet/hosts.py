"""Host list loading and active host selection."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import parse_qs, urlsplit

from .constants import DEFAULT_HOST, DEFAULT_HOST_NAME, DEFAULT_SCHEME

logger = logging.getLogger(__name__)

HostListener = Callable[["Host", "Host"], None]

_SCHEMA_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class Host:
    """A backend endpoint. ``name`` is unique within a registry."""

    name: str
    url: str


@dataclass(frozen=True)
class DeepLink:
    """Host and filename carried by a viewer URL."""

    host: str | None
    file: str | None


def ensure_url_schema(url: str) -> str:
    """Prefix the default scheme when url has no http(s) scheme."""
    url = url.strip()
    if not _SCHEMA_RE.match(url):
        return f"{DEFAULT_SCHEME}{url}"
    return url


def parse_servers_text(text: str) -> list[Host]:
    """Parse a host list from JSON or a ``window.APP_SERVERS = [...]`` script.

    Entries without a name or url are skipped. Duplicate names keep the
    first entry. Lines starting with ``//`` are ignored.

    Raises:
        ValueError: If no JSON array can be decoded from text
    """
    text = "\n".join(
        line for line in text.splitlines() if not line.lstrip().startswith("//")
    )
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end < start:
        raise ValueError("no host array found")
    data = json.loads(text[start : end + 1])
    if not isinstance(data, list):
        raise ValueError("host list is not an array")

    hosts: list[Host] = []
    seen: set[str] = set()
    for entry in data:
        if not isinstance(entry, dict):
            logger.warning("Skipping host entry that is not an object: %r", entry)
            continue
        name = entry.get("name")
        url = entry.get("url")
        if not name or not url:
            logger.warning("Skipping host entry without name/url: %r", entry)
            continue
        if name in seen:
            logger.warning("Skipping duplicate host name: %s", name)
            continue
        seen.add(name)
        hosts.append(Host(name=str(name), url=ensure_url_schema(str(url))))
    return hosts


def load_hosts(path: Path) -> list[Host]:
    """Load the configured host list, failing soft to an empty list."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("Host list not found: %s", path)
        return []
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read host list %s: %s", path, e)
        return []

    try:
        hosts = parse_servers_text(text)
    except ValueError as e:
        logger.warning("Invalid host list %s: %s", path, e)
        return []

    logger.debug("Loaded %d host(s) from %s", len(hosts), path)
    return hosts


def parse_deep_link(url: str) -> DeepLink:
    """Extract ``host`` and ``file`` query parameters from a viewer URL.

    A URL fragment is appended to the filename so a link can point at an
    anchor inside the file.
    """
    parts = urlsplit(url)
    query = parse_qs(parts.query)
    host = query.get("host", [None])[0] or None
    file = query.get("file", [None])[0]
    if file is not None and parts.fragment:
        file = f"{file}#{parts.fragment}"
    return DeepLink(host=host, file=file or None)


def resolve_initial_host(hosts: list[Host], override: str | None = None) -> Host:
    """Pick the startup host.

    An override wins over the first listed host. It may name a registered
    host or give a URL / bare hostname for an ad-hoc host. Without either,
    the default host is used.
    """
    if override:
        for host in hosts:
            if override in (host.name, host.url):
                return host
        url = ensure_url_schema(override)
        for host in hosts:
            if host.url == url:
                return host
        return Host(name=override, url=url)
    if hosts:
        return hosts[0]
    return Host(name=DEFAULT_HOST_NAME, url=DEFAULT_HOST)


class HostRegistry:
    """Static host list plus the single active host.

    Every change of the active host bumps ``generation`` and notifies the
    listeners synchronously, before ``select`` returns. Asynchronous work
    captures the generation when it is issued and compares it on completion.
    """

    def __init__(self, hosts: list[Host], active: Host | None = None) -> None:
        self.hosts: tuple[Host, ...] = tuple(hosts)
        self.active = active if active is not None else resolve_initial_host(hosts)
        self.generation = 0
        self._listeners: list[HostListener] = []

    @property
    def implicit(self) -> bool:
        """True when no host list was loaded (single implicit host mode)."""
        return not self.hosts

    def subscribe(self, listener: HostListener) -> None:
        self._listeners.append(listener)

    def select(self, host: Host) -> bool:
        """Make host the active host. Returns False if it already was."""
        if host == self.active:
            return False
        previous = self.active
        self.active = host
        self.generation += 1
        logger.debug("Active host changed: %s -> %s", previous.name, host.name)
        for listener in self._listeners:
            listener(previous, host)
        return True

    def select_by_name(self, name: str) -> bool:
        for host in self.hosts:
            if host.name == name:
                return self.select(host)
        raise KeyError(name)

    def cycle(self, step: int = 1) -> bool:
        """Select the next (or previous, for negative step) listed host."""
        if not self.hosts:
            return False
        try:
            index = self.hosts.index(self.active)
        except ValueError:
            index = -1 if step > 0 else 0
        return self.select(self.hosts[(index + step) % len(self.hosts)])

    def all_hosts(self) -> list[Host]:
        """Listed hosts, plus the active host when it is ad-hoc."""
        hosts = list(self.hosts)
        if self.active not in hosts:
            hosts.append(self.active)
        return hosts


def build_registry(
    servers_path: Path,
    *,
    host_override: str | None = None,
    link: str | None = None,
) -> tuple[HostRegistry, str | None]:
    """Load the host list and resolve the startup host and filename.

    Returns:
        Tuple of (registry, initial filename or None)
    """
    hosts = load_hosts(servers_path)
    deep_link = parse_deep_link(link) if link else DeepLink(host=None, file=None)
    active = resolve_initial_host(hosts, host_override or deep_link.host)
    return HostRegistry(hosts, active=active), deep_link.file
