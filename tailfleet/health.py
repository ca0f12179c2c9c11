"""Background liveness polling for every configured host."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

import requests

from .constants import (
    ALIVE_PATH,
    ALIVE_TIMEOUT_S,
    HEALTH_POLL_INTERVAL_S,
    MSG_BACKEND_DOWN,
    MSG_BACKEND_UNREACHABLE,
    VERSION_PATH,
)
from .exceptions import ConnectivityError
from .hosts import Host
from .utils import join_url

logger = logging.getLogger(__name__)

Probe = Callable[[Host, float], bool]


class HostStatus(str, Enum):
    """Liveness of a host as seen by the last completed probe."""

    ONLINE = "online"
    OFFLINE = "offline"


def probe_alive(host: Host, timeout: float = ALIVE_TIMEOUT_S) -> bool:
    """Return True if ``GET {host}/alive`` answers with a 2xx status."""
    try:
        response = requests.get(join_url(host.url, ALIVE_PATH), timeout=timeout)
    except requests.RequestException as e:
        logger.debug("Liveness probe for %s failed: %s", host.name, e)
        return False
    return response.ok


def check_alive(host: Host, timeout: float = ALIVE_TIMEOUT_S) -> None:
    """Verify a host is reachable right now.

    Raises:
        ConnectivityError: If the request fails or returns a non-2xx status
    """
    try:
        response = requests.get(
            join_url(host.url, ALIVE_PATH),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        logger.debug("Pre-flight check for %s failed: %s", host.name, e)
        raise ConnectivityError(MSG_BACKEND_DOWN) from e
    if not response.ok:
        logger.debug("Pre-flight check for %s returned %d", host.name, response.status_code)
        raise ConnectivityError(MSG_BACKEND_UNREACHABLE)


def fetch_version(host: Host, timeout: float = ALIVE_TIMEOUT_S) -> dict[str, str] | None:
    """Fetch ``{host}/version`` and parse its ``Key: value`` lines.

    Returns:
        Dict with ``version`` and/or ``build_date`` keys, or None on any failure
    """
    try:
        response = requests.get(join_url(host.url, VERSION_PATH), timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.debug("Version request for %s failed: %s", host.name, e)
        return None

    info: dict[str, str] = {}
    for line in response.text.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower().replace(" ", "_")
        if key in ("version", "build_date") and value.strip():
            info[key] = value.strip()
    return info or None


class HealthMonitor:
    """Periodic fan-out liveness polling.

    Each cycle submits one probe per host to a thread pool, so a slow host
    never delays the others. Cycles are started by a self-rescheduling timer
    at a fixed interval, whether or not the previous cycle's probes have
    finished. A host whose probe from an earlier cycle is still running is
    not probed again until it returns, so each host holds at most one pool
    worker. Status is last-probe-wins, but a late result from an older
    cycle never replaces a newer cycle's result.
    """

    def __init__(
        self,
        hosts: Iterable[Host] = (),
        *,
        probe: Probe = probe_alive,
        timeout: float = ALIVE_TIMEOUT_S,
    ) -> None:
        self.probe = probe
        self.timeout = timeout
        self.interval_s: float = HEALTH_POLL_INTERVAL_S
        self.cycles = 0
        self._hosts: list[Host] = []
        self._status: dict[str, HostStatus] = {}
        self._status_cycle: dict[str, int] = {}
        self._in_flight: dict[str, Future[HostStatus]] = {}
        self._first_cycle = 1
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._running = False
        self._set_hosts(hosts)

    def _set_hosts(self, hosts: Iterable[Host]) -> None:
        with self._lock:
            self._hosts = list(hosts)
            self._status = {host.name: HostStatus.OFFLINE for host in self._hosts}
            self._status_cycle = {}
            self._in_flight = {}
            self._first_cycle = self.cycles + 1

    @property
    def running(self) -> bool:
        return self._running

    def start(self, hosts: Iterable[Host], interval_s: float = HEALTH_POLL_INTERVAL_S) -> None:
        """Begin polling hosts every interval_s seconds, starting now."""
        self.stop()
        self._set_hosts(hosts)
        self.interval_s = interval_s
        with self._lock:
            self._running = True
        logger.debug(
            "Health monitor started for %d host(s), every %ss", len(self._hosts), interval_s
        )
        self._tick()

    def stop(self) -> None:
        """Cancel the schedule. In-flight probes finish but start nothing new."""
        with self._lock:
            self._running = False
            timer, self._timer = self._timer, None
            executor, self._executor = self._executor, None
        if timer is not None:
            timer.cancel()
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _tick(self) -> None:
        try:
            self._submit_cycle(scheduled=True)
        finally:
            with self._lock:
                if self._running:
                    self._timer = threading.Timer(self.interval_s, self._tick)
                    self._timer.daemon = True
                    self._timer.start()

    def poll(self) -> dict[str, Future[HostStatus]]:
        """Probe every host once. Returns one future per host name.

        A host still busy with an earlier probe gets that probe's future.
        """
        return self._submit_cycle(scheduled=False)

    def _submit_cycle(self, *, scheduled: bool) -> dict[str, Future[HostStatus]]:
        # Submitting under the lock keeps stop() from shutting the pool down mid-cycle
        with self._lock:
            if scheduled and not self._running:
                return {}
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=max(len(self._hosts), 1),
                    thread_name_prefix="tailfleet-health",
                )
            self.cycles += 1
            cycle = self.cycles
            futures: dict[str, Future[HostStatus]] = {}
            for host in self._hosts:
                pending = self._in_flight.get(host.name)
                if pending is not None and not pending.done():
                    logger.debug("Probe for %s still running, skipping cycle %d", host.name, cycle)
                    futures[host.name] = pending
                    continue
                future = self._executor.submit(self._probe_host, host, cycle)
                self._in_flight[host.name] = future
                futures[host.name] = future
            return futures

    def _probe_host(self, host: Host, cycle: int) -> HostStatus:
        try:
            status = HostStatus.ONLINE if self.probe(host, self.timeout) else HostStatus.OFFLINE
        except Exception as e:
            logger.debug("Probe for %s raised: %s", host.name, e)
            status = HostStatus.OFFLINE
        self._record(host.name, cycle, status)
        return status

    def _record(self, name: str, cycle: int, status: HostStatus) -> None:
        with self._lock:
            if name not in self._status or cycle < self._first_cycle:
                return
            if cycle < self._status_cycle.get(name, 0):
                logger.debug("Dropping stale probe result for %s (cycle %d)", name, cycle)
                return
            self._status_cycle[name] = cycle
            self._status[name] = status

    def status(self, name: str) -> HostStatus:
        with self._lock:
            return self._status.get(name, HostStatus.OFFLINE)

    def snapshot(self) -> dict[str, HostStatus]:
        with self._lock:
            return dict(self._status)

    def __enter__(self) -> HealthMonitor:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()
