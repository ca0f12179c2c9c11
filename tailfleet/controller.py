"""Coordination of host selection, file listing, suggestions and the stream."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from .constants import HEALTH_POLL_INTERVAL_S, LIST_FILES_TIMEOUT_S
from .exceptions import ErrorSlot, FetchError
from .files import fetch_file_list
from .health import HealthMonitor, HostStatus
from .hosts import Host, HostRegistry
from .session import StreamSession
from .suggest import SuggestionIndex

logger = logging.getLogger(__name__)

FileFetcher = Callable[[Host, float], list[str]]


@dataclass
class PendingFetch:
    """A file-list request and the context it was issued in."""

    host: Host
    generation: int
    future: Future[list[str]]


class TailController:
    """Ties the registry, stream session, health monitor and suggestions together.

    Every method runs on the caller's (UI) thread. Background work comes back
    through ``pump()``, which applies a file-list result only if the host it
    was requested for is still the active one.
    """

    def __init__(
        self,
        registry: HostRegistry,
        *,
        session: StreamSession | None = None,
        monitor: HealthMonitor | None = None,
        fetch_files: FileFetcher = fetch_file_list,
        fetch_timeout: float = LIST_FILES_TIMEOUT_S,
        errors: ErrorSlot | None = None,
    ) -> None:
        self.registry = registry
        self.errors = errors if errors is not None else ErrorSlot()
        self.session = session if session is not None else StreamSession(errors=self.errors)
        self.session.errors = self.errors
        self.monitor = monitor if monitor is not None else HealthMonitor()
        self.suggestions = SuggestionIndex()
        self.fetch_files = fetch_files
        self.fetch_timeout = fetch_timeout
        self.files: list[str] = []
        self.filename = ""
        self._pending: list[PendingFetch] = []
        registry.subscribe(self._on_host_changed)

    @property
    def host(self) -> Host:
        return self.registry.active

    @property
    def pending_fetch(self) -> PendingFetch | None:
        """The newest outstanding file-list request, if any."""
        return self._pending[-1] if self._pending else None

    def open(
        self, *, filename: str | None = None, interval_s: float = HEALTH_POLL_INTERVAL_S
    ) -> None:
        """Start health polling and the first file-list fetch."""
        if filename:
            self.set_filename(filename)
        self.monitor.start(self.registry.all_hosts(), interval_s)
        self.refresh_files()

    def close(self) -> None:
        """Stop the stream and the health monitor; drop outstanding fetches."""
        self.session.stop()
        self.monitor.stop()
        self._cancel_fetches()

    def __enter__(self) -> TailController:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def host_status(self, host: Host) -> HostStatus:
        return self.monitor.status(host.name)

    # Host selection

    def select_host(self, host: Host) -> bool:
        return self.registry.select(host)

    def next_host(self, step: int = 1) -> bool:
        return self.registry.cycle(step)

    def _on_host_changed(self, previous: Host, current: Host) -> None:
        self._cancel_fetches()
        self.session.clear()
        self.filename = ""
        self.files = []
        self.suggestions.text = ""
        self.suggestions.set_files([])
        if current not in self.registry.hosts and self.monitor.running:
            self.monitor.start(self.registry.all_hosts(), self.monitor.interval_s)
        self.refresh_files()

    # File list

    def refresh_files(self) -> PendingFetch:
        """Request the active host's file list in the background.

        Each fetch gets its own worker, so fetches abandoned on a host that
        never answers cannot hold up the next host's fetch.
        """
        host = self.registry.active
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tailfleet-files")
        future = executor.submit(self.fetch_files, host, self.fetch_timeout)
        # The worker exits on its own once the fetch returns
        executor.shutdown(wait=False)
        pending = PendingFetch(host=host, generation=self.registry.generation, future=future)
        self._pending.append(pending)
        return pending

    def _cancel_fetches(self) -> None:
        for pending in self._pending:
            pending.future.cancel()
        self._pending = [p for p in self._pending if not p.future.cancelled()]

    def _apply_fetches(self) -> bool:
        """Apply the newest finished fetch; fetches issued before it are dropped."""
        finished = [i for i, pending in enumerate(self._pending) if pending.future.done()]
        if not finished:
            return False
        newest = finished[-1]
        pending = self._pending[newest]
        for older in self._pending[:newest]:
            older.future.cancel()
        self._pending = self._pending[newest + 1 :]

        if pending.future.cancelled():
            return False
        if pending.generation != self.registry.generation:
            logger.debug("Discarding stale file list from %s", pending.host.name)
            return False
        try:
            files = pending.future.result()
        except FetchError as e:
            logger.debug("File list from %s unavailable: %s", pending.host.name, e)
            self.errors.set(e)
            files = []
        self.files = files
        self.suggestions.set_files(files)
        return True

    # Filename input

    def set_filename(self, text: str) -> None:
        self.filename = text
        if self.suggestions.focused:
            self.suggestions.update(self.files, text)
        else:
            self.suggestions.text = text

    def focus_input(self) -> None:
        self.suggestions.text = self.filename
        self.suggestions.focus()

    def blur_input(self, selected_index: int | None = None) -> None:
        committed = self.suggestions.blur(selected_index)
        if committed is not None:
            self.filename = committed

    def select_suggestion(self, index: int | None = None) -> str | None:
        committed = self.suggestions.select(index)
        if committed is not None:
            self.filename = committed
        return committed

    # Stream control

    def start(self) -> bool:
        return self.session.start(self.registry.active, self.filename)

    def stop(self) -> None:
        self.session.stop()

    def clear(self) -> None:
        self.session.clear()
        self.filename = ""
        self.suggestions.text = ""
        self.suggestions.close()

    def pump(self) -> bool:
        """Apply finished background work. Returns True if anything changed."""
        changed = self._apply_fetches()
        if self.session.pump():
            changed = True
        return changed
