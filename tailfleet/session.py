"""Single live log stream per session, with start/stop/clear lifecycle."""

from __future__ import annotations

import logging
import queue
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .constants import (
    ERROR_SENTINEL_PREFIX,
    MSG_MISSING_FILE,
    MSG_MISSING_HOST,
    MSG_STREAM_FAILED,
    PREFLIGHT_TIMEOUT_S,
    STREAM_LOGS_PATH,
)
from .exceptions import (
    ConnectivityError,
    ErrorSlot,
    StreamError,
    TailFleetError,
    ValidationError,
)
from .health import check_alive
from .hosts import Host
from .transport import DataHandler, ErrorHandler, open_event_stream
from .utils import encode_component, join_url

logger = logging.getLogger(__name__)


class Transport(Protocol):
    def close(self) -> None: ...


class TransportFactory(Protocol):
    def __call__(self, url: str, *, on_data: DataHandler, on_error: ErrorHandler) -> Transport: ...


Preflight = Callable[[Host, float], None]


class SessionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    ERRORED = "errored"


@dataclass(frozen=True)
class StreamEvent:
    """Transport callback queued for the controller thread."""

    transport_id: int
    data: str | None = None
    error: StreamError | None = None


def stream_url(host: Host, filename: str) -> str:
    return join_url(host.url, STREAM_LOGS_PATH) + "?file=" + encode_component(filename)


def is_error_sentinel(payload: str) -> bool:
    return payload.startswith(ERROR_SENTINEL_PREFIX)


class StreamSession:
    """Owns at most one event stream transport.

    Transport callbacks run on the transport's reader thread and only enqueue
    events; ``pump()`` applies them on the caller's thread, so every state
    transition happens on one thread. Events from a transport that has since
    been closed or replaced are dropped.

    The log buffer belongs to the current session: ``stop()`` leaves the
    received lines readable, the next ``start()`` begins a fresh buffer, and
    ``clear()`` empties it right away. ``max_lines`` turns the buffer into a
    ring buffer; the default keeps every line.
    """

    def __init__(
        self,
        *,
        errors: ErrorSlot | None = None,
        preflight: Preflight = check_alive,
        open_transport: TransportFactory = open_event_stream,
        preflight_timeout: float = PREFLIGHT_TIMEOUT_S,
        max_lines: int | None = None,
    ) -> None:
        self.errors = errors if errors is not None else ErrorSlot()
        self.preflight = preflight
        self.open_transport = open_transport
        self.preflight_timeout = preflight_timeout
        self.state = SessionState.IDLE
        self.host: Host | None = None
        self.filename = ""
        self.lines: deque[str] = deque(maxlen=max_lines or None)
        self.received = 0
        self._transport: Transport | None = None
        self._transport_id = 0
        self._inbox: queue.SimpleQueue[StreamEvent] = queue.SimpleQueue()
        self._scroll_reset = False

    @property
    def error(self) -> str:
        return self.errors.message

    @property
    def active(self) -> bool:
        """True while a transport is open."""
        return self._transport is not None

    def _surface(self, error: TailFleetError) -> None:
        self.errors.set(error)

    def start(self, host: Host | None, filename: str) -> bool:
        """Open a stream for filename on host, replacing any open stream.

        Returns True once the stream is open. Validation and pre-flight
        failures are surfaced in the error slot and return False.
        """
        if not filename:
            self._surface(ValidationError(MSG_MISSING_FILE))
            return False
        if host is None:
            self._surface(ValidationError(MSG_MISSING_HOST))
            return False

        self._close_transport()
        self.state = SessionState.CONNECTING
        self.host = host
        self.filename = filename

        try:
            self.preflight(host, self.preflight_timeout)
        except ConnectivityError as e:
            logger.debug("Not starting stream, %s is unreachable: %s", host.name, e)
            self.state = SessionState.ERRORED
            self._surface(e)
            self._scroll_reset = True
            return False
        self.errors.clear()

        self.lines.clear()
        self.received = 0
        self._transport_id += 1
        transport_id = self._transport_id
        url = stream_url(host, filename)
        try:
            self._transport = self.open_transport(
                url,
                on_data=lambda data: self._inbox.put(StreamEvent(transport_id, data=data)),
                on_error=lambda error: self._inbox.put(StreamEvent(transport_id, error=error)),
            )
        except (OSError, TailFleetError) as e:
            logger.debug("Could not open event stream %s: %s", url, e)
            self.state = SessionState.ERRORED
            self._surface(StreamError(MSG_STREAM_FAILED))
            return False

        self.state = SessionState.STREAMING
        logger.debug("Streaming %s from %s", filename, host.name)
        return True

    def stop(self) -> None:
        """Close the stream. A no-op when nothing is open."""
        self._close_transport()
        self.state = SessionState.IDLE

    def clear(self) -> None:
        """Stop, empty the log buffer and clear the error slot."""
        self.stop()
        self.lines.clear()
        self.received = 0
        self.errors.clear()

    def _close_transport(self) -> None:
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()
            # Invalidate anything the closed transport already queued
            self._transport_id += 1

    def pump(self, max_events: int | None = None) -> int:
        """Apply queued transport events. Returns how many were applied."""
        applied = 0
        while max_events is None or applied < max_events:
            try:
                event = self._inbox.get_nowait()
            except queue.Empty:
                break
            if self._transport is None or event.transport_id != self._transport_id:
                continue
            if event.error is not None:
                self._on_transport_error(event.error)
            elif event.data is not None:
                self._on_message(event.data)
            applied += 1
        return applied

    def _on_message(self, payload: str) -> None:
        if is_error_sentinel(payload):
            self.state = SessionState.ERRORED
            self._surface(StreamError(payload))
            return
        self.state = SessionState.STREAMING
        self.errors.clear()
        self.lines.append(payload)
        self.received += 1

    def _on_transport_error(self, error: StreamError) -> None:
        logger.debug("Event stream failed: %s", error)
        self._close_transport()
        self.state = SessionState.ERRORED
        self._surface(StreamError(MSG_STREAM_FAILED))

    def consume_scroll_reset(self) -> bool:
        """Return True once after a failed start asked the view to go to the top."""
        reset, self._scroll_reset = self._scroll_reset, False
        return reset
