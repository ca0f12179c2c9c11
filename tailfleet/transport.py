"""Server-sent event transport over a streaming HTTP response."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

import requests

from .constants import STREAM_CONNECT_TIMEOUT_S
from .exceptions import StreamError

logger = logging.getLogger(__name__)

DataHandler = Callable[[str], None]
ErrorHandler = Callable[[StreamError], None]


@dataclass(frozen=True)
class SseMessage:
    """One dispatched server-sent event."""

    data: str
    event: str = "message"
    id: str | None = None


def iter_sse_messages(lines: Iterable[str]) -> Iterator[SseMessage]:
    """Parse decoded text lines into server-sent events.

    Multiple ``data:`` lines are joined with newlines, ``:`` lines are
    comments, and a blank line dispatches the pending event. Events without
    any data field are dropped.
    """
    data_lines: list[str] = []
    event = "message"
    last_id: str | None = None

    for raw in lines:
        line = raw.rstrip("\r")
        if not line:
            if data_lines:
                yield SseMessage(data="\n".join(data_lines), event=event, id=last_id)
            data_lines = []
            event = "message"
            continue
        if line.startswith(":"):
            continue

        if ":" in line:
            field, value = line.split(":", 1)
            if value.startswith(" "):
                value = value[1:]
        else:
            field, value = line, ""

        if field == "data":
            data_lines.append(value)
        elif field == "event":
            event = value or "message"
        elif field == "id":
            last_id = value
        # "retry" and unknown fields carry nothing the session needs


class EventStreamTransport:
    """Exclusively owned handle on one server-sent event connection.

    A reader thread delivers default ``message`` events to ``on_data``.
    Any failure, including the server ending the stream, is reported once
    through ``on_error``. Nothing is delivered after ``close()``.
    """

    def __init__(
        self,
        url: str,
        *,
        on_data: DataHandler,
        on_error: ErrorHandler,
        connect_timeout: float = STREAM_CONNECT_TIMEOUT_S,
    ) -> None:
        self.url = url
        self.on_data = on_data
        self.on_error = on_error
        self.connect_timeout = connect_timeout
        self._closed = threading.Event()
        self._response: requests.Response | None = None
        self._thread = threading.Thread(
            target=self._run, name="tailfleet-stream", daemon=True
        )

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def start(self) -> EventStreamTransport:
        self._thread.start()
        return self

    def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed.is_set():
            return
        self._closed.set()
        response = self._response
        if response is not None:
            response.close()
        logger.debug("Event stream closed: %s", self.url)

    def _fail(self, message: str) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        if self._response is not None:
            self._response.close()
        self.on_error(StreamError(message))

    def _run(self) -> None:
        try:
            response = requests.get(
                self.url,
                headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
                stream=True,
                timeout=(self.connect_timeout, None),
            )
        except requests.RequestException as e:
            logger.debug("Event stream connect failed: %s", e)
            self._fail(str(e))
            return

        self._response = response
        if self._closed.is_set():
            response.close()
            return
        if not response.ok:
            self._fail(f"HTTP {response.status_code}")
            return
        if response.encoding is None:
            response.encoding = "utf-8"

        try:
            for message in iter_sse_messages(response.iter_lines(decode_unicode=True)):
                if self._closed.is_set():
                    return
                if message.event == "message":
                    self.on_data(message.data)
        except (requests.RequestException, OSError, ValueError, AttributeError) as e:
            if self._closed.is_set():
                return
            logger.debug("Event stream read failed: %s", e)
            self._fail(str(e))
            return

        self._fail("stream ended by server")


def open_event_stream(
    url: str,
    *,
    on_data: DataHandler,
    on_error: ErrorHandler,
    connect_timeout: float = STREAM_CONNECT_TIMEOUT_S,
) -> EventStreamTransport:
    """Open a server-sent event stream and start delivering events."""
    return EventStreamTransport(
        url, on_data=on_data, on_error=on_error, connect_timeout=connect_timeout
    ).start()
