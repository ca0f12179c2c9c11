"""Tests for tailfleet/transport.py - server-sent event parsing and reading."""

from __future__ import annotations

import requests
from tailfleet.exceptions import StreamError
from tailfleet.transport import EventStreamTransport, SseMessage, iter_sse_messages


class TestIterSseMessages:
    """Tests for iter_sse_messages."""

    def test_single_data_lines(self):
        lines = ["data: first", "", "data: second", ""]
        assert [m.data for m in iter_sse_messages(lines)] == ["first", "second"]

    def test_multi_line_data_is_joined(self):
        lines = ["data: a", "data: b", ""]
        assert list(iter_sse_messages(lines)) == [SseMessage(data="a\nb")]

    def test_comments_and_unknown_fields_ignored(self):
        lines = [": keep-alive", "retry: 1000", "foo: bar", "data: x", ""]
        assert [m.data for m in iter_sse_messages(lines)] == ["x"]

    def test_event_name_and_id(self):
        lines = ["event: ping", "id: 7", "data: {}", "", "data: log", ""]
        messages = list(iter_sse_messages(lines))
        assert messages[0] == SseMessage(data="{}", event="ping", id="7")
        # Event name resets after dispatch; the last id carries over
        assert messages[1] == SseMessage(data="log", event="message", id="7")

    def test_blank_line_without_data_dispatches_nothing(self):
        assert list(iter_sse_messages(["", "event: x", ""])) == []

    def test_value_keeps_inner_spaces(self):
        lines = ["data:  indented", "data:raw", "\r"]
        assert [m.data for m in iter_sse_messages(lines)] == [" indented\nraw"]

    def test_incomplete_trailing_event_is_dropped(self):
        assert list(iter_sse_messages(["data: partial"])) == []


def make_transport(on_data, on_error) -> EventStreamTransport:
    return EventStreamTransport(
        "http://a/stream-logs?file=x.log", on_data=on_data, on_error=on_error
    )


class TestEventStreamTransport:
    """Tests for EventStreamTransport reading a mocked response."""

    def test_delivers_messages_then_reports_end(self, mocker):
        response = mocker.Mock(ok=True, encoding="utf-8")
        response.iter_lines.return_value = iter(
            ["data: one", "", "event: ping", "data: x", "", "data: two", ""]
        )
        get = mocker.patch("tailfleet.transport.requests.get", return_value=response)
        received: list[str] = []
        errors: list[StreamError] = []

        transport = make_transport(received.append, errors.append)
        transport._run()

        assert received == ["one", "two"]
        assert [str(e) for e in errors] == ["stream ended by server"]
        assert transport.closed
        assert get.call_args.kwargs["stream"] is True
        assert get.call_args.kwargs["headers"]["Accept"] == "text/event-stream"

    def test_connect_failure_reported_once(self, mocker):
        mocker.patch(
            "tailfleet.transport.requests.get",
            side_effect=requests.ConnectionError("refused"),
        )
        errors: list[StreamError] = []
        transport = make_transport(lambda data: None, errors.append)
        transport._run()
        transport.close()
        assert len(errors) == 1
        assert "refused" in str(errors[0])

    def test_http_error_status(self, mocker):
        response = mocker.Mock(ok=False, status_code=404)
        mocker.patch("tailfleet.transport.requests.get", return_value=response)
        errors: list[StreamError] = []
        make_transport(lambda data: None, errors.append)._run()
        assert [str(e) for e in errors] == ["HTTP 404"]
        response.close.assert_called()

    def test_read_error(self, mocker):
        def lines(decode_unicode=True):
            yield "data: one"
            yield ""
            raise requests.ConnectionError("reset")

        response = mocker.Mock(ok=True, encoding="utf-8")
        response.iter_lines.side_effect = lines
        mocker.patch("tailfleet.transport.requests.get", return_value=response)
        received: list[str] = []
        errors: list[StreamError] = []
        make_transport(received.append, errors.append)._run()
        assert received == ["one"]
        assert [str(e) for e in errors] == ["reset"]

    def test_nothing_delivered_after_close(self, mocker):
        transport = None

        def lines(decode_unicode=True):
            yield "data: one"
            yield ""
            transport.close()
            yield "data: two"
            yield ""

        response = mocker.Mock(ok=True, encoding="utf-8")
        response.iter_lines.side_effect = lines
        mocker.patch("tailfleet.transport.requests.get", return_value=response)
        received: list[str] = []
        errors: list[StreamError] = []
        transport = make_transport(received.append, errors.append)
        transport._run()
        assert received == ["one"]
        assert errors == []

    def test_close_is_idempotent(self):
        transport = make_transport(lambda data: None, lambda error: None)
        transport.close()
        transport.close()
        assert transport.closed
