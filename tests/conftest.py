"""Shared pytest fixtures for TailFleet tests."""

from __future__ import annotations

import json
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
from tailfleet.exceptions import ConnectivityError
from tailfleet.hosts import Host


class FakeTransport:
    """Records how it was opened and closed; lets tests push events."""

    def __init__(self, url: str, on_data, on_error) -> None:
        self.url = url
        self.on_data = on_data
        self.on_error = on_error
        self.close_calls = 0

    def close(self) -> None:
        self.close_calls += 1

    def emit(self, data: str) -> None:
        self.on_data(data)

    def fail(self, error) -> None:
        self.on_error(error)


class FakeTransportFactory:
    """Transport factory that hands out FakeTransport objects."""

    def __init__(self) -> None:
        self.opened: list[FakeTransport] = []

    def __call__(self, url: str, *, on_data, on_error) -> FakeTransport:
        transport = FakeTransport(url, on_data, on_error)
        self.opened.append(transport)
        return transport

    @property
    def last(self) -> FakeTransport:
        return self.opened[-1]


class FakePreflight:
    """Pre-flight check whose outcome is set per host name."""

    def __init__(self) -> None:
        self.down: dict[str, str] = {}
        self.calls: list[str] = []

    def __call__(self, host: Host, timeout: float) -> None:
        self.calls.append(host.name)
        if host.name in self.down:
            raise ConnectivityError(self.down[host.name])


@pytest.fixture
def tmp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as d:
        yield Path(d)


@pytest.fixture
def hosts() -> list[Host]:
    """Two configured hosts."""
    return [
        Host(name="A", url="http://a.example.com:5005"),
        Host(name="B", url="http://b.example.com:5005"),
    ]


@pytest.fixture
def servers_file(tmp_dir: Path) -> Path:
    """Create a JSON host list with two hosts."""
    path = tmp_dir / "servers.json"
    path.write_text(
        json.dumps(
            [
                {"name": "A", "url": "http://a.example.com:5005"},
                {"name": "B", "url": "b.example.com:5005"},
            ]
        )
    )
    return path


@pytest.fixture
def transports() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def preflight() -> FakePreflight:
    return FakePreflight()
