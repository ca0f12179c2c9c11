"""Tests for tailfleet/hosts.py - host list loading and active host selection."""

from __future__ import annotations

from pathlib import Path

import pytest
from tailfleet.constants import DEFAULT_HOST, DEFAULT_HOST_NAME
from tailfleet.hosts import (
    Host,
    HostRegistry,
    build_registry,
    ensure_url_schema,
    load_hosts,
    parse_deep_link,
    parse_servers_text,
    resolve_initial_host,
)


class TestEnsureUrlSchema:
    """Tests for ensure_url_schema."""

    def test_adds_http_to_bare_host(self):
        assert ensure_url_schema("logs.example.com:5005") == "http://logs.example.com:5005"

    def test_keeps_existing_scheme(self):
        assert ensure_url_schema("https://logs.example.com") == "https://logs.example.com"
        assert ensure_url_schema("HTTP://logs.example.com") == "HTTP://logs.example.com"

    def test_strips_whitespace(self):
        assert ensure_url_schema("  host:1  ") == "http://host:1"


class TestParseServersText:
    """Tests for parse_servers_text."""

    def test_plain_json(self):
        hosts = parse_servers_text('[{"name": "A", "url": "http://a:1"}]')
        assert hosts == [Host(name="A", url="http://a:1")]

    def test_servers_js_script(self):
        text = """
        // Servers shown in the [host] menu
        window.APP_SERVERS = [
          // {"name": "old", "url": "old.example.com"},
          {"name": "prod", "url": "prod.example.com:5005"},
          {"name": "dev", "url": "https://dev.example.com"}
        ];
        """
        hosts = parse_servers_text(text)
        assert [h.name for h in hosts] == ["prod", "dev"]
        assert hosts[0].url == "http://prod.example.com:5005"
        assert hosts[1].url == "https://dev.example.com"

    def test_skips_incomplete_and_duplicate_entries(self):
        text = (
            '[{"name": "A", "url": "a"}, {"name": "B"}, "junk",'
            ' {"name": "A", "url": "other"}, {"name": "C", "url": "c"}]'
        )
        hosts = parse_servers_text(text)
        assert [h.name for h in hosts] == ["A", "C"]
        assert hosts[0].url == "http://a"

    def test_no_array_raises(self):
        with pytest.raises(ValueError):
            parse_servers_text("window.APP_SERVERS = null;")

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError):
            parse_servers_text("[{name: A}]")


class TestLoadHosts:
    """Tests for load_hosts."""

    def test_loads_file(self, servers_file: Path):
        hosts = load_hosts(servers_file)
        assert [h.name for h in hosts] == ["A", "B"]
        assert hosts[1].url == "http://b.example.com:5005"

    def test_missing_file_is_empty(self, tmp_dir: Path):
        assert load_hosts(tmp_dir / "missing.json") == []

    def test_invalid_file_is_empty(self, tmp_dir: Path, caplog):
        path = tmp_dir / "servers.json"
        path.write_text("not a host list")
        with caplog.at_level("WARNING", logger="tailfleet"):
            assert load_hosts(path) == []
        assert "Invalid host list" in caplog.text


class TestParseDeepLink:
    """Tests for parse_deep_link."""

    def test_host_and_file(self):
        link = parse_deep_link("http://viewer/?host=prod&file=app.log")
        assert link.host == "prod"
        assert link.file == "app.log"

    def test_fragment_is_appended_to_file(self):
        link = parse_deep_link("http://viewer/?file=app.log#L120")
        assert link.host is None
        assert link.file == "app.log#L120"

    def test_empty_query(self):
        link = parse_deep_link("http://viewer/")
        assert link.host is None
        assert link.file is None


class TestResolveInitialHost:
    """Tests for resolve_initial_host."""

    def test_first_listed_host(self, hosts: list[Host]):
        assert resolve_initial_host(hosts) == hosts[0]

    def test_default_without_hosts(self):
        host = resolve_initial_host([])
        assert host == Host(name=DEFAULT_HOST_NAME, url=DEFAULT_HOST)

    def test_override_by_name(self, hosts: list[Host]):
        assert resolve_initial_host(hosts, "B") == hosts[1]

    def test_override_by_url(self, hosts: list[Host]):
        assert resolve_initial_host(hosts, "b.example.com:5005") == hosts[1]

    def test_override_ad_hoc(self, hosts: list[Host]):
        host = resolve_initial_host(hosts, "c.example.com")
        assert host == Host(name="c.example.com", url="http://c.example.com")


class TestHostRegistry:
    """Tests for HostRegistry."""

    def test_select_bumps_generation_and_notifies(self, hosts: list[Host]):
        registry = HostRegistry(hosts)
        seen = []
        registry.subscribe(lambda prev, cur: seen.append((prev.name, cur.name, registry.generation)))

        assert registry.select(hosts[1]) is True
        assert registry.active == hosts[1]
        assert registry.generation == 1
        # Listener ran before select returned, with the new generation visible
        assert seen == [("A", "B", 1)]

    def test_select_active_host_is_noop(self, hosts: list[Host]):
        registry = HostRegistry(hosts)
        seen = []
        registry.subscribe(lambda prev, cur: seen.append(cur))

        assert registry.select(hosts[0]) is False
        assert registry.generation == 0
        assert seen == []

    def test_select_by_name(self, hosts: list[Host]):
        registry = HostRegistry(hosts)
        registry.select_by_name("B")
        assert registry.active.name == "B"
        with pytest.raises(KeyError):
            registry.select_by_name("nope")

    def test_cycle_wraps(self, hosts: list[Host]):
        registry = HostRegistry(hosts)
        registry.cycle(1)
        assert registry.active.name == "B"
        registry.cycle(1)
        assert registry.active.name == "A"
        registry.cycle(-1)
        assert registry.active.name == "B"

    def test_cycle_without_hosts(self):
        registry = HostRegistry([])
        assert registry.cycle(1) is False
        assert registry.implicit

    def test_all_hosts_includes_ad_hoc_active(self, hosts: list[Host]):
        ad_hoc = Host(name="x", url="http://x")
        registry = HostRegistry(hosts, active=ad_hoc)
        assert registry.all_hosts() == [*hosts, ad_hoc]
        registry.cycle(1)
        assert registry.active == hosts[0]
        assert registry.all_hosts() == hosts


class TestBuildRegistry:
    """Tests for build_registry."""

    def test_link_selects_host_and_file(self, servers_file: Path):
        registry, filename = build_registry(
            servers_file, link="http://viewer/?host=B&file=app.log"
        )
        assert registry.active.name == "B"
        assert filename == "app.log"

    def test_host_override_beats_link(self, servers_file: Path):
        registry, _ = build_registry(
            servers_file, host_override="A", link="http://viewer/?host=B"
        )
        assert registry.active.name == "A"

    def test_missing_file_uses_default_host(self, tmp_dir: Path):
        registry, filename = build_registry(tmp_dir / "none.json")
        assert registry.implicit
        assert registry.active.url == DEFAULT_HOST
        assert filename is None
