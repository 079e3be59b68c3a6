"""
Tests for network detection and the alias step.
"""

import pytest

from dabootstrap.adapters.mock import MockAdapter
from dabootstrap.core.engine.executor import BootstrapError
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.services.network import (
    add_alias,
    detect_connection,
    detect_interface,
    detect_network,
    find_connection,
    parse_connected_device,
    parse_link_names,
    parse_route_device,
    split_terse,
)

# ── Parsers ─────────────────────────────────────────────────────────


class TestParsers:
    def test_split_terse_escapes(self):
        assert split_terse(r"Wired\: office:eth0") == ["Wired: office", "eth0"]
        assert split_terse(r"back\\slash:eth1") == ["back\\slash", "eth1"]

    def test_route_device(self):
        output = "8.8.8.8 via 10.0.0.1 dev ens3 src 10.0.0.5 uid 0\n    cache"
        assert parse_route_device(output) == "ens3"

    def test_route_device_missing(self):
        assert parse_route_device("unreachable") is None
        assert parse_route_device("ends with dev") is None

    def test_connected_device_exact_state(self):
        output = "lo:connected (externally)\ndocker0:disconnected\neth1:connected\n"
        assert parse_connected_device(output) == "eth1"

    def test_connected_device_none(self):
        assert parse_connected_device("eth0:disconnected\n") is None

    def test_link_names(self):
        output = (
            "1: lo: <LOOPBACK,UP,LOWER_UP> mtu 65536\n"
            "2: eth0: <BROADCAST,MULTICAST,UP> mtu 1500\n"
            "3: veth1@if4: <BROADCAST> mtu 1500\n"
        )
        assert parse_link_names(output) == ["eth0", "veth1"]

    def test_find_connection(self):
        output = "Wired connection 1:eth1\nSystem eth0:eth0\n\n"
        assert find_connection(output, "eth0") == "System eth0"
        assert find_connection(output, "ens3") is None


# ── Interface detection ─────────────────────────────────────────────


class TestDetectInterface:
    def test_override(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(iface="ens5"), mock_registry)
        assert detect_interface(run) == ("ens5", "override")
        assert host.call_count == 0

    def test_route(self, make_run, mock_registry):
        run = make_run(BootstrapConfig(probe_address="1.1.1.1"), mock_registry)
        assert detect_interface(run) == ("eth0", "route")

    def test_probe_address_used(self, make_run, mock_registry, host: MockAdapter):
        detect_interface(make_run(BootstrapConfig(probe_address="1.1.1.1"), mock_registry))
        assert host.commands()[0] == ["ip", "route", "get", "1.1.1.1"]

    def test_nmcli_fallback(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("network.route-probe")
        run = make_run(BootstrapConfig(), mock_registry)
        assert detect_interface(run) == ("eth0", "nmcli")

    def test_link_fallback(self, make_run, mock_registry, host: MockAdapter):
        host.set_output("network.route-probe", "unreachable")
        host.set_output("network.device-status", "eth0:disconnected")
        run = make_run(BootstrapConfig(), mock_registry)
        assert detect_interface(run) == ("eth0", "link")

    def test_nothing_found(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("network.route-probe")
        host.set_failure("network.device-status")
        host.set_output("network.link-list", "1: lo: <LOOPBACK,UP>")
        run = make_run(BootstrapConfig(), mock_registry)
        with pytest.raises(BootstrapError, match="set IFACE manually"):
            detect_interface(run)

    def test_probes_run_in_dry_run(self, make_run, mock_registry):
        run = make_run(BootstrapConfig(), mock_registry, dry_run=True)
        assert detect_interface(run) == ("eth0", "route")


class TestDetectConnection:
    def test_active_first(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(), mock_registry)
        assert detect_connection(run, "eth0") == "System eth0"
        assert "network.all-connections" not in host.action_ids

    def test_falls_back_to_all_profiles(self, make_run, mock_registry, host: MockAdapter):
        host.set_output("network.active-connections", "")
        host.set_output("network.all-connections", "Wired connection 1:eth0")
        run = make_run(BootstrapConfig(), mock_registry)
        assert detect_connection(run, "eth0") == "Wired connection 1"

    def test_none(self, make_run, mock_registry, host: MockAdapter):
        host.set_output("network.active-connections", "")
        host.set_output("network.all-connections", "")
        assert detect_connection(make_run(BootstrapConfig(), mock_registry), "eth0") is None

    def test_without_nmcli(self, make_run, fs_registry, shell: MockAdapter, tools_missing):
        assert detect_connection(make_run(BootstrapConfig(), fs_registry), "eth0") is None
        assert shell.call_count == 0


class TestDetectNetworkStep:
    def test_records_facts(self, make_run, mock_registry):
        run = make_run(BootstrapConfig(), mock_registry)
        detect_network(run)
        assert run.facts.iface == "eth0"
        assert run.facts.iface_source == "route"
        assert run.facts.connection == "System eth0"
        assert "Chosen interface: eth0 (via route)" in run.current.notes


# ── Alias ───────────────────────────────────────────────────────────


class TestAddAlias:
    def test_skipped_without_alias(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(), mock_registry)
        add_alias(run)
        assert run.current.status == "skipped"
        assert host.call_count == 0

    def test_existing_connection(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="203.0.113.10"), mock_registry)
        run.facts.iface = "eth0"
        run.facts.connection = "System eth0"
        add_alias(run)

        assert host.commands() == [
            ["ip", "addr", "add", "203.0.113.10/32", "dev", "eth0"],
            ["nmcli", "connection", "modify", "System eth0", "+ipv4.addresses", "203.0.113.10/32"],
            ["nmcli", "connection", "modify", "System eth0", "ipv4.never-default", "yes"],
            ["nmcli", "connection", "up", "System eth0"],
        ]
        assert run.facts.alias_applied
        assert not run.facts.connection_created
        assert run.current.status == "ok"

    def test_creates_connection(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="203.0.113.10", alias_prefix=24), mock_registry)
        run.facts.iface = "eth0"
        add_alias(run)

        assert host.action_ids == ["alias.ip-add", "alias.nm-add", "alias.nm-up"]
        add_cmd = host.params_for("alias.nm-add")["command"]
        assert add_cmd[add_cmd.index("con-name") + 1] == "alias-203.0.113.10"
        assert add_cmd[add_cmd.index("ipv4.addresses") + 1] == "203.0.113.10/24"
        assert run.facts.connection == "alias-203.0.113.10"
        assert run.facts.connection_created

    def test_existing_address_is_a_warning(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("alias.ip-add", error="RTNETLINK answers: File exists", return_code=2)
        run = make_run(BootstrapConfig(alias_ip="203.0.113.10"), mock_registry)
        run.facts.iface = "eth0"
        run.facts.connection = "System eth0"
        add_alias(run)

        assert run.current.status == "warn"
        assert "File exists" in run.current.warnings[0]
        assert not run.facts.alias_applied
        assert "alias.nm-up" in host.action_ids

    def test_dry_run_changes_nothing(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="203.0.113.10"), mock_registry, dry_run=True)
        run.facts.iface = "eth0"
        run.facts.connection = "System eth0"
        add_alias(run)

        assert host.call_count == 0
        assert all(r.skipped for r in run.current.receipts)

    def test_ipv6_existing_connection(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="2001:db8::10", alias_prefix=64), mock_registry)
        run.facts.iface = "eth0"
        run.facts.connection = "System eth0"
        add_alias(run)

        assert host.commands()[1:3] == [
            ["nmcli", "connection", "modify", "System eth0", "+ipv6.addresses", "2001:db8::10/64"],
            ["nmcli", "connection", "modify", "System eth0", "ipv6.never-default", "yes"],
        ]
        assert not any("+ipv4.addresses" in cmd for cmd in host.commands())

    def test_ipv6_creates_connection(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="2001:db8::10", alias_prefix=64), mock_registry)
        run.facts.iface = "eth0"
        add_alias(run)

        add_cmd = host.params_for("alias.nm-add")["command"]
        assert add_cmd[add_cmd.index("ipv6.addresses") + 1] == "2001:db8::10/64"
        assert add_cmd[add_cmd.index("ipv6.method") + 1] == "manual"
        assert "ipv4.addresses" not in add_cmd

    def test_no_interface_is_fatal(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(alias_ip="203.0.113.10"), mock_registry)
        with pytest.raises(BootstrapError, match="No interface detected"):
            add_alias(run)
        assert host.call_count == 0
