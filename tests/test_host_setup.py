"""
Tests for host preparation steps — preflight, packages, SELinux, firewall.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from dabootstrap.adapters.mock import MockAdapter
from dabootstrap.core.engine.executor import BootstrapError
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.services.firewall import firewall_commands, open_firewall
from dabootstrap.core.services.packages import install_prerequisites
from dabootstrap.core.services.preflight import check_preconditions, is_http_url, is_https
from dabootstrap.core.services.selinux import relax_selinux

# ── Preflight ───────────────────────────────────────────────────────


class TestPreflight:
    def test_url_schemes(self):
        assert is_https("HTTPS://partner.example")
        assert not is_https("http://partner.example")
        assert is_http_url("http://partner.example")
        assert not is_http_url("ftp://partner.example")

    def test_requires_root(self, make_run, fs_registry, base_config):
        with patch("dabootstrap.core.services.preflight.os.geteuid", return_value=1000):
            with pytest.raises(BootstrapError, match="must be run as root"):
                check_preconditions(make_run(base_config, fs_registry))

    def test_root_passes(self, make_run, fs_registry, base_config):
        with patch("dabootstrap.core.services.preflight.os.geteuid", return_value=0):
            run = make_run(base_config, fs_registry)
            check_preconditions(run)
            assert "ALIAS: 203.0.113.10/32" in run.current.notes

    def test_root_bypassed_in_dry_run(self, make_run, fs_registry, base_config):
        with patch("dabootstrap.core.services.preflight.os.geteuid", return_value=1000):
            run = make_run(base_config, fs_registry, dry_run=True)
            check_preconditions(run)
            assert any("Root check bypassed" in n for n in run.current.notes)

    def test_root_bypassed_in_mock_mode(self, make_run, mock_registry, base_config):
        with patch("dabootstrap.core.services.preflight.os.geteuid", return_value=1000):
            check_preconditions(make_run(base_config, mock_registry))

    def test_no_license_source(self, make_run, mock_registry):
        with pytest.raises(BootstrapError, match="No license source"):
            check_preconditions(make_run(BootstrapConfig(), mock_registry))

    def test_bad_installer_scheme(self, make_run, mock_registry, base_config):
        config = base_config.model_copy(update={"custom_installer_url": "file:///tmp/x.sh"})
        with pytest.raises(BootstrapError, match="CUSTOM_INSTALLER_URL"):
            check_preconditions(make_run(config, mock_registry))


# ── Packages ────────────────────────────────────────────────────────


class TestPackages:
    def test_installs(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(prerequisite_packages=["curl", "firewalld"]), mock_registry)
        install_prerequisites(run)
        assert host.commands() == [
            ["dnf", "-y", "makecache"],
            ["dnf", "-y", "install", "curl", "firewalld"],
        ]

    def test_failure_is_warning(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("packages.install", error="No match for argument")
        run = make_run(BootstrapConfig(), mock_registry)
        install_prerequisites(run)
        assert run.current.status == "warn"

    def test_no_dnf(self, make_run, fs_registry, shell: MockAdapter, tools_missing):
        run = make_run(BootstrapConfig(), fs_registry)
        install_prerequisites(run)
        assert shell.call_count == 0
        assert run.current.status == "warn"

    def test_empty_list(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(prerequisite_packages=[]), mock_registry)
        install_prerequisites(run)
        assert run.current.status == "skipped"
        assert host.call_count == 0


# ── SELinux ─────────────────────────────────────────────────────────


class TestSelinux:
    def test_permissive_left_alone(self, make_run, mock_registry, host: MockAdapter):
        relax_selinux(make_run(BootstrapConfig(), mock_registry))
        assert host.action_ids == ["selinux.getenforce"]

    def test_enforcing_relaxed(self, make_run, fs_registry, shell: MockAdapter, tools_present,
                               tmp_path: Path):
        selinux_conf = tmp_path / "selinux-config"
        selinux_conf.write_text("# comment\nSELINUX=enforcing\nSELINUXTYPE=targeted\n")
        shell.set_output("selinux.getenforce", "Enforcing\n")

        run = make_run(BootstrapConfig(), fs_registry)
        relax_selinux(run, config_path=str(selinux_conf))

        assert ["setenforce", "0"] in shell.commands()
        assert selinux_conf.read_text() == "# comment\nSELINUX=permissive\nSELINUXTYPE=targeted\n"

    def test_disabled_config_untouched(self, make_run, fs_registry, shell: MockAdapter,
                                       tools_present, tmp_path: Path):
        selinux_conf = tmp_path / "selinux-config"
        selinux_conf.write_text("SELINUX=disabled\n")
        shell.set_output("selinux.getenforce", "Enforcing")

        relax_selinux(make_run(BootstrapConfig(), fs_registry), config_path=str(selinux_conf))
        assert selinux_conf.read_text() == "SELINUX=disabled\n"

    def test_no_getenforce(self, make_run, fs_registry, shell: MockAdapter, tools_missing):
        run = make_run(BootstrapConfig(), fs_registry)
        relax_selinux(run)
        assert run.current.status == "skipped"
        assert shell.call_count == 0


# ── Firewall ────────────────────────────────────────────────────────


class TestFirewall:
    def test_commands(self):
        assert firewall_commands(["2222/tcp"], ["https"]) == [
            ("firewall.port-2222/tcp", ["firewall-cmd", "--permanent", "--add-port=2222/tcp"]),
            ("firewall.service-https", ["firewall-cmd", "--permanent", "--add-service=https"]),
        ]

    def test_opens_ports(self, make_run, mock_registry, host: MockAdapter):
        open_firewall(make_run(BootstrapConfig(), mock_registry))
        assert host.commands() == [
            ["systemctl", "enable", "--now", "firewalld"],
            ["firewall-cmd", "--permanent", "--add-port=2222/tcp"],
            ["firewall-cmd", "--permanent", "--add-service=http"],
            ["firewall-cmd", "--permanent", "--add-service=https"],
            ["firewall-cmd", "--reload"],
        ]

    def test_skip_flag(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(skip_firewall=True), mock_registry)
        open_firewall(run)
        assert run.current.status == "skipped"
        assert host.call_count == 0

    def test_failures_do_not_abort(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("firewall.enable", error="Unit firewalld.service not found.")
        run = make_run(BootstrapConfig(), mock_registry)
        open_firewall(run)
        assert run.current.status == "warn"
        assert host.action_ids[-1] == "firewall.reload"
