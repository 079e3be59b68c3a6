"""
Tests for the custom installer step.
"""

import pytest

from dabootstrap.adapters.mock import MockAdapter
from dabootstrap.core.engine.executor import BootstrapError
from dabootstrap.core.models.config import BootstrapConfig
from dabootstrap.core.services.installer import preview, run_custom_installer

URL = "https://partner.example/setup.sh"
SCRIPT = "#!/bin/bash\necho one\necho two\necho three\n"


def _config(**kwargs) -> BootstrapConfig:
    return BootstrapConfig(custom_installer_url=URL, preview_lines=2, **kwargs)


class TestPreview:
    def test_truncates(self):
        assert preview("a\nb\nc\n", 2) == "a\nb"

    def test_short_text(self):
        assert preview("only\n", 60) == "only"


class TestRunCustomInstaller:
    def test_skipped_without_url(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(BootstrapConfig(), mock_registry)
        run_custom_installer(run)
        assert run.current.status == "skipped"
        assert host.call_count == 0

    def test_download_preview_run(self, make_run, mock_registry, host: MockAdapter):
        host.set_output("installer.read", SCRIPT)
        run = make_run(_config(), mock_registry)
        run_custom_installer(run)

        assert host.action_ids == [
            "installer.download",
            "installer.chmod",
            "installer.read",
            "installer.run",
        ]
        script = host.params_for("installer.chmod")["path"]
        assert script.startswith(str(run.workdir))
        assert host.params_for("installer.chmod")["mode"] == 0o700

        title, text = run.reporter.blocks[0]
        assert "first 2 lines" in title
        assert text == "#!/bin/bash\necho one\n---- end preview ----"

        params = host.params_for("installer.run")
        assert params["command"] == ["/bin/bash", script]
        assert params["interactive"] is True
        assert params["timeout"] is None
        assert run.confirm.questions == ["Run the downloaded installer script now?"]

    def test_declined(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(_config(), mock_registry, answer=False)
        with pytest.raises(BootstrapError, match="User cancelled running installer."):
            run_custom_installer(run)
        assert "installer.run" not in host.action_ids

    def test_noninteractive_runs_without_prompt(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(_config(noninteractive=True), mock_registry, answer=False)
        run_custom_installer(run)
        assert run.confirm.questions == []
        assert "installer.run" in host.action_ids

    def test_plain_http_declined(self, make_run, mock_registry, host: MockAdapter):
        config = BootstrapConfig(custom_installer_url="http://partner.example/setup.sh")
        run = make_run(config, mock_registry, answer=False)
        with pytest.raises(BootstrapError, match="Cancelled by user."):
            run_custom_installer(run)
        assert host.call_count == 0

    def test_bad_scheme(self, make_run, mock_registry):
        config = BootstrapConfig(custom_installer_url="ftp://partner.example/setup.sh")
        with pytest.raises(BootstrapError, match="must start with http"):
            run_custom_installer(make_run(config, mock_registry))

    def test_download_failure(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("installer.download", error="curl: (6) Could not resolve host")
        with pytest.raises(BootstrapError, match=f"Failed to download installer from {URL}"):
            run_custom_installer(make_run(_config(), mock_registry))

    def test_installer_failure_is_warning(self, make_run, mock_registry, host: MockAdapter):
        host.set_failure("installer.run", error="exit 1")
        run = make_run(_config(), mock_registry)
        run_custom_installer(run)
        assert run.current.status == "warn"
        assert "Installer exited with non-zero status" in run.current.warnings[0]

    def test_dry_run(self, make_run, mock_registry, host: MockAdapter):
        run = make_run(_config(), mock_registry, dry_run=True)
        run_custom_installer(run)
        assert host.call_count == 0
        assert run.confirm.questions == []
        assert any(n.startswith("[dry-run]") for n in run.current.notes)
