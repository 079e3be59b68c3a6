"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

import pytest

from dabootstrap.adapters.mock import MockAdapter, simulated_host
from dabootstrap.adapters.registry import AdapterRegistry
from dabootstrap.adapters.shell.filesystem import FilesystemAdapter
from dabootstrap.core.engine.executor import RunContext, StepReport
from dabootstrap.core.models.config import BootstrapConfig
from tests.helpers import RecordingReporter, ScriptedConfirm


@pytest.fixture
def tools_present():
    """Pretend every host tool is on PATH."""
    with patch(
        "dabootstrap.core.engine.executor.shutil.which",
        side_effect=lambda name: f"/usr/bin/{name}",
    ):
        yield


@pytest.fixture
def tools_missing():
    """Pretend no host tool is on PATH."""
    with patch("dabootstrap.core.engine.executor.shutil.which", return_value=None):
        yield


@pytest.fixture
def host() -> MockAdapter:
    """Simulated host: every action goes here in mock mode."""
    return simulated_host()


@pytest.fixture
def mock_registry(host: MockAdapter) -> AdapterRegistry:
    registry = AdapterRegistry()
    registry.set_mock_mode(True, mock_adapter=host)
    return registry


@pytest.fixture
def shell() -> MockAdapter:
    """Mock standing in for the shell adapter only."""
    return MockAdapter(adapter_name="shell")


@pytest.fixture
def fs_registry(shell: MockAdapter) -> AdapterRegistry:
    """Mocked commands, real filesystem (for tmp_path based tests)."""
    registry = AdapterRegistry()
    registry.register(shell)
    registry.register(FilesystemAdapter())
    return registry


@pytest.fixture
def license_file(tmp_path: Path) -> Path:
    path = tmp_path / "local" / "license.key"
    path.parent.mkdir()
    path.write_text("LICENSE-DATA\n")
    return path


@pytest.fixture
def base_config(tmp_path: Path, license_file: Path) -> BootstrapConfig:
    """Config whose host paths all live under tmp_path."""
    return BootstrapConfig(
        local_license_path=str(license_file),
        alias_ip="203.0.113.10",
        license_target=str(tmp_path / "da" / "conf" / "license.key"),
        panel_config=str(tmp_path / "da" / "conf" / "directadmin.conf"),
    )


@pytest.fixture
def make_run(tmp_path: Path) -> Callable[..., RunContext]:
    """Factory for a RunContext positioned inside a step."""

    def _make(
        config: BootstrapConfig,
        registry: AdapterRegistry,
        *,
        answer: bool = True,
        dry_run: bool = False,
    ) -> RunContext:
        workdir = tmp_path / "work"
        workdir.mkdir(exist_ok=True)
        return RunContext(
            config=config,
            registry=registry,
            workdir=workdir,
            reporter=RecordingReporter(),
            confirm=ScriptedConfirm(answer),
            dry_run=dry_run,
            current=StepReport(key="test", title="test step"),
        )

    return _make
